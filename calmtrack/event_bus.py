"""Snapshot distribution to subscribers."""

import logging
import threading
from typing import Callable, List, Optional

from .ids import generate_subscription_id
from .logging_setup import get_logger, log_once
from .models import AnxietySnapshot

logger = get_logger("event_bus")

SnapshotHandler = Callable[[AnxietySnapshot], None]


class Subscription:
    """Handle returned by subscribe; calling it unsubscribes."""

    def __init__(self, bus: "SnapshotBus", handler: SnapshotHandler) -> None:
        self.subscription_id = generate_subscription_id()
        self.handler = handler
        self._bus = bus

    @property
    def active(self) -> bool:
        return self._bus.is_subscribed(self)

    def unsubscribe(self) -> None:
        self._bus.unsubscribe(self)

    def __call__(self) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        return f"Subscription({self.subscription_id})"


class SnapshotBus:
    """Ordered subscriber registry with per-callback failure isolation."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()
        self.failure_count = 0

    def subscribe(self, handler: SnapshotHandler) -> Subscription:
        subscription = Subscription(self, handler)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def is_subscribed(self, subscription: Subscription) -> bool:
        with self._lock:
            return subscription in self._subscriptions

    def clear(self) -> None:
        with self._lock:
            self._subscriptions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def emit(self, snapshot: AnxietySnapshot) -> int:
        """Deliver snapshot in registration order. Returns successful deliveries."""
        with self._lock:
            subscriptions = list(self._subscriptions)

        delivered = 0
        for subscription in subscriptions:
            # Skip handlers removed by an earlier handler in this same pass
            if not self.is_subscribed(subscription):
                continue
            if self.deliver(subscription, snapshot):
                delivered += 1
        return delivered

    def deliver(self, subscription: Subscription, snapshot: AnxietySnapshot) -> bool:
        """Invoke one handler, logging and absorbing any exception it raises."""
        try:
            subscription.handler(snapshot)
            return True
        except Exception as e:
            self.failure_count += 1
            log_once(
                logger,
                logging.ERROR,
                f"Subscriber {subscription.subscription_id} failed: {type(e).__name__}: {e}",
                key=f"{subscription.subscription_id}:{type(e).__name__}",
                exc_info=True,
            )
            return False


def snapshot_logger(target: Optional[logging.Logger] = None) -> SnapshotHandler:
    """Subscriber that writes each snapshot to a logger at INFO."""
    target = target or get_logger("snapshots")

    def handler(snapshot: AnxietySnapshot) -> None:
        target.info(
            f"score={snapshot.score} confidence={snapshot.confidence:.2f} "
            f"trend={snapshot.trend.value} typing={snapshot.metrics.typing} "
            f"mouse={snapshot.metrics.mouse} scrolling={snapshot.metrics.scrolling} "
            f"focus={snapshot.metrics.focus}"
        )

    return handler
