"""Behavior engine: ingestion, periodic analysis and snapshot distribution."""

import threading
from enum import Enum
from typing import Any, Dict, Optional

from .aggregator import ScoreAggregator
from .config import Config
from .event_bus import SnapshotBus, SnapshotHandler, Subscription
from .ids import generate_session_id
from .logging_setup import get_logger, setup_logging
from .models import AnxietySnapshot
from .sources import InteractionEventSource, get_event_source, is_test_mode
from .store import SampleStore
from .utils.scheduler import PeriodicTimer, Scheduler, get_scheduler

logger = get_logger("engine")


class TrackingState(Enum):
    """Engine state enumeration."""

    IDLE = "idle"
    TRACKING = "tracking"


class BehaviorEngine:
    """Turns raw interaction events into periodic anxiety snapshots.

    All mutable state lives on the instance: sample buffers, the current
    snapshot, the subscriber registry and the analysis timer. One re-entrant
    lock guards the buffers and the current snapshot so that ingestion from
    listener threads and the analysis tick never interleave; a sample is
    counted by a tick only if it was appended before the tick took the lock.
    Subscribers are called outside the lock.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        event_source: Optional[InteractionEventSource] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """Initialize the engine.

        Args:
            config: Engine configuration (defaults to built-in values)
            event_source: Raw event source (auto-selected based on test mode)
            scheduler: Clock and tick source (auto-selected based on test mode)
        """
        self.config = config or Config()
        self.session_id = generate_session_id()

        log_config = self.config.logging
        setup_logging(
            console_level=log_config.console_level,
            file_level=log_config.file_level,
            session_id=self.session_id,
            log_dir=log_config.log_dir,
            force=True,
        )

        test_mode = is_test_mode()
        self.scheduler = scheduler or get_scheduler(test_mode=test_mode)
        self._event_source = event_source or get_event_source(self.config, test_mode)

        self._state = TrackingState.IDLE
        self._lock = threading.RLock()

        self._store = SampleStore(
            pointer_capacity=self.config.buffers.pointer_capacity,
            scroll_capacity=self.config.buffers.scroll_capacity,
        )
        self._aggregator = ScoreAggregator(self.config)
        self._bus = SnapshotBus()
        self._timer = PeriodicTimer(
            self.scheduler, self.config.analysis.interval_s, self._tick
        )

        self._current = AnxietySnapshot.neutral(self.scheduler.now())
        self._cycles = 0
        self._dropped_key_ups = 0

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state == TrackingState.TRACKING

    @property
    def event_source(self) -> InteractionEventSource:
        return self._event_source

    @property
    def store(self) -> SampleStore:
        return self._store

    # Lifecycle

    def start_tracking(self) -> None:
        """Attach handlers and start the analysis timer. No-op when tracking."""
        with self._lock:
            if self.is_tracking:
                logger.debug("start_tracking ignored, already tracking")
                return
            self._state = TrackingState.TRACKING

        try:
            self._event_source.start(
                on_key_down=self._on_key_down,
                on_key_up=self._on_key_up,
                on_pointer_move=self._on_pointer_move,
                on_click=self._on_click,
                on_scroll=self._on_scroll,
                on_focus=self._on_focus,
                on_blur=self._on_blur,
            )
        except Exception as e:
            logger.error(f"Failed to start event source: {e}")
            logger.info("Continuing without raw event capture (degraded mode)")

        self._timer.start()
        logger.info(f"Tracking started (interval: {self.config.analysis.interval_s}s)")

    def stop_tracking(self) -> None:
        """Stop the analysis timer and detach handlers. No-op when idle."""
        with self._lock:
            if not self.is_tracking:
                return
            self._state = TrackingState.IDLE

        self._timer.stop()

        # Outside the engine lock: a source thread may be waiting on it
        try:
            self._event_source.stop()
        except Exception as e:
            logger.warning(f"Error stopping event source: {e}")

        logger.info(f"Tracking stopped (cycles: {self._cycles})")

    # Distribution

    def subscribe(self, callback: SnapshotHandler) -> Subscription:
        """Register callback and deliver the current snapshot to it at once."""
        subscription = self._bus.subscribe(callback)
        self._bus.deliver(subscription, self.get_current_score())
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._bus.unsubscribe(subscription)

    def get_current_score(self) -> AnxietySnapshot:
        with self._lock:
            return self._current

    # Analysis

    def analyze(self) -> AnxietySnapshot:
        """Run one analysis cycle and broadcast its snapshot."""
        analysis = self.config.analysis

        with self._lock:
            now = self.scheduler.now()
            window = self._store.window(now, analysis.window_s)
            snapshot = self._aggregator.evaluate(window, now, self._current)
            self._current = snapshot
            self._cycles += 1

        logger.debug(
            f"Cycle {self._cycles}: score={snapshot.score} trend={snapshot.trend.value} "
            f"confidence={snapshot.confidence:.2f} samples={window.total}"
        )

        self._bus.emit(snapshot)

        with self._lock:
            removed = self._store.prune(now - analysis.retention_s)
        if removed:
            logger.debug(f"Pruned {removed} samples older than {analysis.retention_s}s")

        return snapshot

    def _tick(self) -> None:
        if not self.is_tracking:
            return
        self.analyze()

    # Ingestion handlers

    def _on_key_down(self, key: str) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_key_down(key, self.scheduler.now())

    def _on_key_up(self, key: str) -> None:
        with self._lock:
            if not self.is_tracking:
                return
            if not self._store.resolve_key_up(key, self.scheduler.now()):
                self._dropped_key_ups += 1
                logger.debug("Dropped key-up without matching key-down")

    def _on_pointer_move(self, x: float, y: float) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_pointer_move(x, y, self.scheduler.now())

    def _on_click(self) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_click(self.scheduler.now())

    def _on_scroll(self, position: float) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_scroll(position, self.scheduler.now())

    def _on_focus(self) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_focus(True, self.scheduler.now())

    def _on_blur(self) -> None:
        with self._lock:
            if self.is_tracking:
                self._store.add_focus(False, self.scheduler.now())

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        with self._lock:
            return {
                "session_id": self.session_id,
                "state": self._state.value,
                "cycles": self._cycles,
                "subscribers": len(self._bus),
                "subscriber_failures": self._bus.failure_count,
                "dropped_key_ups": self._dropped_key_ups,
                "buffers": self._store.counts(),
                "current": self._current.to_dict(),
            }
