"""Synthetic event source for tests and embedding hosts."""

import threading
from typing import Callable, Dict, Optional, Sequence, Tuple

_HANDLER_NAMES = (
    "on_key_down",
    "on_key_up",
    "on_pointer_move",
    "on_click",
    "on_scroll",
    "on_focus",
    "on_blur",
)


class FakeInteractionSource:
    """Fake source with proper lifecycle management.

    ``simulate_*`` methods deliver only while running and are serialized by a
    lock; ``emit_*`` methods call the registered handlers directly (inline
    mode, no locking).
    """

    def __init__(self, mode: str = "standard"):
        """Initialize fake source.

        Args:
            mode: "standard" or "inline" - inline mode skips all locking
        """
        self._mode = mode
        self._handlers: Dict[str, Callable] = {}
        self._running = False
        self._lock = threading.Lock()
        self.start_count = 0

    def start(
        self,
        on_key_down,
        on_key_up,
        on_pointer_move,
        on_click,
        on_scroll,
        on_focus,
        on_blur,
    ) -> None:
        """Start fake source (idempotent, re-registers handlers)."""
        handlers = dict(zip(_HANDLER_NAMES, (
            on_key_down, on_key_up, on_pointer_move, on_click, on_scroll, on_focus, on_blur
        )))

        if self._mode == "inline":
            self._handlers = handlers
            self._running = True
            self.start_count += 1
            return

        with self._lock:
            self._handlers = handlers
            if not self._running:
                self._running = True
                self.start_count += 1

    def stop(self) -> None:
        """Stop fake source (idempotent)."""
        if self._mode == "inline":
            self._running = False
            self._handlers = {}
            return

        with self._lock:
            self._running = False
            self._handlers = {}

    def join(self, timeout: float = 2.0) -> bool:
        """Wait for source to finish (always True for the fake source)."""
        return True

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def _dispatch(self, name: str, *args) -> bool:
        if self._mode == "inline":
            return self._call(name, *args)
        with self._lock:
            return self._call(name, *args)

    def _call(self, name: str, *args) -> bool:
        handler = self._handlers.get(name)
        if not self._running or handler is None:
            return False
        handler(*args)
        return True

    def simulate_key_down(self, key: str) -> bool:
        return self._dispatch("on_key_down", key)

    def simulate_key_up(self, key: str) -> bool:
        return self._dispatch("on_key_up", key)

    def simulate_pointer_move(self, x: float, y: float) -> bool:
        return self._dispatch("on_pointer_move", x, y)

    def simulate_click(self) -> bool:
        return self._dispatch("on_click")

    def simulate_scroll(self, position: float) -> bool:
        return self._dispatch("on_scroll", position)

    def simulate_focus(self) -> bool:
        return self._dispatch("on_focus")

    def simulate_blur(self) -> bool:
        return self._dispatch("on_blur")

    # Inline mode methods
    def emit_key(self, key: str, hold_s: float = 0.0, scheduler=None) -> None:
        """Emit a key-down/key-up pair, advancing scheduler by hold_s between."""
        self.simulate_key_down(key)
        if scheduler is not None and hold_s > 0:
            scheduler.advance(hold_s)
        self.simulate_key_up(key)

    def emit_path(
        self,
        points: Sequence[Tuple[float, float]],
        step_s: float = 0.0,
        scheduler=None,
    ) -> None:
        """Emit pointer moves along points, advancing scheduler by step_s each."""
        for i, (x, y) in enumerate(points):
            if scheduler is not None and step_s > 0 and i > 0:
                scheduler.advance(step_s)
            self.simulate_pointer_move(x, y)

    def emit_scrolls(
        self,
        positions: Sequence[float],
        step_s: float = 0.0,
        scheduler=None,
    ) -> None:
        """Emit absolute scroll positions, advancing scheduler by step_s each."""
        for i, position in enumerate(positions):
            if scheduler is not None and step_s > 0 and i > 0:
                scheduler.advance(step_s)
            self.simulate_scroll(position)

    def handler(self, name: str) -> Optional[Callable]:
        """Registered handler by name, for hosts that keep a reference."""
        return self._handlers.get(name)
