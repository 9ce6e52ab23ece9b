"""Bounded in-memory sample buffers."""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List

from .models import FocusSample, PointerSample, ScrollSample, TypingSample


@dataclass
class WindowSlice:
    """Samples of each category that fall inside one analysis window."""

    typing: List[TypingSample] = field(default_factory=list)
    pointer: List[PointerSample] = field(default_factory=list)
    scroll: List[ScrollSample] = field(default_factory=list)
    focus: List[FocusSample] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.typing) + len(self.pointer) + len(self.scroll) + len(self.focus)


class SampleStore:
    """Four ordered sample buffers, bounded by count and by age.

    Pointer and scroll buffers are ring buffers that evict their oldest
    sample on overflow. Age is enforced by ``prune``, which the engine runs
    after each analysis cycle rather than on every insert. Not thread-safe:
    callers hold the engine lock.
    """

    def __init__(self, pointer_capacity: int = 100, scroll_capacity: int = 50) -> None:
        if pointer_capacity <= 0 or scroll_capacity <= 0:
            raise ValueError("buffer capacities must be positive")

        self.pointer_capacity = pointer_capacity
        self.scroll_capacity = scroll_capacity

        self.typing: List[TypingSample] = []
        self.pointer: Deque[PointerSample] = deque(maxlen=pointer_capacity)
        self.scroll: Deque[ScrollSample] = deque(maxlen=scroll_capacity)
        self.focus: List[FocusSample] = []

    def add_key_down(self, key: str, timestamp: float) -> TypingSample:
        sample = TypingSample(timestamp=timestamp, key=key)
        self.typing.append(sample)
        return sample

    def resolve_key_up(self, key: str, timestamp: float) -> bool:
        """Resolve the press duration of the latest unresolved sample for key.

        Returns False when no unresolved sample matches; the key-up is then
        dropped without touching the buffer.
        """
        for sample in reversed(self.typing):
            if sample.key == key and not sample.resolved:
                sample.press_duration_ms = (timestamp - sample.timestamp) * 1000.0
                return True
        return False

    def add_pointer_move(self, x: float, y: float, timestamp: float) -> None:
        self.pointer.append(PointerSample(timestamp=timestamp, x=x, y=y))

    def add_click(self, timestamp: float) -> None:
        self.pointer.append(PointerSample.click(timestamp))

    def add_scroll(self, position: float, timestamp: float) -> None:
        self.scroll.append(ScrollSample(timestamp=timestamp, position=position))

    def add_focus(self, focused: bool, timestamp: float) -> None:
        self.focus.append(FocusSample(timestamp=timestamp, focused=focused))

    def window(self, now: float, window_s: float) -> WindowSlice:
        """Select samples younger than window_s relative to now."""

        def recent(samples):
            return [s for s in samples if now - s.timestamp < window_s]

        return WindowSlice(
            typing=recent(self.typing),
            pointer=recent(self.pointer),
            scroll=recent(self.scroll),
            focus=recent(self.focus),
        )

    def prune(self, cutoff: float) -> int:
        """Drop samples older than cutoff. Returns the number removed."""
        before = sum(self.counts().values())

        self.typing = [s for s in self.typing if s.timestamp >= cutoff]
        self.pointer = deque(
            (s for s in self.pointer if s.timestamp >= cutoff),
            maxlen=self.pointer_capacity,
        )
        self.scroll = deque(
            (s for s in self.scroll if s.timestamp >= cutoff),
            maxlen=self.scroll_capacity,
        )
        self.focus = [s for s in self.focus if s.timestamp >= cutoff]

        return before - sum(self.counts().values())

    def counts(self) -> Dict[str, int]:
        return {
            "typing": len(self.typing),
            "pointer": len(self.pointer),
            "scroll": len(self.scroll),
            "focus": len(self.focus),
        }

    def clear(self) -> None:
        self.typing.clear()
        self.pointer.clear()
        self.scroll.clear()
        self.focus.clear()
