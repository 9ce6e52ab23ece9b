"""Test harness helpers for engine and calculator tests."""

from typing import List, Optional, Sequence, Tuple

from calmtrack.config import Config
from calmtrack.engine import BehaviorEngine
from calmtrack.models import FocusSample, PointerSample, ScrollSample, TypingSample
from calmtrack.sources.fake import FakeInteractionSource
from calmtrack.utils.scheduler import ManualScheduler


def build_inline_engine(
    config: Optional[Config] = None,
    scheduler: Optional[ManualScheduler] = None,
    fake_source: Optional[FakeInteractionSource] = None,
) -> Tuple[BehaviorEngine, FakeInteractionSource, ManualScheduler]:
    """Build an engine wired to an inline fake source and a manual scheduler."""
    if scheduler is None:
        scheduler = ManualScheduler(start_time=1000.0)
    if fake_source is None:
        fake_source = FakeInteractionSource(mode="inline")

    engine = BehaviorEngine(config=config, event_source=fake_source, scheduler=scheduler)
    return engine, fake_source, scheduler


class SnapshotCollector:
    """Subscriber that records every snapshot it receives."""

    def __init__(self):
        self.snapshots = []

    def __call__(self, snapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def last(self):
        return self.snapshots[-1]


def typing_samples(
    count: int,
    step_s: float = 1.0,
    duration_ms: float = 100.0,
    keys: Optional[Sequence[str]] = None,
    start: float = 0.0,
) -> List[TypingSample]:
    keys = list(keys) if keys is not None else ["a"] * count
    return [
        TypingSample(timestamp=start + i * step_s, key=keys[i], press_duration_ms=duration_ms)
        for i in range(count)
    ]


def pointer_path(
    points: Sequence[Tuple[float, float]], step_s: float = 1.0, start: float = 0.0
) -> List[PointerSample]:
    return [
        PointerSample(timestamp=start + i * step_s, x=x, y=y) for i, (x, y) in enumerate(points)
    ]


def scroll_samples(
    positions: Sequence[float], step_s: float = 1.0, start: float = 0.0
) -> List[ScrollSample]:
    return [
        ScrollSample(timestamp=start + i * step_s, position=p) for i, p in enumerate(positions)
    ]


def focus_samples(count: int, step_s: float = 1.0, start: float = 0.0) -> List[FocusSample]:
    return [
        FocusSample(timestamp=start + i * step_s, focused=(i % 2 == 0)) for i in range(count)
    ]
