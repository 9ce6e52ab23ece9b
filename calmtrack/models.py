"""Sample and snapshot models for calmtrack."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union

import orjson

NEUTRAL_SCORE = 50
NEUTRAL_CONFIDENCE = 0.5

# Coordinates recorded for a click; shares the pointer buffer with moves
CLICK_SENTINEL = -1


@dataclass
class TypingSample:
    """Key press; press_duration_ms stays 0 until the key-up resolves it."""

    timestamp: float
    key: str
    press_duration_ms: float = 0.0

    @property
    def resolved(self) -> bool:
        return self.press_duration_ms > 0


@dataclass(frozen=True)
class PointerSample:
    """Pointer position, or a click when both coordinates are the sentinel."""

    timestamp: float
    x: float
    y: float

    @property
    def is_click(self) -> bool:
        return self.x == CLICK_SENTINEL and self.y == CLICK_SENTINEL

    @classmethod
    def click(cls, timestamp: float) -> "PointerSample":
        return cls(timestamp=timestamp, x=CLICK_SENTINEL, y=CLICK_SENTINEL)


@dataclass(frozen=True)
class ScrollSample:
    """Absolute scroll position."""

    timestamp: float
    position: float


@dataclass(frozen=True)
class FocusSample:
    """Window focus (True) or blur (False) transition."""

    timestamp: float
    focused: bool


RawSample = Union[TypingSample, PointerSample, ScrollSample, FocusSample]


class Trend(str, Enum):
    """Short-term direction of the composite score."""

    IMPROVING = "improving"
    WORSENING = "worsening"
    STABLE = "stable"


@dataclass(frozen=True)
class SubMetrics:
    """Per-category sub-scores in [0, 100]."""

    typing: int = NEUTRAL_SCORE
    mouse: int = NEUTRAL_SCORE
    scrolling: int = NEUTRAL_SCORE
    focus: int = NEUTRAL_SCORE


@dataclass(frozen=True)
class AnxietySnapshot:
    """Immutable output record of one analysis cycle."""

    score: int
    confidence: float
    metrics: SubMetrics
    trend: Trend
    timestamp: float

    @classmethod
    def neutral(cls, timestamp: float) -> "AnxietySnapshot":
        """Seed value held before the first analysis cycle."""
        return cls(
            score=NEUTRAL_SCORE,
            confidence=NEUTRAL_CONFIDENCE,
            metrics=SubMetrics(),
            trend=Trend.STABLE,
            timestamp=timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["trend"] = self.trend.value
        return data

    def to_json(self) -> bytes:
        """Compact JSON encoding for exporter subscribers."""
        return orjson.dumps(self.to_dict())
