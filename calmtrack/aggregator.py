"""Combine sub-metrics into an anxiety snapshot."""

from .config import Config, WeightsConfig
from .metrics import focus_metric, pointer_metric, round_half_up, scroll_metric, typing_metric
from .models import AnxietySnapshot, SubMetrics, Trend
from .store import WindowSlice


def composite_score(metrics: SubMetrics, weights: WeightsConfig) -> int:
    """Weighted composite of the four sub-metrics, rounded half-up."""
    return round_half_up(
        metrics.typing * weights.typing
        + metrics.mouse * weights.pointer
        + metrics.scrolling * weights.scroll
        + metrics.focus * weights.focus
    )


def compute_confidence(sample_count: int, saturation: int = 100) -> float:
    """Density proxy: fraction of the saturation sample count, capped at 1."""
    if sample_count <= 0:
        return 0.0
    return min(1.0, sample_count / saturation)


def classify_trend(score: int, previous: int, threshold: int = 5) -> Trend:
    """Compare a composite score against the previous one."""
    if score <= previous - threshold:
        return Trend.IMPROVING
    if score >= previous + threshold:
        return Trend.WORSENING
    return Trend.STABLE


class ScoreAggregator:
    """Runs the calculators over a window slice and builds the snapshot."""

    def __init__(self, config: Config) -> None:
        self.weights = config.weights
        self.analysis = config.analysis

    def compute_metrics(self, window: WindowSlice, now: float) -> SubMetrics:
        return SubMetrics(
            typing=typing_metric(window.typing, now=now),
            mouse=pointer_metric(window.pointer),
            scrolling=scroll_metric(window.scroll),
            focus=focus_metric(window.focus),
        )

    def evaluate(
        self, window: WindowSlice, now: float, previous: AnxietySnapshot
    ) -> AnxietySnapshot:
        """Build the snapshot for one cycle; previous is only read for the trend."""
        metrics = self.compute_metrics(window, now)
        score = composite_score(metrics, self.weights)

        return AnxietySnapshot(
            score=score,
            confidence=compute_confidence(window.total, self.analysis.confidence_saturation),
            metrics=metrics,
            trend=classify_trend(score, previous.score, self.analysis.trend_threshold),
            timestamp=now,
        )
