"""Unit tests for score aggregation."""

import pytest
from pydantic import ValidationError

from calmtrack.aggregator import (
    ScoreAggregator,
    classify_trend,
    composite_score,
    compute_confidence,
)
from calmtrack.config import Config, WeightsConfig
from calmtrack.models import AnxietySnapshot, SubMetrics, Trend
from calmtrack.store import WindowSlice
from tests.helpers.engine_harness import pointer_path, scroll_samples, typing_samples


class TestCompositeScore:
    """Test weighted composite scoring."""

    def test_neutral(self):
        assert composite_score(SubMetrics(), WeightsConfig()) == 50

    @pytest.mark.parametrize(
        "metrics, expected",
        [
            (SubMetrics(typing=90, mouse=70, scrolling=60, focus=90), 75),
            (SubMetrics(typing=61, mouse=50, scrolling=50, focus=50), 53),
            (SubMetrics(typing=55, mouse=50, scrolling=50, focus=50), 52),
            (SubMetrics(typing=50, mouse=50, scrolling=50, focus=55), 51),
            (SubMetrics(typing=3, mouse=62, scrolling=0, focus=50), 25),
            (SubMetrics(typing=0, mouse=0, scrolling=0, focus=0), 0),
            (SubMetrics(typing=100, mouse=100, scrolling=100, focus=100), 100),
        ],
    )
    def test_weighted_round_half_up(self, metrics, expected):
        assert composite_score(metrics, WeightsConfig()) == expected

    def test_custom_weights(self):
        weights = WeightsConfig(typing=1.0, pointer=0.0, scroll=0.0, focus=0.0)
        assert composite_score(SubMetrics(typing=80), weights) == 80

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="weights must sum to 1.0"):
            WeightsConfig(typing=0.5, pointer=0.5, scroll=0.5, focus=0.5)


class TestConfidence:
    """Test sample density confidence."""

    def test_bounds(self):
        assert compute_confidence(0) == 0.0
        assert compute_confidence(100) == 1.0
        assert compute_confidence(150) == 1.0

    def test_proportional_below_saturation(self):
        assert compute_confidence(25) == pytest.approx(0.25)
        assert compute_confidence(50) == pytest.approx(0.5)

    def test_monotonic(self):
        values = [compute_confidence(n) for n in range(0, 160)]
        assert values == sorted(values)

    def test_custom_saturation(self):
        assert compute_confidence(10, saturation=20) == pytest.approx(0.5)


class TestTrend:
    """Test trend classification."""

    @pytest.mark.parametrize(
        "score, previous, expected",
        [
            (60, 65, Trend.IMPROVING),
            (70, 60, Trend.WORSENING),
            (62, 60, Trend.STABLE),
            (55, 60, Trend.IMPROVING),
            (65, 60, Trend.WORSENING),
            (64, 60, Trend.STABLE),
            (56, 60, Trend.STABLE),
            (50, 50, Trend.STABLE),
        ],
    )
    def test_classification(self, score, previous, expected):
        assert classify_trend(score, previous) == expected

    def test_trend_values(self):
        assert Trend.IMPROVING.value == "improving"
        assert Trend.WORSENING.value == "worsening"
        assert Trend.STABLE.value == "stable"


class TestScoreAggregator:
    """Test full snapshot evaluation."""

    def test_empty_window_is_neutral(self):
        aggregator = ScoreAggregator(Config())
        previous = AnxietySnapshot.neutral(0.0)

        snapshot = aggregator.evaluate(WindowSlice(), now=10.0, previous=previous)

        assert snapshot.score == 50
        assert snapshot.confidence == 0.0
        assert snapshot.metrics == SubMetrics()
        assert snapshot.trend == Trend.STABLE
        assert snapshot.timestamp == 10.0

    def test_agitated_window(self):
        aggregator = ScoreAggregator(Config())
        window = WindowSlice(
            pointer=pointer_path([((i % 2) * 1000, 0) for i in range(10)], step_s=0.1),
            scroll=scroll_samples([0, 2000, 0, 2000, 0, 2000]),
        )

        snapshot = aggregator.evaluate(window, now=6.0, previous=AnxietySnapshot.neutral(0.0))

        assert snapshot.metrics.mouse == 86
        assert snapshot.metrics.scrolling == 64
        assert snapshot.score == 65
        assert snapshot.confidence == pytest.approx(0.16)
        assert snapshot.trend == Trend.WORSENING

    def test_typing_uses_analysis_time(self):
        aggregator = ScoreAggregator(Config())
        window = WindowSlice(typing=typing_samples(5, step_s=1.0, duration_ms=100))

        metrics = aggregator.compute_metrics(window, now=60.0)

        assert metrics.typing == 47

    def test_previous_snapshot_not_mutated(self):
        aggregator = ScoreAggregator(Config())
        previous = AnxietySnapshot.neutral(0.0)

        aggregator.evaluate(WindowSlice(), now=1.0, previous=previous)

        assert previous == AnxietySnapshot.neutral(0.0)
