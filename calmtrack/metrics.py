"""Windowed metric calculators.

Each calculator reduces the samples of one category inside the analysis
window to a sub-score in [0, 100]. Higher means more agitated behaviour.
All four are pure functions of their inputs and return the neutral score
when the slice holds too few samples to say anything.

Over a slice whose span is zero, a positive amount (keys, distance, clicks)
is an unbounded rate and lands in the top bucket, while a zero amount has no
rate and lands in the neutral bucket. Jitter and focus changes count as 0.
"""

import math
from typing import Optional, Sequence

from .models import NEUTRAL_SCORE, FocusSample, PointerSample, ScrollSample, TypingSample

MIN_TYPING_SAMPLES = 5
MIN_POINTER_SAMPLES = 10
MIN_POINTER_MOVES = 5
MIN_SCROLL_SAMPLES = 5
MIN_FOCUS_SAMPLES = 2

CORRECTION_KEYS = frozenset({"Backspace", "Delete"})
DEFAULT_PRESS_DURATION_MS = 100.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    The epsilon absorbs binary noise in weighted sums: sub-scores
    (3, 62, 0, 50) under the default weights sum to 24.499999999999996.
    """
    return int(math.floor(value + 0.5 + 1e-9))


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _per_second(count: float, span_s: float) -> float:
    return count / span_s if span_s > 0 else 0.0


def _rate(amount: float, span_s: float) -> float:
    """Amount per second; inf for a positive amount over no time, nan for none.

    nan compares false against every threshold, so it falls through to the
    neutral bucket.
    """
    if span_s > 0:
        return amount / span_s
    return math.inf if amount > 0 else math.nan


def typing_metric(samples: Sequence[TypingSample], now: Optional[float] = None) -> int:
    """Score typing speed, key-press duration and correction ratio.

    Args:
        samples: Typing samples inside the window, oldest first
        now: Analysis time; defaults to the newest sample's timestamp

    Returns:
        Sub-score in [0, 100]
    """
    if len(samples) < MIN_TYPING_SAMPLES:
        return NEUTRAL_SCORE

    if now is None:
        now = samples[-1].timestamp
    span_s = now - samples[0].timestamp

    # Keys per minute
    speed = _rate(len(samples), span_s) * 60.0
    if speed > 150:
        speed_score = 90
    elif speed > 120:
        speed_score = 70
    elif speed < 40:
        speed_score = 80
    else:
        speed_score = 50

    durations = [s.press_duration_ms for s in samples if s.press_duration_ms > 0]
    avg_duration = sum(durations) / len(durations) if durations else DEFAULT_PRESS_DURATION_MS
    if avg_duration < 80:
        duration_score = 80
    elif avg_duration > 200:
        duration_score = 70
    else:
        duration_score = 50

    corrections = sum(1 for s in samples if s.key in CORRECTION_KEYS)
    correction_score = min(100.0, corrections / len(samples) * 500)

    return round_half_up(speed_score * 0.4 + duration_score * 0.3 + correction_score * 0.3)


def pointer_metric(samples: Sequence[PointerSample]) -> int:
    """Score pointer speed, directional jitter and click rate."""
    if len(samples) < MIN_POINTER_SAMPLES:
        return NEUTRAL_SCORE

    clicks = sum(1 for s in samples if s.is_click)
    moves = [s for s in samples if not s.is_click]
    if len(moves) < MIN_POINTER_MOVES:
        return NEUTRAL_SCORE

    distance = 0.0
    direction_changes = 0
    last_dx = last_dy = 0.0
    for prev, cur in zip(moves, moves[1:]):
        dx = cur.x - prev.x
        dy = cur.y - prev.y
        distance += math.hypot(dx, dy)

        if dx != 0 and _sign(dx) != _sign(last_dx):
            direction_changes += 1
        if dy != 0 and _sign(dy) != _sign(last_dy):
            direction_changes += 1

        last_dx, last_dy = dx, dy

    span_s = moves[-1].timestamp - moves[0].timestamp

    speed = _rate(distance, span_s)
    if speed > 800:
        speed_score = 90
    elif speed > 500:
        speed_score = 70
    elif speed < 50:
        speed_score = 60
    else:
        speed_score = 50

    jitter_score = min(100.0, _per_second(direction_changes, span_s) * 10)

    clicks_per_minute = _rate(clicks, span_s) * 60
    if clicks_per_minute > 40:
        click_score = 90
    elif clicks_per_minute > 20:
        click_score = 70
    else:
        click_score = 50

    return round_half_up(speed_score * 0.4 + jitter_score * 0.4 + click_score * 0.2)


def scroll_metric(samples: Sequence[ScrollSample]) -> int:
    """Score scroll speed and direction reversals."""
    if len(samples) < MIN_SCROLL_SAMPLES:
        return NEUTRAL_SCORE

    distance = 0.0
    direction_changes = 0
    last_change = 0.0
    for prev, cur in zip(samples, samples[1:]):
        change = cur.position - prev.position
        distance += abs(change)

        if change != 0 and _sign(change) != _sign(last_change):
            direction_changes += 1

        last_change = change

    span_s = samples[-1].timestamp - samples[0].timestamp

    speed = _rate(distance, span_s)
    if speed > 1000:
        speed_score = 90
    elif speed > 500:
        speed_score = 75
    elif speed < 50:
        speed_score = 60
    else:
        speed_score = 50

    jitter_score = min(100.0, _per_second(direction_changes, span_s) * 25)

    return round_half_up(speed_score * 0.6 + jitter_score * 0.4)


def focus_metric(samples: Sequence[FocusSample]) -> int:
    """Score how often the window gains or loses focus."""
    if len(samples) < MIN_FOCUS_SAMPLES:
        return NEUTRAL_SCORE

    span_min = (samples[-1].timestamp - samples[0].timestamp) / 60.0
    changes_per_minute = len(samples) / span_min if span_min > 0 else 0.0

    if changes_per_minute > 6:
        return 90
    if changes_per_minute > 3:
        return 70
    return 50
