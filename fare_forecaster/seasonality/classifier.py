"""
Tertile season classification.

Algorithm
---------
1. Sort composite scores ascending.
2. low_threshold  = sorted[floor(n * 0.33)]
3. high_threshold = sorted[floor(n * 0.67)]
4. score <= low_threshold  → "low"
   score >= high_threshold → "high"
   otherwise               → "normal"

Thresholds are picked by index position, not interpolated.  When several
periods share a score at a threshold, the ``<=`` / ``>=`` comparisons pull
all of them into the outer bucket, so buckets need not hold exactly a third
of the periods.  If every score is identical, every period is ``low``
(the ``<=`` test is applied first).

Fewer than ``min_periods`` (3) scored periods cannot be split into tertiles;
``InsufficientDataError`` is raised instead of guessing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from fare_forecaster.config import SeasonConfig
from fare_forecaster.models.season import SeasonScore
from fare_forecaster.seasonality.scorer import ScoredPeriod

logger = logging.getLogger(__name__)


# ── Custom exceptions ─────────────────────────────────────────────────────────


class InsufficientDataError(ValueError):
    """Raised when too few periods are available for tertile classification.

    Attributes:
        period_count: Number of periods supplied.
        min_periods:  Number of periods required.
    """

    def __init__(self, period_count: int, min_periods: int = 3) -> None:
        self.period_count = period_count
        self.min_periods = min_periods
        super().__init__(
            f"Insufficient data: {period_count} period(s) available, "
            f"at least {min_periods} required for season classification."
        )


# ── Policy ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TertilePolicy:
    """Index positions of the low / high thresholds within the sorted scores."""

    low_position:  float = 0.33
    high_position: float = 0.67
    min_periods:   int = 3

    @classmethod
    def from_config(cls, config: SeasonConfig) -> "TertilePolicy":
        return cls(
            low_position=config.low_position,
            high_position=config.high_position,
            min_periods=config.min_periods,
        )


DEFAULT_POLICY = TertilePolicy()


def compute_thresholds(
    scores: list[float],
    policy: TertilePolicy = DEFAULT_POLICY,
) -> tuple[float, float]:
    """Return ``(low_threshold, high_threshold)`` for a list of scores.

    Raises:
        InsufficientDataError: If fewer than ``policy.min_periods`` scores.
    """
    n = len(scores)
    if n < max(policy.min_periods, 1):
        raise InsufficientDataError(n, policy.min_periods)
    ordered = sorted(scores)
    low_threshold = ordered[math.floor(n * policy.low_position)]
    high_threshold = ordered[math.floor(n * policy.high_position)]
    return low_threshold, high_threshold


def classify_score(score: float, low_threshold: float, high_threshold: float) -> str:
    """Map one composite score to ``"low"``, ``"normal"`` or ``"high"``."""
    if score <= low_threshold:
        return "low"
    if score >= high_threshold:
        return "high"
    return "normal"


def classify_scores(
    scored: list[ScoredPeriod],
    policy: TertilePolicy = DEFAULT_POLICY,
) -> list[SeasonScore]:
    """Classify every scored period into a season.

    Args:
        scored: Composite-scored periods for one route's analysis window.
        policy: Threshold index positions and minimum period count.

    Returns:
        One ``SeasonScore`` per input period, in input order.

    Raises:
        InsufficientDataError: If fewer than ``policy.min_periods`` periods.
    """
    low_threshold, high_threshold = compute_thresholds(
        [s.composite_score for s in scored], policy
    )
    logger.debug(
        "Season thresholds over %d periods: low<=%.2f high>=%.2f",
        len(scored), low_threshold, high_threshold,
    )

    return [
        SeasonScore(
            period=s.period,
            avg_price=s.avg_price,
            percentile=s.percentile,
            weather_score=s.weather_score,
            holiday_score=s.holiday_score,
            composite_score=s.composite_score,
            season=classify_score(s.composite_score, low_threshold, high_threshold),
        )
        for s in scored
    ]
