"""
Composite season scoring.

Score formula (weighted sum, range 0–100)
-----------------------------------------
    composite = (
        percentile      * 0.6    # price level, the dominant signal
        + holiday_score * 0.3    # holiday density, the stronger context signal
        + weather_score * 0.1    # weather favourability, the weakest signal
    )

Missing weather or holiday data is replaced by the neutral midpoint (50) so
that absent context does not push a period toward any season.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from fare_forecaster.config import SeasonConfig
from fare_forecaster.models.price import PricePeriod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeasonWeights:
    """Weighting policy for the composite score.

    Attributes:
        price:   Weight of the price percentile.
        holiday: Weight of the holiday score.
        weather: Weight of the weather score.
        neutral: Substitute value for missing weather/holiday scores.
    """

    price:   float = 0.6
    holiday: float = 0.3
    weather: float = 0.1
    neutral: float = 50.0

    @classmethod
    def from_config(cls, config: SeasonConfig) -> "SeasonWeights":
        return cls(
            price=config.price_weight,
            holiday=config.holiday_weight,
            weather=config.weather_weight,
            neutral=config.neutral_score,
        )


DEFAULT_WEIGHTS = SeasonWeights()


@dataclass(frozen=True)
class ScoredPeriod:
    """A period with the inputs and result of composite scoring."""

    period:          str
    avg_price:       float
    percentile:      float
    weather_score:   float
    holiday_score:   float
    composite_score: float


def compute_composite_score(
    percentile: float,
    weather_score: Optional[float],
    holiday_score: Optional[float],
    weights: SeasonWeights = DEFAULT_WEIGHTS,
) -> float:
    """Blend price percentile with holiday and weather scores.

    Args:
        percentile:    Price percentile rank (0–100).
        weather_score: Weather favourability (0–100) or ``None``.
        holiday_score: Holiday density (0–100) or ``None``.
        weights:       Weighting policy.

    Returns:
        Composite score in the same 0–100 scale.
    """
    weather = weights.neutral if weather_score is None else weather_score
    holiday = weights.neutral if holiday_score is None else holiday_score
    return (
        percentile * weights.price
        + holiday  * weights.holiday
        + weather  * weights.weather
    )


def score_periods(
    periods: list[PricePeriod],
    weather_by_period: Mapping[str, Optional[float]],
    holiday_by_period: Mapping[str, Optional[float]],
    weights: SeasonWeights = DEFAULT_WEIGHTS,
) -> list[ScoredPeriod]:
    """Score every period in an analysis window.

    Args:
        periods:           Aggregated periods (from ``aggregate_periods``).
        weather_by_period: Period key → weather score; missing keys are neutral.
        holiday_by_period: Period key → holiday score; missing keys are neutral.
        weights:           Weighting policy.

    Returns:
        One ``ScoredPeriod`` per input period, in input order.
    """
    scored: list[ScoredPeriod] = []
    for p in periods:
        weather = weather_by_period.get(p.period)
        holiday = holiday_by_period.get(p.period)
        if weather is None or holiday is None:
            logger.debug(
                "Period %s missing context (weather=%s, holiday=%s); using neutral %.0f.",
                p.period, weather, holiday, weights.neutral,
            )
        weather_used = weights.neutral if weather is None else weather
        holiday_used = weights.neutral if holiday is None else holiday
        scored.append(
            ScoredPeriod(
                period=p.period,
                avg_price=p.avg_price,
                percentile=p.percentile,
                weather_score=weather_used,
                holiday_score=holiday_used,
                composite_score=compute_composite_score(
                    p.percentile, weather_used, holiday_used, weights
                ),
            )
        )
    return scored
