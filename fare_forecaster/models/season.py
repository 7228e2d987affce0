"""
Season models: contextual statistics, scores and per-season summaries.

``WeatherStatistic`` and ``HolidayStatistic`` are supplied by external stores
and are read-only to the analysis core.  An absent score is ``None``; there
is no separate "missing" sentinel.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

SeasonLabel = Literal["low", "normal", "high"]
SEASON_ORDER: tuple[str, ...] = ("low", "normal", "high")


def _check_score(v: Optional[float]) -> Optional[float]:
    if v is not None and not 0.0 <= v <= 100.0:
        raise ValueError(f"Scores must be in [0, 100], got {v}.")
    return v


class WeatherStatistic(BaseModel):
    """Weather favourability for a province in one period (higher = better)."""

    model_config = ConfigDict(frozen=True)

    province: str
    period: str
    weather_score: Optional[float] = None

    @field_validator("weather_score")
    @classmethod
    def validate_score(cls, v: Optional[float]) -> Optional[float]:
        return _check_score(v)


class HolidayStatistic(BaseModel):
    """Holiday density for one period (higher = more holiday activity)."""

    model_config = ConfigDict(frozen=True)

    period: str
    holiday_score: Optional[float] = None
    holidays: list[str] = []

    @field_validator("holiday_score")
    @classmethod
    def validate_score(cls, v: Optional[float]) -> Optional[float]:
        return _check_score(v)


class SeasonScore(BaseModel):
    """Composite score and resulting classification for one period.

    ``weather_score`` and ``holiday_score`` hold the values actually used,
    i.e. after neutral substitution for missing data.
    """

    model_config = ConfigDict(frozen=True)

    period: str
    avg_price: float
    percentile: float
    weather_score: float
    holiday_score: float
    composite_score: float
    season: SeasonLabel


class BestDeal(BaseModel):
    """Cheapest observed fare inside a season."""

    model_config = ConfigDict(frozen=True)

    departure_date: date
    price: float
    airline: Optional[str] = None


class SeasonSummary(BaseModel):
    """Per-season rollup: member periods, price range and best deal."""

    model_config = ConfigDict(frozen=True)

    season: SeasonLabel
    periods: list[str] = []
    price_min: float = 0.0
    price_max: float = 0.0
    best_deal: Optional[BestDeal] = None
