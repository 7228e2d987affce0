"""
Price-band forecast models.

``PriceBand`` stitches observed daily prices (collapsed bands) with predicted
bands.  All actual points precede all forecast points; the boundary date is
kept explicitly so consumers can separate the two segments.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

TrendDirection = Literal["increasing", "decreasing", "stable"]


class PredictorEstimate(BaseModel):
    """One predictor output for a future date."""

    model_config = ConfigDict(frozen=True)

    target_date: date
    estimate: float
    low: float
    high: float


class PriceBandPoint(BaseModel):
    """Low / typical / high price triple for one date."""

    model_config = ConfigDict(frozen=True)

    target_date: date
    low: float
    typical: float
    high: float
    is_actual: bool

    @model_validator(mode="after")
    def validate_band_order(self) -> "PriceBandPoint":
        if not self.low <= self.typical <= self.high:
            raise ValueError(
                f"Band must satisfy low <= typical <= high, got "
                f"{self.low} / {self.typical} / {self.high} on {self.target_date}."
            )
        return self


class PriceBand(BaseModel):
    """Ordered band sequence for a route.

    Attributes:
        points: Points in ascending date order.
        last_actual_date: Date of the last observed price, or ``None``.
        forecast_available: ``False`` when the predictor was unavailable and
            only the actual prefix is present.
    """

    model_config = ConfigDict(frozen=True)

    points: list[PriceBandPoint] = []
    last_actual_date: Optional[date] = None
    forecast_available: bool = True

    @model_validator(mode="after")
    def validate_segments(self) -> "PriceBand":
        seen_forecast = False
        previous: Optional[date] = None
        for point in self.points:
            if previous is not None and point.target_date <= previous:
                raise ValueError("Band points must be in strictly ascending date order.")
            if point.is_actual and seen_forecast:
                raise ValueError("Actual points must precede all forecast points.")
            seen_forecast = seen_forecast or not point.is_actual
            previous = point.target_date
        return self

    @property
    def actual_points(self) -> list[PriceBandPoint]:
        return [p for p in self.points if p.is_actual]

    @property
    def forecast_points(self) -> list[PriceBandPoint]:
        return [p for p in self.points if not p.is_actual]


class PriceTrend(BaseModel):
    """Direction of expected price movement between two dates."""

    model_config = ConfigDict(frozen=True)

    trend: TrendDirection
    change_percent: float
    current_price: float
    future_price: float
