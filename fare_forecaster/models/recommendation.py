"""
Recommendation query and output models.

``RecommendationQuery`` captures what the traveller asked for.
``Recommendation`` is produced per query and is not persisted by the core;
comparison fields are ``None`` (never zero-filled) when their prerequisite
data is missing.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from fare_forecaster.models.price import TravelClass, TripType
from fare_forecaster.models.season import SeasonLabel


class Passengers(BaseModel):
    """Traveller counts by fare category."""

    model_config = ConfigDict(frozen=True)

    adults: int = 1
    children: int = 0
    infants: int = 0

    @field_validator("adults")
    @classmethod
    def validate_adults(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"adults must be >= 1, got {v}.")
        return v

    @field_validator("children", "infants")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Passenger counts must be >= 0, got {v}.")
        return v


class RecommendationQuery(BaseModel):
    """A traveller's request.

    Attributes:
        start_date: Requested departure date.
        end_date: Optional end of the requested range.
        trip_type: ``"one-way"`` or ``"round-trip"``.
        travel_class: Cabin class to price.
        airlines: Optional allow-list of airline names/codes; empty = all.
        duration_min: Shortest stay (days) considered for round trips.
        duration_max: Longest stay (days) considered for round trips.
        passengers: Traveller counts used for total pricing.
    """

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: Optional[date] = None
    trip_type: TripType = "round-trip"
    travel_class: TravelClass = "economy"
    airlines: tuple[str, ...] = ()
    duration_min: int = 3
    duration_max: int = 5
    passengers: Passengers = Passengers()

    @model_validator(mode="after")
    def validate_ranges(self) -> "RecommendationQuery":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must be >= start_date ({self.start_date})."
            )
        if not 0 <= self.duration_min <= self.duration_max:
            raise ValueError(
                f"duration range must satisfy 0 <= min <= max, "
                f"got {self.duration_min}..{self.duration_max}."
            )
        return self


class PriceComparison(BaseModel):
    """Price of the nearest earlier/later travel date relative to the base price."""

    model_config = ConfigDict(frozen=True)

    departure_date: date
    return_date: Optional[date] = None
    price: float
    difference: float
    percentage: float


class Recommendation(BaseModel):
    """Recommended travel period plus comparisons for the requested date.

    Attributes:
        period: ``"YYYY-MM"`` key of the recommended period.
        start_date: Cheapest departure date inside the recommended period.
        return_date: Return date for round trips, else ``None``.
        duration_days: Stay length for round trips, else ``None``.
        price: Total price (all passengers) for the recommended date.
        airline: Airline offering that price, if known.
        season: Season classification of the requested date.
        savings: Requested-season base price minus the cheapest low-season
            price (0 when not positive or no low-season data).
        base_price: Total price for the exact requested date, or ``None``
            when no fare exists on that date.
        base_airline: Airline offering the base price.
        if_go_before: Nearest earlier date comparison, or ``None``.
        if_go_after: Nearest later date comparison, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    period: str
    start_date: date
    return_date: Optional[date] = None
    duration_days: Optional[int] = None
    price: float
    airline: Optional[str] = None
    season: SeasonLabel
    savings: float = 0.0
    base_price: Optional[float] = None
    base_airline: Optional[str] = None
    if_go_before: Optional[PriceComparison] = None
    if_go_after: Optional[PriceComparison] = None

    @field_validator("savings")
    @classmethod
    def validate_savings(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"savings must be non-negative, got {v}.")
        return v
