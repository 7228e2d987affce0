"""
Route and price models.

``PriceRecord`` is one observed fare for a departure date as supplied by the
Price Store.  ``PricePeriod`` is the monthly aggregate derived from those
records; it is never mutated in place; new records trigger a full
recompute that replaces the previous aggregate.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

TripType = Literal["one-way", "round-trip"]
TravelClass = Literal["economy", "business", "first"]

VALID_TRIP_TYPES: frozenset[str] = frozenset({"one-way", "round-trip"})
VALID_TRAVEL_CLASSES: frozenset[str] = frozenset({"economy", "business", "first"})


class Route(BaseModel):
    """An origin → destination pair.

    Attributes:
        origin: Origin airport code, upper-cased (e.g. ``"BKK"``).
        destination: Destination airport code, upper-cased (e.g. ``"CNX"``).
    """

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str

    @field_validator("origin", "destination")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Route endpoints must not be empty.")
        return v

    def __str__(self) -> str:
        return f"{self.origin}->{self.destination}"


class PriceRecord(BaseModel):
    """One observed fare for a departure date.

    Attributes:
        departure_date: Calendar date of departure.
        return_date: Return date of a round-trip fare, if the fare is dated.
        price: Fare in local currency; always positive.
        airline: Airline name or code offering this fare, if known.
        trip_type: ``"one-way"`` or ``"round-trip"``.
        travel_class: Cabin class of the fare.
    """

    model_config = ConfigDict(frozen=True)

    departure_date: date
    price: float
    airline: Optional[str] = None
    trip_type: TripType = "one-way"
    travel_class: TravelClass = "economy"
    return_date: Optional[date] = None

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"price must be positive, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_return_date(self) -> "PriceRecord":
        if self.return_date is not None:
            if self.trip_type != "round-trip":
                raise ValueError("return_date is only valid for round-trip fares.")
            if self.return_date < self.departure_date:
                raise ValueError(
                    f"return_date ({self.return_date}) must be >= "
                    f"departure_date ({self.departure_date})."
                )
        return self

    @property
    def stay_days(self) -> Optional[int]:
        """Days between departure and return, or None for open/one-way fares."""
        if self.return_date is None:
            return None
        return (self.return_date - self.departure_date).days


class PricePeriod(BaseModel):
    """Monthly price aggregate with percentile rank.

    Attributes:
        period: ``"YYYY-MM"`` period key.
        avg_price: Arithmetic mean of record prices in the period.
        sample_count: Number of records averaged.
        percentile: Share of periods (0–100) whose ``avg_price`` is at or
            below this one.
    """

    model_config = ConfigDict(frozen=True)

    period: str
    avg_price: float
    sample_count: int
    percentile: float

    @field_validator("sample_count")
    @classmethod
    def validate_sample_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"sample_count must be >= 1, got {v}.")
        return v

    @field_validator("percentile")
    @classmethod
    def validate_percentile(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"percentile must be in [0, 100], got {v}.")
        return v
