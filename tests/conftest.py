"""
Shared pytest fixtures for the Fare Forecaster test suite.

Provides:
  - ``make_record``: factory for ``PriceRecord`` with sensible defaults.
  - ``bkk_cnx``: the BKK → CNX route used across tests.
  - ``year_of_fares``: one-way fares for twelve months, cheapest in the
    middle of the year and most expensive around the new year.
  - ``stores``: in-memory price / weather / holiday stores over that year.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

import pytest

from fare_forecaster.models.price import PriceRecord, Route
from fare_forecaster.models.season import HolidayStatistic, WeatherStatistic
from fare_forecaster.stores import (
    InMemoryHolidayStore,
    InMemoryPriceStore,
    InMemoryWeatherStore,
)

# Monthly base fares for 2025; lowest in Jun, highest in Dec.
MONTHLY_BASE_FARES: dict[int, float] = {
    1: 3200.0, 2: 2900.0, 3: 2600.0, 4: 2500.0,
    5: 2100.0, 6: 1800.0, 7: 1900.0, 8: 2000.0,
    9: 2200.0, 10: 2700.0, 11: 3000.0, 12: 3600.0,
}


def _record(
    departure_date: date,
    price: float,
    airline: Optional[str] = "Thai Smile",
    trip_type: str = "one-way",
    travel_class: str = "economy",
    return_date: Optional[date] = None,
) -> PriceRecord:
    return PriceRecord(
        departure_date=departure_date,
        price=price,
        airline=airline,
        trip_type=trip_type,
        travel_class=travel_class,
        return_date=return_date,
    )


@pytest.fixture
def make_record() -> Callable[..., PriceRecord]:
    """Factory fixture: ``make_record(date(2025, 3, 1), 1500.0, airline="AirAsia")``."""
    return _record


@pytest.fixture
def bkk_cnx() -> Route:
    return Route(origin="BKK", destination="CNX")


@pytest.fixture
def year_of_fares() -> list[PriceRecord]:
    """Three one-way fares per month (days 5, 15, 25) across 2025."""
    records: list[PriceRecord] = []
    for month, base in MONTHLY_BASE_FARES.items():
        for offset, day in enumerate((5, 15, 25)):
            records.append(_record(date(2025, month, day), base + offset * 100.0))
    return records


@pytest.fixture
def stores(bkk_cnx, year_of_fares):
    """``(price_store, weather_store, holiday_store)`` over ``year_of_fares``."""
    price_store = InMemoryPriceStore({bkk_cnx: year_of_fares})
    weather_store = InMemoryWeatherStore(
        WeatherStatistic(province="chiang-mai", period=f"2025-{m:02d}", weather_score=60.0)
        for m in range(1, 13)
    )
    holiday_store = InMemoryHolidayStore(
        [
            HolidayStatistic(period="2025-04", holiday_score=90.0, holidays=["Songkran"]),
            HolidayStatistic(period="2025-12", holiday_score=80.0, holidays=["New Year's Eve"]),
        ]
    )
    return price_store, weather_store, holiday_store
