"""Tests for the in-memory collaborator stores in fare_forecaster.stores."""

from __future__ import annotations

from datetime import date

from fare_forecaster.models.price import Route
from fare_forecaster.models.season import HolidayStatistic, WeatherStatistic
from fare_forecaster.stores import (
    InMemoryHolidayStore,
    InMemoryPriceStore,
    InMemoryWeatherStore,
)


class TestInMemoryPriceStore:
    def test_range_and_trip_type_filter(self, bkk_cnx, make_record):
        store = InMemoryPriceStore({
            bkk_cnx: [
                make_record(date(2025, 3, 5), 900.0),
                make_record(date(2025, 3, 1), 1000.0),
                make_record(date(2025, 3, 2), 1500.0, trip_type="round-trip"),
                make_record(date(2025, 4, 1), 1100.0),
            ]
        })
        got = store.get_prices(bkk_cnx, date(2025, 3, 1), date(2025, 3, 31), "one-way")
        assert [r.departure_date for r in got] == [date(2025, 3, 1), date(2025, 3, 5)]

        everything = store.get_prices(bkk_cnx, date(2025, 1, 1), date(2025, 12, 31))
        assert len(everything) == 4

    def test_unknown_route(self, bkk_cnx):
        store = InMemoryPriceStore()
        assert store.get_prices(bkk_cnx, date(2025, 1, 1), date(2025, 12, 31)) == []

    def test_from_rows_groups_by_route(self, make_record):
        cnx = Route(origin="BKK", destination="CNX")
        hkt = Route(origin="BKK", destination="HKT")
        store = InMemoryPriceStore.from_rows([
            (cnx, make_record(date(2025, 1, 1), 1.0)),
            (hkt, make_record(date(2025, 1, 1), 2.0)),
            (cnx, make_record(date(2025, 1, 2), 3.0)),
        ])
        assert store.routes == [cnx, hkt]
        assert len(store.get_prices(cnx, date(2025, 1, 1), date(2025, 1, 31))) == 2


def test_weather_store_case_insensitive_province():
    store = InMemoryWeatherStore([WeatherStatistic(province="phuket", period="2025-03", weather_score=40.0)])
    assert store.get_weather_score("Phuket", "2025-03") == 40.0
    assert store.get_weather_score("phuket", "2025-04") is None


def test_holiday_store():
    store = InMemoryHolidayStore([
        HolidayStatistic(period="2025-04", holiday_score=90.0, holidays=["Songkran"]),
    ])
    assert store.get_holiday_score("2025-04") == 90.0
    assert store.get_holidays("2025-04") == ["Songkran"]
    assert store.get_holiday_score("2025-05") is None
    assert store.get_holidays("2025-05") == []
