"""
Tests for fare_forecaster/pipeline/analyze.py.

Fixture data (see conftest): one-way BKK → CNX fares across 2025, cheapest
in June, most expensive around the new year; Songkran (April) and New
Year's Eve carry high holiday scores; Chiang Mai weather is a flat 60.

What we test
------------
analyze_route():
  - Window of 6 months either side of the requested month.
  - Mid-year months classify as low; a holiday month outranks a pricier
    non-holiday month.
  - Recommendation points at the cheapest low-season date with savings.
  - Fewer than 3 periods → insufficient_data=True, no seasons, default
    "normal" season, base price still reported.
  - No fares → NoPriceDataError.
  - With a predictor: band = observed history + horizon forecast, trend set.
  - Predictor failure → band degraded to actual-only.
  - Unknown destination → no province; weather treated as neutral.
  - Round trips are priced from one-way legs, with return legs read past
    the window end; seasons use the same fares as the recommendation.
  - Round-trip fares outside the stay range never reach aggregation.

query_window():
  - end_date later than the default window widens it.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from fare_forecaster.config import AppConfig
from fare_forecaster.forecasting.predictor import PredictorUnavailableError, SeasonalNaivePredictor
from fare_forecaster.models.price import Route
from fare_forecaster.models.recommendation import RecommendationQuery
from fare_forecaster.pipeline.analyze import RouteAnalysisRequest, analyze_route, query_window
from fare_forecaster.recommendations.engine import NoPriceDataError
from fare_forecaster.stores import InMemoryHolidayStore, InMemoryPriceStore, InMemoryWeatherStore


def _request(route: Route, start: date, **kwargs) -> RouteAnalysisRequest:
    kwargs.setdefault("trip_type", "one-way")
    return RouteAnalysisRequest(route=route, query=RecommendationQuery(start_date=start, **kwargs))


class _BrokenPredictor:
    def predict(self, history, horizon_dates):
        raise PredictorUnavailableError("model endpoint timed out")


# ── Seasonality + recommendation ──────────────────────────────────────────────

class TestAnalyzeRoute:
    def test_window_and_periods(self, bkk_cnx, stores):
        result = analyze_route(_request(bkk_cnx, date(2025, 6, 15)), *stores)

        assert result.window_start == date(2024, 12, 1)
        assert result.window_end == date(2025, 11, 30)
        assert [p.period for p in result.periods][0] == "2025-01"
        assert [p.period for p in result.periods][-1] == "2025-11"
        assert result.province == "chiang-mai"
        assert not result.insufficient_data

    def test_seasons(self, bkk_cnx, stores):
        result = analyze_route(_request(bkk_cnx, date(2025, 6, 15)), *stores)
        seasons = {s.period: s.season for s in result.season_scores}

        assert {p for p, s in seasons.items() if s == "low"} == {
            "2025-05", "2025-06", "2025-07", "2025-08"
        }
        assert seasons["2025-01"] == "high"
        assert seasons["2025-04"] == "high"     # Songkran
        assert seasons["2025-03"] == "normal"   # pricier than April, no holiday
        assert [s.season for s in result.summaries] == ["low", "normal", "high"]

    def test_recommendation_in_high_season(self, bkk_cnx, stores):
        result = analyze_route(_request(bkk_cnx, date(2025, 4, 15)), *stores)
        rec = result.recommendation

        assert rec.season == "high"
        assert rec.base_price == 2600.0
        assert rec.period == "2025-06"
        assert rec.start_date == date(2025, 6, 5)
        assert rec.price == 1800.0
        assert rec.savings == pytest.approx(800.0)
        # Neighbouring fares are 10 days away, outside the 7-day window.
        assert rec.if_go_before is None
        assert rec.if_go_after is None

    def test_wider_comparison_window(self, bkk_cnx, stores):
        config = AppConfig.model_validate({"recommendation": {"comparison_window_days": 10}})
        result = analyze_route(_request(bkk_cnx, date(2025, 4, 15)), *stores, config=config)
        assert result.recommendation.if_go_before.departure_date == date(2025, 4, 5)
        assert result.recommendation.if_go_after.departure_date == date(2025, 4, 25)

    def test_insufficient_data(self, bkk_cnx, make_record):
        price_store = InMemoryPriceStore({
            bkk_cnx: [
                make_record(date(2025, 6, 15), 1800.0),
                make_record(date(2025, 7, 15), 1900.0),
            ]
        })
        result = analyze_route(
            _request(bkk_cnx, date(2025, 6, 15)),
            price_store, InMemoryWeatherStore(), InMemoryHolidayStore(),
        )
        assert result.insufficient_data
        assert result.season_scores == []
        assert result.summaries == []
        assert result.recommendation.season == "normal"
        assert result.recommendation.base_price == 1800.0

    def test_no_fares_raises(self, bkk_cnx):
        with pytest.raises(NoPriceDataError):
            analyze_route(
                _request(bkk_cnx, date(2025, 6, 15)),
                InMemoryPriceStore(), InMemoryWeatherStore(), InMemoryHolidayStore(),
            )

    def test_round_trip_needs_return_legs_in_stay_range(self, bkk_cnx, stores):
        # Fixture legs are 10 days apart, outside the default 3..5 day stay.
        with pytest.raises(NoPriceDataError, match="round-trip"):
            analyze_route(_request(bkk_cnx, date(2025, 6, 15), trip_type="round-trip"), *stores)

    def test_round_trip_from_one_way_legs(self, bkk_cnx, make_record):
        legs = [
            make_record(date(2025, 1, 10), 600.0),
            make_record(date(2025, 1, 14), 500.0),
            make_record(date(2025, 2, 10), 900.0),
            make_record(date(2025, 2, 14), 800.0),
            make_record(date(2025, 3, 25), 1000.0),
            make_record(date(2025, 3, 29), 1200.0),
            make_record(date(2025, 4, 2), 1300.0),    # return leg past the window
        ]
        result = analyze_route(
            _request(bkk_cnx, date(2024, 10, 15), trip_type="round-trip"),
            InMemoryPriceStore({bkk_cnx: legs}),
            InMemoryWeatherStore(),
            InMemoryHolidayStore(),
        )

        assert result.window_end == date(2025, 3, 31)
        assert {p.period: (p.avg_price, p.sample_count) for p in result.periods} == {
            "2025-01": (1100.0, 1),
            "2025-02": (1700.0, 1),
            "2025-03": (2350.0, 2),    # 03-25 -> 03-29 and 03-29 -> 04-02
        }
        rec = result.recommendation
        assert rec.period == "2025-01"
        assert (rec.start_date, rec.return_date, rec.price) == (
            date(2025, 1, 10), date(2025, 1, 14), 1100.0
        )
        assert rec.savings == pytest.approx(600.0)

    def test_stay_range_applies_to_seasons(self, bkk_cnx, make_record):
        def round_trip(day, price, stay):
            return make_record(day, price, trip_type="round-trip",
                               return_date=day + timedelta(days=stay))

        fares = [
            round_trip(date(2025, 1, 10), 1000.0, 4),
            round_trip(date(2025, 2, 10), 2000.0, 4),
            round_trip(date(2025, 3, 10), 3000.0, 4),
            round_trip(date(2025, 3, 11), 100.0, 1),     # stay too short
        ]
        result = analyze_route(
            _request(bkk_cnx, date(2025, 2, 10), trip_type="round-trip"),
            InMemoryPriceStore({bkk_cnx: fares}),
            InMemoryWeatherStore(),
            InMemoryHolidayStore(),
        )

        assert {p.period: p.avg_price for p in result.periods} == {
            "2025-01": 1000.0, "2025-02": 2000.0, "2025-03": 3000.0,
        }
        assert [s.season for s in result.season_scores] == ["low", "normal", "high"]
        assert result.summaries[2].price_min == 3000.0

    def test_unknown_destination_has_no_province(self, year_of_fares):
        route = Route(origin="BKK", destination="NRT")
        result = analyze_route(
            _request(route, date(2025, 6, 15)),
            InMemoryPriceStore({route: year_of_fares}),
            InMemoryWeatherStore(),
            InMemoryHolidayStore(),
        )
        assert result.province is None
        assert all(s.weather_score == 50.0 for s in result.season_scores)


# ── Price band ────────────────────────────────────────────────────────────────

class TestPriceBand:
    def test_band_with_predictor(self, bkk_cnx, stores):
        result = analyze_route(
            _request(bkk_cnx, date(2025, 6, 15)), *stores,
            predictor=SeasonalNaivePredictor(),
        )
        band = result.price_band
        assert [p.target_date for p in band.actual_points] == [
            date(2025, 5, 25), date(2025, 6, 5), date(2025, 6, 15)
        ]
        assert len(band.forecast_points) == 30
        assert band.last_actual_date == date(2025, 6, 15)
        assert result.price_trend is not None

    def test_band_degrades(self, bkk_cnx, stores):
        result = analyze_route(
            _request(bkk_cnx, date(2025, 6, 15)), *stores, predictor=_BrokenPredictor()
        )
        assert result.price_band.forecast_available is False
        assert len(result.price_band.points) == 3
        assert result.price_trend is None

    def test_no_predictor_no_band(self, bkk_cnx, stores):
        result = analyze_route(_request(bkk_cnx, date(2025, 6, 15)), *stores)
        assert result.price_band is None
        assert result.price_trend is None


def test_query_window_widened_by_end_date():
    query = RecommendationQuery(start_date=date(2025, 3, 10), end_date=date(2026, 1, 20))
    start, end = query_window(query, months_each_side=6)
    assert start == date(2024, 9, 1)
    assert end == date(2026, 1, 31)
