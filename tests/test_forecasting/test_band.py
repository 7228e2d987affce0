"""
Tests for fare_forecaster/forecasting/band.py.

What we test
------------
PriceBandForecaster.build():
  - 10 actual days + 5-day horizon → 15 points; first 10 collapsed and
    actual, last 5 forecast with low <= typical <= high.
  - last_actual_date is the last observed date.
  - The predictor is called once with exactly the horizon dates.
  - Predictor failure (PredictorUnavailableError or any exception) →
    actual-only band with forecast_available=False.
  - Estimates outside the horizon or non-positive are dropped.
  - horizon 0 → actual points only; negative horizon raises.
  - No actuals → forecast starts at forecast_start.

daily_average_prices():
  - One mean per departure date, in date order.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from fare_forecaster.forecasting.band import PriceBandForecaster, daily_average_prices
from fare_forecaster.forecasting.predictor import PredictorUnavailableError
from fare_forecaster.models.forecast import PredictorEstimate


# ── Stub predictors ───────────────────────────────────────────────────────────

class _FlatPredictor:
    """Predicts a fixed price with a ±10% band and records its calls."""

    def __init__(self, price: float = 2000.0) -> None:
        self.price = price
        self.calls: list[list[date]] = []

    def predict(self, history, horizon_dates):
        self.calls.append(list(horizon_dates))
        return [
            PredictorEstimate(
                target_date=d, estimate=self.price, low=self.price * 0.9, high=self.price * 1.1
            )
            for d in horizon_dates
        ]


class _FailingPredictor:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def predict(self, history, horizon_dates):
        raise self.exc


class _SloppyPredictor:
    """Returns an out-of-horizon date, a zero estimate and an inverted band."""

    def predict(self, history, horizon_dates):
        first = horizon_dates[0]
        return [
            PredictorEstimate(target_date=first, estimate=100.0, low=120.0, high=90.0),
            PredictorEstimate(target_date=horizon_dates[1], estimate=0.0, low=0.0, high=0.0),
            PredictorEstimate(target_date=first - timedelta(days=30), estimate=50.0, low=40.0, high=60.0),
        ]


def _actuals(n: int = 10, start: date = date(2025, 3, 1)) -> dict[date, float]:
    return {start + timedelta(days=i): 1800.0 + i * 10 for i in range(n)}


# ── build() ───────────────────────────────────────────────────────────────────

class TestBuild:
    def test_actual_plus_forecast(self):
        predictor = _FlatPredictor()
        band = PriceBandForecaster(predictor).build(_actuals(10), horizon_days=5)

        assert len(band.points) == 15
        assert band.forecast_available
        assert band.last_actual_date == date(2025, 3, 10)

        for p in band.points[:10]:
            assert p.is_actual
            assert p.low == p.typical == p.high
        for p in band.points[10:]:
            assert not p.is_actual
            assert p.low <= p.typical <= p.high

    def test_single_predictor_call_with_horizon_dates(self):
        predictor = _FlatPredictor()
        PriceBandForecaster(predictor).build(_actuals(10), horizon_days=5)
        assert predictor.calls == [[date(2025, 3, 11) + timedelta(days=i) for i in range(5)]]

    def test_unordered_actuals_sorted(self):
        actuals = dict(reversed(list(_actuals(3).items())))
        band = PriceBandForecaster(_FlatPredictor()).build(actuals, horizon_days=0)
        assert [p.target_date for p in band.points] == sorted(actuals)

    @pytest.mark.parametrize(
        "exc",
        [PredictorUnavailableError("model offline"), TimeoutError("slow"), RuntimeError("boom")],
    )
    def test_predictor_failure_degrades(self, exc):
        band = PriceBandForecaster(_FailingPredictor(exc)).build(_actuals(10), horizon_days=5)
        assert len(band.points) == 10
        assert all(p.is_actual for p in band.points)
        assert band.forecast_available is False
        assert band.last_actual_date == date(2025, 3, 10)

    def test_bad_estimates_dropped_and_clamped(self):
        band = PriceBandForecaster(_SloppyPredictor()).build(_actuals(2), horizon_days=3)
        forecast = band.forecast_points
        assert [p.target_date for p in forecast] == [date(2025, 3, 3)]
        p = forecast[0]
        assert p.low <= p.typical <= p.high

    def test_zero_horizon(self):
        predictor = _FlatPredictor()
        band = PriceBandForecaster(predictor).build(_actuals(4), horizon_days=0)
        assert len(band.points) == 4
        assert predictor.calls == []

    def test_negative_horizon_raises(self):
        with pytest.raises(ValueError, match="horizon_days"):
            PriceBandForecaster(_FlatPredictor()).build(_actuals(4), horizon_days=-1)

    def test_no_actuals_uses_forecast_start(self):
        band = PriceBandForecaster(_FlatPredictor()).build(
            {}, horizon_days=3, forecast_start=date(2025, 6, 1)
        )
        assert band.last_actual_date is None
        assert [p.target_date for p in band.points] == [
            date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3)
        ]


def test_daily_average_prices(make_record):
    records = [
        make_record(date(2025, 3, 2), 1000.0),
        make_record(date(2025, 3, 1), 1500.0),
        make_record(date(2025, 3, 2), 2000.0),
    ]
    assert daily_average_prices(records) == {date(2025, 3, 1): 1500.0, date(2025, 3, 2): 1500.0}
    assert list(daily_average_prices(records)) == [date(2025, 3, 1), date(2025, 3, 2)]
