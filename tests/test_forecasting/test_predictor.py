"""
Tests for fare_forecaster/forecasting/predictor.py and trend.py.

What we test
------------
confidence_tier():
  - <= 30 days → high ±15%; <= 60 → medium ±20%; otherwise low ±25%.

tiered_estimate():
  - Band is estimate × (1 ∓ spread) for the lead time.

SeasonalNaivePredictor.predict():
  - Raises PredictorUnavailableError below min_history.
  - Uses the same-weekday mean; falls back to the overall mean.
  - Band never narrower than 5% of the estimate.

compute_price_trend():
  - > +5% increasing, < −5% decreasing, otherwise stable.
  - Rounded to 2 decimals; non-positive current price → None.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from fare_forecaster.forecasting.predictor import (
    PredictorUnavailableError,
    SeasonalNaivePredictor,
    confidence_tier,
    tiered_estimate,
)
from fare_forecaster.forecasting.trend import compute_price_trend

MONDAY = date(2025, 3, 3)


class TestConfidenceTier:
    @pytest.mark.parametrize(
        "days,expected",
        [(0, ("high", 0.15)), (30, ("high", 0.15)), (31, ("medium", 0.20)),
         (60, ("medium", 0.20)), (61, ("low", 0.25)), (365, ("low", 0.25))],
    )
    def test_tiers(self, days, expected):
        assert confidence_tier(days) == expected

    def test_tiered_estimate(self):
        est = tiered_estimate(MONDAY + timedelta(days=45), 2000.0, MONDAY)
        assert (est.low, est.estimate, est.high) == (1600.0, 2000.0, 2400.0)

    def test_past_target_uses_high_tier(self):
        est = tiered_estimate(MONDAY - timedelta(days=5), 1000.0, MONDAY)
        assert (est.low, est.high) == (850.0, 1150.0)


class TestSeasonalNaivePredictor:
    def test_too_little_history(self):
        with pytest.raises(PredictorUnavailableError, match="observed days"):
            SeasonalNaivePredictor().predict({MONDAY: 100.0}, [MONDAY + timedelta(days=7)])

    def test_weekday_mean(self):
        history = {
            MONDAY: 1000.0,
            MONDAY + timedelta(days=7): 1200.0,
            MONDAY + timedelta(days=1): 3000.0,   # Tuesday
        }
        target = MONDAY + timedelta(days=14)
        (est,) = SeasonalNaivePredictor().predict(history, [target])
        assert est.target_date == target
        assert est.estimate == pytest.approx(1100.0)
        assert est.low < est.estimate < est.high

    def test_unseen_weekday_uses_overall_mean(self):
        history = {MONDAY + timedelta(days=i * 7): 1500.0 for i in range(3)}
        (est,) = SeasonalNaivePredictor().predict(history, [MONDAY + timedelta(days=2)])
        assert est.estimate == pytest.approx(1500.0)

    def test_minimum_spread(self):
        history = {MONDAY + timedelta(days=i * 7): 2000.0 for i in range(3)}
        (est,) = SeasonalNaivePredictor().predict(history, [MONDAY + timedelta(days=28)])
        assert est.low == pytest.approx(1900.0)
        assert est.high == pytest.approx(2100.0)


class TestPriceTrend:
    @pytest.mark.parametrize(
        "future,expected",
        [(1060.0, "increasing"), (1049.0, "stable"), (951.0, "stable"), (940.0, "decreasing")],
    )
    def test_direction(self, future, expected):
        assert compute_price_trend(1000.0, future).trend == expected

    def test_rounding(self):
        trend = compute_price_trend(3000.0, 3100.0)
        assert trend.change_percent == 3.33

    def test_non_positive_current(self):
        assert compute_price_trend(0.0, 100.0) is None
