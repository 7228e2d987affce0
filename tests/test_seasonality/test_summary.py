"""
Tests for fare_forecaster/seasonality/summary.py.

What we test
------------
summarize_seasons():
  - Always returns low, normal, high in that order.
  - Periods, price range and best deal are drawn from member records.
  - A season without records has zero range and no best deal.
  - Records in unclassified periods are ignored.
"""

from __future__ import annotations

from datetime import date

from fare_forecaster.models.season import SeasonScore
from fare_forecaster.seasonality.summary import summarize_seasons


def _score(period: str, season: str) -> SeasonScore:
    return SeasonScore(
        period=period, avg_price=1.0, percentile=50.0, weather_score=50.0,
        holiday_score=50.0, composite_score=50.0, season=season,
    )


def test_summaries_in_season_order(make_record):
    scores = [_score("2025-01", "high"), _score("2025-02", "low"), _score("2025-03", "low")]
    records = [
        make_record(date(2025, 1, 10), 3000.0),
        make_record(date(2025, 2, 10), 1200.0, airline="Nok Air"),
        make_record(date(2025, 3, 10), 1100.0, airline="AirAsia"),
        make_record(date(2025, 3, 20), 1500.0),
    ]

    summaries = summarize_seasons(scores, records)

    assert [s.season for s in summaries] == ["low", "normal", "high"]
    low, normal, high = summaries
    assert low.periods == ["2025-02", "2025-03"]
    assert (low.price_min, low.price_max) == (1100.0, 1500.0)
    assert low.best_deal.departure_date == date(2025, 3, 10)
    assert low.best_deal.airline == "AirAsia"
    assert high.best_deal.price == 3000.0


def test_empty_season_has_no_best_deal(make_record):
    scores = [_score("2025-01", "low")]
    summaries = summarize_seasons(scores, [make_record(date(2025, 1, 1), 900.0)])
    normal = summaries[1]
    assert normal.periods == []
    assert normal.best_deal is None
    assert (normal.price_min, normal.price_max) == (0.0, 0.0)


def test_unclassified_records_ignored(make_record):
    scores = [_score("2025-01", "low")]
    records = [make_record(date(2025, 1, 1), 900.0), make_record(date(2025, 6, 1), 100.0)]
    low = summarize_seasons(scores, records)[0]
    assert low.price_min == 900.0
