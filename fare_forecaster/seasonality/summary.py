"""
Per-season rollups for display: which periods fall in each season, the fare
range inside it, and the single cheapest fare (the "best deal").
"""

from __future__ import annotations

from fare_forecaster.models.price import PriceRecord
from fare_forecaster.models.season import SEASON_ORDER, BestDeal, SeasonScore, SeasonSummary
from fare_forecaster.utils.time_utils import period_key


def summarize_seasons(
    scores: list[SeasonScore],
    records: list[PriceRecord],
) -> list[SeasonSummary]:
    """Build one ``SeasonSummary`` per season in low → normal → high order.

    Records are assigned to a season through their departure period.  Records
    whose period has no classification are ignored.  A season with no records
    keeps a zero price range and no best deal.
    """
    season_of = {s.period: s.season for s in scores}

    summaries: list[SeasonSummary] = []
    for season in SEASON_ORDER:
        periods = sorted(p for p, label in season_of.items() if label == season)
        members = [
            r for r in records
            if season_of.get(period_key(r.departure_date)) == season
        ]
        if not members:
            summaries.append(SeasonSummary(season=season, periods=periods))
            continue

        cheapest = min(members, key=lambda r: (r.price, r.departure_date))
        summaries.append(
            SeasonSummary(
                season=season,
                periods=periods,
                price_min=min(r.price for r in members),
                price_max=max(r.price for r in members),
                best_deal=BestDeal(
                    departure_date=cheapest.departure_date,
                    price=cheapest.price,
                    airline=cheapest.airline,
                ),
            )
        )
    return summaries
