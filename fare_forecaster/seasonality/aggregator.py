"""
Monthly price aggregation with percentile ranks.

Each calendar month present in the input becomes one ``PricePeriod``:

    avg_price  = mean(price for records in the month)
    percentile = count(periods with avg_price <= this avg_price) / n_periods * 100

Ties are inclusive: periods sharing an average price share a percentile, so
when every period has the same average each one ranks at 100.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional

from fare_forecaster.models.price import PricePeriod, PriceRecord
from fare_forecaster.utils.time_utils import period_key

logger = logging.getLogger(__name__)


def filter_records(
    records: Iterable[PriceRecord],
    trip_type: Optional[str] = None,
    travel_class: Optional[str] = None,
    airlines: Optional[Iterable[str]] = None,
) -> list[PriceRecord]:
    """Return records matching the optional trip type, class and airline filters.

    ``airlines`` is an allow-list; ``None`` or empty means every airline.
    Records with no airline never match a non-empty allow-list.
    """
    allowed = {a.casefold() for a in airlines} if airlines else None
    result: list[PriceRecord] = []
    for rec in records:
        if trip_type is not None and rec.trip_type != trip_type:
            continue
        if travel_class is not None and rec.travel_class != travel_class:
            continue
        if allowed is not None and (rec.airline is None or rec.airline.casefold() not in allowed):
            continue
        result.append(rec)
    return result


def percentile_rank(value: float, population: list[float]) -> float:
    """Inclusive percentile rank of ``value`` within ``population`` (0–100).

    Returns 0.0 for an empty population.
    """
    if not population:
        return 0.0
    at_or_below = sum(1 for p in population if p <= value)
    return at_or_below / len(population) * 100.0


def aggregate_periods(
    records: Iterable[PriceRecord],
    trip_type: Optional[str] = None,
    travel_class: Optional[str] = None,
) -> list[PricePeriod]:
    """Group price records by calendar month and rank the monthly averages.

    Args:
        records:      Raw price records for one route.
        trip_type:    Optional trip type filter.
        travel_class: Optional cabin class filter.

    Returns:
        ``PricePeriod`` list sorted by period key.  Empty input (or nothing
        left after filtering) yields an empty list.
    """
    by_period: dict[str, list[float]] = defaultdict(list)
    for rec in filter_records(records, trip_type=trip_type, travel_class=travel_class):
        by_period[period_key(rec.departure_date)].append(rec.price)

    if not by_period:
        logger.debug("No price records to aggregate (trip_type=%s).", trip_type)
        return []

    averages = {p: sum(prices) / len(prices) for p, prices in by_period.items()}
    all_avgs = list(averages.values())

    periods = [
        PricePeriod(
            period=p,
            avg_price=averages[p],
            sample_count=len(by_period[p]),
            percentile=percentile_rank(averages[p], all_avgs),
        )
        for p in sorted(by_period)
    ]
    logger.debug("Aggregated %d periods from price records.", len(periods))
    return periods
