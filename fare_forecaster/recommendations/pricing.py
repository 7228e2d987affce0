"""
Fare lookup helpers for the recommendation engine.

A *fare quote* is the cheapest matching record for one departure date.  For
round trips the caller's stay-length range restricts which dated fares are
eligible; undated round-trip fares (no ``return_date``) always qualify.

Round trips from one-way legs
-----------------------------
For a departure day D and every stay d in ``duration_min..duration_max``::

    price(D, d) = cheapest one-way fare on D + cheapest one-way fare on D + d

Each pair with both legs priced becomes a dated round-trip fare and competes
with the round-trip fares the store supplied.

Group pricing
-------------
    total = price * adults
          + price * children * child_factor    (default 0.75)
          + price * infants  * infant_factor   (default 0.10)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from fare_forecaster.models.price import PriceRecord
from fare_forecaster.models.recommendation import Passengers, RecommendationQuery
from fare_forecaster.seasonality.aggregator import filter_records

CHILD_PRICE_FACTOR = 0.75
INFANT_PRICE_FACTOR = 0.1


@dataclass(frozen=True)
class FareQuote:
    """Cheapest fare found for one departure date.

    Attributes:
        departure_date: Departure date quoted.
        return_date:    Return date for dated round-trip fares, else None.
        duration_days:  Stay length for dated round-trip fares, else None.
        price:          Per-person fare.
        airline:        Airline offering the fare, if known.
    """

    departure_date: date
    return_date:    Optional[date]
    duration_days:  Optional[int]
    price:          float
    airline:        Optional[str]


def within_stay_range(record: PriceRecord, duration_min: int, duration_max: int) -> bool:
    """True if the record's stay length lies in ``[duration_min, duration_max]``.

    One-way and undated round-trip fares are always in range.
    """
    stay = record.stay_days
    if stay is None:
        return True
    return duration_min <= stay <= duration_max


def best_fare_on(records: Iterable[PriceRecord], day: date) -> Optional[FareQuote]:
    """Return the cheapest fare departing on ``day``, or None if there is none.

    Ties on price resolve to the shorter stay, then airline name, so the
    result does not depend on record order.
    """
    candidates = [r for r in records if r.departure_date == day]
    if not candidates:
        return None
    best = min(
        candidates,
        key=lambda r: (r.price, r.stay_days if r.stay_days is not None else -1, r.airline or ""),
    )
    return FareQuote(
        departure_date=best.departure_date,
        return_date=best.return_date,
        duration_days=best.stay_days,
        price=best.price,
        airline=best.airline,
    )


def priced_dates(records: Iterable[PriceRecord]) -> set[date]:
    """All departure dates with at least one fare."""
    return {r.departure_date for r in records}


def passenger_total(
    price: float,
    passengers: Passengers,
    child_factor: float = CHILD_PRICE_FACTOR,
    infant_factor: float = INFANT_PRICE_FACTOR,
) -> float:
    """Total fare for a travelling group, rounded to 2 decimals."""
    total = (
        price * passengers.adults
        + price * passengers.children * child_factor
        + price * passengers.infants * infant_factor
    )
    return round(total, 2)


# ── Round trips ───────────────────────────────────────────────────────────────


def _cheapest_by_day(records: Iterable[PriceRecord]) -> dict[date, PriceRecord]:
    cheapest: dict[date, PriceRecord] = {}
    for rec in records:
        best = cheapest.get(rec.departure_date)
        if best is None or (rec.price, rec.airline or "") < (best.price, best.airline or ""):
            cheapest[rec.departure_date] = rec
    return cheapest


def _pair_airline(outbound: Optional[str], inbound: Optional[str]) -> Optional[str]:
    names = [a for a in (outbound, inbound) if a]
    if not names:
        return None
    if len(names) == 2 and names[0] != names[1]:
        return f"{names[0]} / {names[1]}"
    return names[0]


def pair_one_way_legs(
    legs: Iterable[PriceRecord],
    duration_min: int,
    duration_max: int,
) -> list[PriceRecord]:
    """Dated round-trip fares built from one-way legs.

    For every departure day with a leg and every stay length in the range,
    the cheapest leg out plus the cheapest leg back ``stay`` days later.
    Stays whose return day has no leg are skipped.  Output is sorted by
    departure date, then stay length.
    """
    by_day = _cheapest_by_day(r for r in legs if r.trip_type == "one-way")
    pairs: list[PriceRecord] = []
    for day in sorted(by_day):
        out = by_day[day]
        for stay in range(duration_min, duration_max + 1):
            back = by_day.get(day + timedelta(days=stay))
            if back is None:
                continue
            pairs.append(
                PriceRecord(
                    departure_date=day,
                    return_date=back.departure_date,
                    price=round(out.price + back.price, 2),
                    airline=_pair_airline(out.airline, back.airline),
                    trip_type="round-trip",
                    travel_class=out.travel_class,
                )
            )
    return pairs


def fares_for_query(records: Iterable[PriceRecord], query: RecommendationQuery) -> list[PriceRecord]:
    """Fares that answer ``query``, filtered by class and airline allow-list.

    One-way queries get the matching one-way fares.  Round-trip queries get
    the supplied round-trip fares within the stay range plus round trips
    paired from one-way legs.  Calling this again on its own output returns
    the same fares.
    """
    eligible = filter_records(
        records, travel_class=query.travel_class, airlines=query.airlines
    )
    if query.trip_type == "one-way":
        return [r for r in eligible if r.trip_type == "one-way"]

    supplied = [
        r for r in eligible
        if r.trip_type == "round-trip"
        and within_stay_range(r, query.duration_min, query.duration_max)
    ]
    paired = pair_one_way_legs(eligible, query.duration_min, query.duration_max)
    return sorted(
        supplied + paired,
        key=lambda r: (r.departure_date, r.stay_days if r.stay_days is not None else -1, r.price),
    )
