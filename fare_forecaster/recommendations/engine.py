"""
Recommendation engine: classified seasons + live fares → ``Recommendation``.

Recommendation flow
-------------------
1. ``pricing.fares_for_query``: filter by travel class and airline
   allow-list; round trips keep supplied fares within the stay-length range
   and add pairs of one-way legs.  Nothing left → ``NoPriceDataError``.
2. Season of the requested date: its own period's classification, else the
   same calendar month from another year, else ``"normal"``.
3. Base price: cheapest fare on the exact requested date (may be absent);
   for round trips the cheapest over every stay in the range.
4. Savings: reference price (base price, or the cheapest fare in the
   requested season when the date itself has none) minus the cheapest
   fare in low-season periods; 0 when not positive or no low-season data.
5. Before / after: nearest priced date within ``comparison_window_days``
   on each side, relative to the base price; omitted when unavailable.
6. Recommended period: among low-season periods (else requested-season,
   else all periods) with matching fares, the one with the lowest average
   fare; its cheapest date, fare and airline are reported.

All prices in the output are group totals (see ``pricing.passenger_total``).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from fare_forecaster.config import RecommendationConfig
from fare_forecaster.models.price import PriceRecord, Route
from fare_forecaster.models.recommendation import (
    PriceComparison,
    Recommendation,
    RecommendationQuery,
)
from fare_forecaster.models.season import SeasonScore
from fare_forecaster.recommendations.comparison import build_comparison, nearest_priced_date
from fare_forecaster.recommendations.pricing import (
    FareQuote,
    best_fare_on,
    fares_for_query,
    passenger_total,
    priced_dates,
)
from fare_forecaster.utils.time_utils import parse_period, period_key, period_month

logger = logging.getLogger(__name__)


# ── Custom exceptions ─────────────────────────────────────────────────────────


class NoPriceDataError(LookupError):
    """Raised when no fares match the requested route / trip type.

    Attributes:
        route:     Route queried, if known.
        trip_type: Trip type queried.
    """

    def __init__(self, trip_type: str, route: Optional[Route] = None) -> None:
        self.route = route
        self.trip_type = trip_type
        where = f" for route {route}" if route is not None else ""
        super().__init__(f"No {trip_type} price data{where}.")


# ── Season lookup ─────────────────────────────────────────────────────────────


def season_for_period(scores: list[SeasonScore], period: str) -> str:
    """Resolve the season of ``period`` with a same-month fallback.

    Prefers the exact period; otherwise the same calendar month from the
    most recent earlier year, then from the nearest later year; otherwise
    ``"normal"``.
    """
    by_period = {s.period: s.season for s in scores}
    if period in by_period:
        return by_period[period]

    year, month = parse_period(period)
    same_month = [p for p in by_period if period_month(p) == month]
    if not same_month:
        return "normal"

    earlier = [p for p in same_month if parse_period(p)[0] < year]
    if earlier:
        return by_period[max(earlier)]
    return by_period[min(same_month)]


# ── Engine ────────────────────────────────────────────────────────────────────


class RecommendationEngine:
    """Builds one ``Recommendation`` per query.

    The engine holds only immutable configuration; ``recommend()`` is a pure
    function of its arguments and is safe to call concurrently.

    Attributes:
        config: Recommendation section of ``AppConfig``.
    """

    def __init__(self, config: Optional[RecommendationConfig] = None) -> None:
        self.config = config or RecommendationConfig()

    def recommend(
        self,
        query: RecommendationQuery,
        scores: list[SeasonScore],
        records: list[PriceRecord],
        route: Optional[Route] = None,
    ) -> Recommendation:
        """Recommend a travel period for ``query``.

        Args:
            query:   Traveller request.
            scores:  Classified periods for the route (may be empty when the
                     window was too small to classify).
            records: Raw fares for the candidate periods.
            route:   Route being analysed, used in error messages and logs.

        Returns:
            A fully populated ``Recommendation``.

        Raises:
            NoPriceDataError: If no fare matches the query filters.
        """
        matching = fares_for_query(records, query)
        if not matching:
            raise NoPriceDataError(query.trip_type, route)

        requested_period = period_key(query.start_date)
        season = season_for_period(scores, requested_period)

        base_quote = best_fare_on(matching, query.start_date)
        base_price = self._total(base_quote.price, query) if base_quote else None

        savings = self._savings(query, scores, matching, season, base_price)
        before, after = self._comparisons(query, matching, base_price)
        recommended = self._recommended_quote(scores, matching, season)

        logger.info(
            "Recommendation for %s on %s: season=%s base=%s recommended=%s@%s",
            route or "route", query.start_date, season, base_price,
            recommended.departure_date, recommended.price,
        )

        return Recommendation(
            period=period_key(recommended.departure_date),
            start_date=recommended.departure_date,
            return_date=recommended.return_date,
            duration_days=recommended.duration_days,
            price=self._total(recommended.price, query),
            airline=recommended.airline,
            season=season,
            savings=savings,
            base_price=base_price,
            base_airline=base_quote.airline if base_quote else None,
            if_go_before=before,
            if_go_after=after,
        )

    # ── Steps ─────────────────────────────────────────────────────────────────

    def _total(self, price: float, query: RecommendationQuery) -> float:
        return passenger_total(
            price,
            query.passengers,
            child_factor=self.config.child_price_factor,
            infant_factor=self.config.infant_price_factor,
        )

    def _savings(
        self,
        query: RecommendationQuery,
        scores: list[SeasonScore],
        matching: list[PriceRecord],
        season: str,
        base_price: Optional[float],
    ) -> float:
        low_periods = {s.period for s in scores if s.season == "low"}
        low_prices = [r.price for r in matching if period_key(r.departure_date) in low_periods]
        if not low_prices:
            return 0.0

        reference = base_price
        if reference is None:
            season_periods = {s.period for s in scores if s.season == season}
            season_prices = [
                r.price for r in matching if period_key(r.departure_date) in season_periods
            ]
            if not season_prices:
                return 0.0
            reference = self._total(min(season_prices), query)

        return max(0.0, round(reference - self._total(min(low_prices), query), 2))

    def _comparisons(
        self,
        query: RecommendationQuery,
        matching: list[PriceRecord],
        base_price: Optional[float],
    ) -> tuple[Optional[PriceComparison], Optional[PriceComparison]]:
        if base_price is None:
            return None, None

        available = priced_dates(matching)
        window = self.config.comparison_window_days
        results: list[Optional[PriceComparison]] = []
        for direction in ("before", "after"):
            day = nearest_priced_date(available, query.start_date, direction, window)
            quote = best_fare_on(matching, day) if day is not None else None
            if quote is None:
                results.append(None)
                continue
            results.append(
                build_comparison(
                    departure_date=quote.departure_date,
                    return_date=quote.return_date,
                    price=self._total(quote.price, query),
                    base_price=base_price,
                )
            )
        return results[0], results[1]

    def _recommended_quote(
        self,
        scores: list[SeasonScore],
        matching: list[PriceRecord],
        season: str,
    ) -> FareQuote:
        by_period: dict[str, list[PriceRecord]] = defaultdict(list)
        for r in matching:
            by_period[period_key(r.departure_date)].append(r)

        candidates: list[str] = []
        for wanted in ("low", season):
            candidates = [
                s.period for s in scores if s.season == wanted and s.period in by_period
            ]
            if candidates:
                break
        if not candidates:
            candidates = list(by_period)

        best_period = min(
            candidates,
            key=lambda p: (sum(r.price for r in by_period[p]) / len(by_period[p]), p),
        )
        cheapest = min(
            by_period[best_period],
            key=lambda r: (r.price, r.departure_date, r.airline or ""),
        )
        return FareQuote(
            departure_date=cheapest.departure_date,
            return_date=cheapest.return_date,
            duration_days=cheapest.stay_days,
            price=cheapest.price,
            airline=cheapest.airline,
        )
