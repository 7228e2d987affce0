"""
Collaborator interfaces consumed by the analysis core, plus in-memory stores.

The core never fetches or persists raw data itself.  Price, weather and
holiday sources are injected as objects satisfying the protocols below;
the price predictor protocol lives in ``forecasting.predictor`` and is
re-exported here so callers can import every collaborator from one place.

The in-memory implementations are populated by ``ingestion.csv_loader`` for
the CLI and by fixtures in tests.  They are read-only after construction.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Protocol

from fare_forecaster.forecasting.predictor import Predictor
from fare_forecaster.models.price import PriceRecord, Route
from fare_forecaster.models.season import HolidayStatistic, WeatherStatistic

logger = logging.getLogger(__name__)

__all__ = [
    "PriceStore",
    "WeatherStore",
    "HolidayStore",
    "Predictor",
    "InMemoryPriceStore",
    "InMemoryWeatherStore",
    "InMemoryHolidayStore",
]


# ── Protocols ─────────────────────────────────────────────────────────────────


class PriceStore(Protocol):
    """Source of observed fares for a route."""

    def get_prices(
        self,
        route: Route,
        start: date,
        end: date,
        trip_type: Optional[str] = None,
    ) -> list[PriceRecord]:
        ...


class WeatherStore(Protocol):
    """Source of per-province monthly weather scores."""

    def get_weather_score(self, province: str, period: str) -> Optional[float]:
        ...


class HolidayStore(Protocol):
    """Source of monthly holiday-density scores."""

    def get_holiday_score(self, period: str) -> Optional[float]:
        ...


# ── In-memory implementations ─────────────────────────────────────────────────


class InMemoryPriceStore:
    """Fares keyed by route, filtered by date range and trip type on read."""

    def __init__(self, prices: Optional[dict[Route, list[PriceRecord]]] = None) -> None:
        self._prices: dict[Route, list[PriceRecord]] = defaultdict(list)
        for route, records in (prices or {}).items():
            self._prices[route].extend(records)

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[Route, PriceRecord]]) -> "InMemoryPriceStore":
        grouped: dict[Route, list[PriceRecord]] = defaultdict(list)
        for route, record in rows:
            grouped[route].append(record)
        return cls(dict(grouped))

    @property
    def routes(self) -> list[Route]:
        return sorted(self._prices, key=str)

    def get_prices(
        self,
        route: Route,
        start: date,
        end: date,
        trip_type: Optional[str] = None,
    ) -> list[PriceRecord]:
        """Return fares for ``route`` departing in ``[start, end]``, in date order."""
        matched = [
            r for r in self._prices.get(route, [])
            if start <= r.departure_date <= end
            and (trip_type is None or r.trip_type == trip_type)
        ]
        matched.sort(key=lambda r: (r.departure_date, r.price))
        logger.debug(
            "Price store: %d record(s) for %s between %s and %s.",
            len(matched), route, start, end,
        )
        return matched


class InMemoryWeatherStore:
    """Weather scores keyed by ``(province, period)``."""

    def __init__(self, statistics: Iterable[WeatherStatistic] = ()) -> None:
        self._scores: dict[tuple[str, str], Optional[float]] = {
            (s.province.lower(), s.period): s.weather_score for s in statistics
        }

    def get_weather_score(self, province: str, period: str) -> Optional[float]:
        return self._scores.get((province.lower(), period))


class InMemoryHolidayStore:
    """Holiday scores keyed by period."""

    def __init__(self, statistics: Iterable[HolidayStatistic] = ()) -> None:
        self._stats: dict[str, HolidayStatistic] = {s.period: s for s in statistics}

    def get_holiday_score(self, period: str) -> Optional[float]:
        stat = self._stats.get(period)
        return stat.holiday_score if stat is not None else None

    def get_holidays(self, period: str) -> list[str]:
        """Holiday names recorded for ``period`` (empty when unknown)."""
        stat = self._stats.get(period)
        return list(stat.holidays) if stat is not None else []
