"""
Cache freshness and date-gap checks.

Freshness rule
--------------
    fresh  ⇔  whole days since updated_at  <  max_age_days

Whole days are truncated toward zero, so an entry updated 6 days 23 hours
ago is 6 days old.  A missing ``updated_at`` is always stale.

Assumptions
-----------
- Naive datetimes are interpreted as UTC.
- ISO-8601 strings (with ``Z`` or an explicit offset) are accepted for
  ``updated_at`` because cache metadata usually arrives serialized.
- Missing-date detection compares calendar dates only; time-of-day on
  cached datetimes is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from fare_forecaster.models.cache import CacheEntry
from fare_forecaster.utils.time_utils import as_date, date_range, utcnow

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_DAYS = 7

Timestamp = Union[datetime, date, str]


# ── Result dataclass ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CacheVerdict:
    """Freshness decision for one cache entry.

    Attributes:
        key:          Cache key checked.
        is_fresh:     True if the entry may be served as-is.
        age_days:     Whole days since the last update, or None if unknown.
        max_age_days: Policy threshold applied.
    """

    key:          str
    is_fresh:     bool
    age_days:     Optional[int]
    max_age_days: int


# ── Helpers ───────────────────────────────────────────────────────────────────


def _to_utc_datetime(value: Timestamp) -> datetime:
    """Normalise a timestamp to an aware UTC datetime.

    Raises:
        ValueError: If a string cannot be parsed as ISO-8601.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def age_in_days(updated_at: Optional[Timestamp], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days elapsed since ``updated_at``; None when no timestamp."""
    if updated_at is None:
        return None
    current = _to_utc_datetime(now) if now is not None else utcnow()
    delta = current - _to_utc_datetime(updated_at)
    # timedelta.days floors; truncate toward zero for future timestamps.
    seconds = delta.total_seconds()
    return int(seconds // 86400) if seconds >= 0 else -int(-seconds // 86400)


# ── Public API ────────────────────────────────────────────────────────────────


def is_fresh(
    updated_at: Optional[Timestamp],
    max_age_days: int = DEFAULT_MAX_AGE_DAYS,
    now: Optional[datetime] = None,
) -> bool:
    """Return True iff the cached data is younger than ``max_age_days``.

    Args:
        updated_at:   Last update timestamp, or None.
        max_age_days: Maximum age in whole days (default 7).
        now:          Reference time (defaults to the current UTC time).

    Returns:
        False when ``updated_at`` is None; otherwise ``age < max_age_days``.
    """
    age = age_in_days(updated_at, now)
    if age is None:
        return False
    return age < max_age_days


def find_missing_dates(
    cached_dates: Iterable[Union[date, datetime]],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> list[date]:
    """Return every calendar day in ``[start, end]`` absent from ``cached_dates``.

    Args:
        cached_dates: Dates (or datetimes) already present in the cache.
        start:        First day to check (inclusive).
        end:          Last day to check (inclusive).

    Returns:
        Missing dates in ascending order; empty when ``end < start``.
    """
    cached = {as_date(d) for d in cached_dates}
    missing = [d for d in date_range(as_date(start), as_date(end)) if d not in cached]
    if missing:
        logger.debug(
            "%d missing date(s) between %s and %s.", len(missing), as_date(start), as_date(end)
        )
    return missing


def check_cache_entry(entry: CacheEntry, now: Optional[datetime] = None) -> CacheVerdict:
    """Classify one ``CacheEntry`` against its own max-age policy."""
    age = age_in_days(entry.updated_at, now)
    return CacheVerdict(
        key=entry.key,
        is_fresh=age is not None and age < entry.max_age_days,
        age_days=age,
        max_age_days=entry.max_age_days,
    )


def check_cache_entries(
    entries: list[CacheEntry],
    now: Optional[datetime] = None,
) -> list[CacheVerdict]:
    """Check a batch of cache entries; results are in input order."""
    return [check_cache_entry(e, now) for e in entries]
