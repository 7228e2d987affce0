"""
Calendar helpers for period-based fare analysis.

Key concepts:
  - Period: a calendar month identified by a ``"YYYY-MM"`` key.  It is the
    unit of seasonality analysis.
  - Day walks: inclusive day-by-day ranges used by cache gap detection,
    comparison scans and forecast horizons.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone


def period_key(d: date) -> str:
    """Return the ``"YYYY-MM"`` period key for a date (or datetime)."""
    return f"{d.year:04d}-{d.month:02d}"


def parse_period(period: str) -> tuple[int, int]:
    """Parse a ``"YYYY-MM"`` key into ``(year, month)``.

    Raises:
        ValueError: If the key is malformed or the month is out of range.
    """
    try:
        year_str, month_str = period.split("-")
        year, month = int(year_str), int(month_str)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid period key '{period}'. Expected 'YYYY-MM'.") from exc
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period key '{period}'.")
    return year, month


def period_month(period: str) -> int:
    """Return the calendar month (1–12) of a period key."""
    return parse_period(period)[1]


def period_bounds(period: str) -> tuple[date, date]:
    """Return the first and last calendar day of a period."""
    year, month = parse_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_months(d: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``d``'s month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def analysis_window(anchor: date, months_each_side: int) -> tuple[date, date]:
    """Return the (start, end) dates spanning ``months_each_side`` around ``anchor``.

    The window starts on the first day of the month ``months_each_side``
    before ``anchor`` and ends on the last day of the month
    ``months_each_side - 1`` after it, so a 6-month setting covers 12
    consecutive months.
    """
    start = shift_months(anchor, -months_each_side)
    end_month_start = shift_months(anchor, months_each_side - 1)
    _, end = period_bounds(period_key(end_month_start))
    return start, end


def date_range(start: date, end: date, step_days: int = 1) -> list[date]:
    """Generate a list of dates from ``start`` to ``end`` (inclusive).

    Returns an empty list when ``end < start``.

    Raises:
        ValueError: If ``step_days < 1``.
    """
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    result: list[date] = []
    current = start
    while current <= end:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
