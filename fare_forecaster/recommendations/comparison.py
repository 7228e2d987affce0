"""
"If you go earlier / later" comparisons.

From the requested departure date the scan walks outward one day at a time,
up to ``window_days`` days, and stops at the first date carrying at least
one matching fare.  No such date inside the window means the comparison is
omitted (``None``), never zero-filled.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Literal, Optional

from fare_forecaster.models.recommendation import PriceComparison

Direction = Literal["before", "after"]


def nearest_priced_date(
    available: set[date],
    base: date,
    direction: Direction,
    window_days: int,
) -> Optional[date]:
    """Return the closest date to ``base`` in ``direction`` that has fares.

    Args:
        available:   Departure dates carrying at least one matching fare.
        base:        Requested departure date (excluded from the scan).
        direction:   ``"before"`` scans backward, ``"after"`` scans forward.
        window_days: Maximum distance in days to look.

    Returns:
        The nearest priced date, or None if none lies within the window.
    """
    step = -1 if direction == "before" else 1
    for offset in range(1, window_days + 1):
        candidate = base + timedelta(days=offset * step)
        if candidate in available:
            return candidate
    return None


def build_comparison(
    departure_date: date,
    return_date: Optional[date],
    price: float,
    base_price: float,
) -> PriceComparison:
    """Price difference and percentage of an alternative date vs. the base price.

    ``percentage`` is ``difference / base_price * 100`` rounded to one
    decimal; negative values mean the alternative is cheaper.
    """
    difference = round(price - base_price, 2)
    percentage = round(difference / base_price * 100.0, 1) if base_price > 0 else 0.0
    return PriceComparison(
        departure_date=departure_date,
        return_date=return_date,
        price=price,
        difference=difference,
        percentage=percentage,
    )
