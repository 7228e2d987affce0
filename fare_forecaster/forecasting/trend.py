"""
Price trend between a current and a future estimate.

    change_percent = (future - current) / current * 100

    change_percent >  threshold → "increasing"
    change_percent < -threshold → "decreasing"
    otherwise                   → "stable"
"""

from __future__ import annotations

from typing import Optional

from fare_forecaster.models.forecast import PriceTrend

DEFAULT_TREND_THRESHOLD_PCT = 5.0


def compute_price_trend(
    current_price: float,
    future_price: float,
    threshold_pct: float = DEFAULT_TREND_THRESHOLD_PCT,
) -> Optional[PriceTrend]:
    """Classify the movement from ``current_price`` to ``future_price``.

    Returns:
        ``PriceTrend`` with change rounded to 2 decimals, or None when
        ``current_price`` is not positive.
    """
    if current_price <= 0:
        return None

    change = (future_price - current_price) / current_price * 100.0
    if change > threshold_pct:
        trend = "increasing"
    elif change < -threshold_pct:
        trend = "decreasing"
    else:
        trend = "stable"

    return PriceTrend(
        trend=trend,
        change_percent=round(change, 2),
        current_price=current_price,
        future_price=future_price,
    )
