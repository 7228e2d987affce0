"""
Predictor interface and a dependency-light baseline predictor.

Contract
--------
    predict(history, horizon_dates) -> list[PredictorEstimate]

``history`` maps observed dates to daily prices.  Implementations return one
estimate per date they can predict (dates they cannot predict are simply
absent) and raise ``PredictorUnavailableError`` when they cannot produce
anything at all.  Timeouts are owned by the caller.

Confidence tiers
----------------
Spread narrows as departure approaches:

    days until departure <= 30  → "high"   confidence, ±15%
    days until departure <= 60  → "medium" confidence, ±20%
    otherwise                   → "low"    confidence, ±25%
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional, Protocol

import numpy as np

from fare_forecaster.models.forecast import PredictorEstimate

logger = logging.getLogger(__name__)

# tier → (max days until departure, half-width as fraction of the estimate)
CONFIDENCE_TIERS: tuple[tuple[str, int, float], ...] = (
    ("high",   30, 0.15),
    ("medium", 60, 0.20),
)
LOW_CONFIDENCE_SPREAD = 0.25

# z-score per two-sided confidence level
_Z_LOOKUP: dict[float, float] = {
    0.50: 0.674,
    0.80: 1.280,
    0.90: 1.645,
    0.95: 1.960,
    0.99: 2.576,
}
_DEFAULT_Z = 1.280

# Minimum band half-width as fraction of the estimate
_MIN_SPREAD_FRAC = 0.05


class PredictorUnavailableError(RuntimeError):
    """Raised when a predictor cannot produce estimates.

    Attributes:
        reason: Short description of the failure.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Predictor unavailable: {reason}")


class Predictor(Protocol):
    """Black-box price predictor."""

    def predict(
        self,
        history: Mapping[date, float],
        horizon_dates: list[date],
    ) -> list[PredictorEstimate]:
        ...


def confidence_tier(days_until_departure: int) -> tuple[str, float]:
    """Return ``(tier_name, spread_fraction)`` for a lead time in days."""
    for name, max_days, spread in CONFIDENCE_TIERS:
        if days_until_departure <= max_days:
            return name, spread
    return "low", LOW_CONFIDENCE_SPREAD


def tiered_estimate(
    target_date: date,
    estimate: float,
    reference_date: date,
) -> PredictorEstimate:
    """Wrap a point estimate in the tiered ± spread for its lead time."""
    estimate = max(0.0, estimate)
    _, spread = confidence_tier(max(0, (target_date - reference_date).days))
    return PredictorEstimate(
        target_date=target_date,
        estimate=round(estimate, 2),
        low=round(estimate * (1.0 - spread), 2),
        high=round(estimate * (1.0 + spread), 2),
    )


class SeasonalNaivePredictor:
    """Weekday-mean baseline.

    The estimate for a future date is the mean of historical prices on the
    same weekday (falling back to the overall mean when that weekday was
    never observed).  The band is ``estimate ± z * std`` of those prices,
    floored at 5% of the estimate.

    Attributes:
        confidence_pct: Two-sided confidence level of the band.
        min_history:    Minimum number of observed days required.
    """

    def __init__(self, confidence_pct: float = 0.80, min_history: int = 3) -> None:
        self.confidence_pct = confidence_pct
        self.min_history = min_history

    def predict(
        self,
        history: Mapping[date, float],
        horizon_dates: list[date],
    ) -> list[PredictorEstimate]:
        if len(history) < self.min_history:
            raise PredictorUnavailableError(
                f"need >= {self.min_history} observed days, got {len(history)}"
            )

        z = _Z_LOOKUP.get(self.confidence_pct, _DEFAULT_Z)
        all_prices = np.array(list(history.values()), dtype=np.float64)
        by_weekday: dict[int, np.ndarray] = {}
        for weekday in range(7):
            values = [p for d, p in history.items() if d.weekday() == weekday]
            if values:
                by_weekday[weekday] = np.array(values, dtype=np.float64)

        estimates: list[PredictorEstimate] = []
        for target in horizon_dates:
            sample = by_weekday.get(target.weekday(), all_prices)
            center = float(sample.mean())
            std: Optional[float] = float(sample.std()) if sample.size > 1 else None
            half = z * std if std else 0.0
            half = max(half, _MIN_SPREAD_FRAC * center)
            estimates.append(
                PredictorEstimate(
                    target_date=target,
                    estimate=round(center, 2),
                    low=round(max(0.0, center - half), 2),
                    high=round(center + half, 2),
                )
            )
        logger.debug("SeasonalNaivePredictor produced %d estimates.", len(estimates))
        return estimates
