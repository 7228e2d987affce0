"""
Price-band forecaster: merges observed daily fares with predictor output.

Band construction
-----------------
1. Every observed date becomes a collapsed point
   (``low = typical = high = price``, ``is_actual=True``).
2. The dates ``last_actual + 1 … last_actual + horizon_days`` are sent to
   the predictor in a single call.  Each estimate becomes a forecast point
   (``is_actual=False``) with ``low <= typical <= high`` enforced by
   widening the band around the estimate when needed.
3. ``last_actual_date`` is kept on the result so consumers can split the
   known segment from the forecast segment.

Degradation
-----------
Any predictor failure (``PredictorUnavailableError``, timeouts raised by the
caller's client, model errors) is logged and absorbed: the actual-only
prefix is returned with ``forecast_available=False``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from fare_forecaster.forecasting.predictor import Predictor, PredictorUnavailableError
from fare_forecaster.models.forecast import PriceBand, PriceBandPoint, PredictorEstimate
from fare_forecaster.models.price import PriceRecord

logger = logging.getLogger(__name__)


def daily_average_prices(records: Iterable[PriceRecord]) -> dict[date, float]:
    """Collapse fares to one mean price per departure date, in date order."""
    by_day: dict[date, list[float]] = defaultdict(list)
    for r in records:
        by_day[r.departure_date].append(r.price)
    return {d: round(sum(v) / len(v), 2) for d, v in sorted(by_day.items())}


def _forecast_point(est: PredictorEstimate) -> PriceBandPoint:
    typical = est.estimate
    return PriceBandPoint(
        target_date=est.target_date,
        low=min(est.low, typical),
        typical=typical,
        high=max(est.high, typical),
        is_actual=False,
    )


class PriceBandForecaster:
    """Builds a ``PriceBand`` from observed prices and a ``Predictor``.

    Attributes:
        predictor: Black-box predictor consulted for future dates.
    """

    def __init__(self, predictor: Predictor) -> None:
        self.predictor = predictor

    def build(
        self,
        actuals: Mapping[date, float],
        horizon_days: int,
        forecast_start: Optional[date] = None,
    ) -> PriceBand:
        """Stitch actual prices with ``horizon_days`` of forecasts.

        Args:
            actuals:        Observed date → price (any order).
            horizon_days:   Number of days to forecast past the last actual.
            forecast_start: First forecast date when there are no actuals
                            (defaults to today).

        Returns:
            ``PriceBand``; ``forecast_available`` is False when the predictor
            failed.

        Raises:
            ValueError: If ``horizon_days`` is negative.
        """
        if horizon_days < 0:
            raise ValueError(f"horizon_days must be >= 0, got {horizon_days}.")

        ordered = sorted(actuals.items())
        actual_points = [
            PriceBandPoint(target_date=d, low=p, typical=p, high=p, is_actual=True)
            for d, p in ordered
        ]
        last_actual = ordered[-1][0] if ordered else None

        if horizon_days == 0:
            return PriceBand(points=actual_points, last_actual_date=last_actual)

        first_forecast = (
            last_actual + timedelta(days=1)
            if last_actual is not None
            else (forecast_start or date.today())
        )
        horizon = [first_forecast + timedelta(days=i) for i in range(horizon_days)]

        try:
            estimates = self.predictor.predict(dict(ordered), horizon)
        except PredictorUnavailableError as exc:
            logger.warning("Price band degraded to actual-only: %s", exc)
            return PriceBand(
                points=actual_points, last_actual_date=last_actual, forecast_available=False
            )
        except Exception:
            logger.warning("Predictor raised; price band degraded to actual-only.", exc_info=True)
            return PriceBand(
                points=actual_points, last_actual_date=last_actual, forecast_available=False
            )

        wanted = set(horizon)
        forecast_points: dict[date, PriceBandPoint] = {}
        dropped = 0
        for est in estimates:
            if est.target_date not in wanted or est.estimate <= 0:
                dropped += 1
                continue
            forecast_points[est.target_date] = _forecast_point(est)
        if dropped:
            logger.warning("Dropped %d predictor estimate(s) outside horizon or non-positive.", dropped)

        return PriceBand(
            points=actual_points + [forecast_points[d] for d in sorted(forecast_points)],
            last_actual_date=last_actual,
            forecast_available=True,
        )
