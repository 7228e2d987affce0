"""
LightGBM-based fare predictor.

Features
--------
One row per observed departure date:

    day_of_week           0 = Monday … 6 = Sunday
    month                 1 … 12
    days_until_departure  departure date − reference date (negative for
                          past departures)
    is_weekend            1 on Saturday / Sunday

The target is the observed daily fare.  Fares are driven mostly by weekday,
month and booking lead time, which these four columns capture without any
route-specific identifiers.

Uncertainty
-----------
LightGBM returns a point estimate only.  The band comes from the confidence
tiers in ``forecasting.predictor`` (±15% / ±20% / ±25% by lead time).  These
spreads are heuristic, not model-calibrated.

Missing values
--------------
All feature columns are derived from dates and are never missing.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

from fare_forecaster.forecasting.predictor import PredictorUnavailableError, tiered_estimate
from fare_forecaster.models.forecast import PredictorEstimate

logger = logging.getLogger(__name__)

FEATURE_COLS: list[str] = ["day_of_week", "month", "days_until_departure", "is_weekend"]
CATEGORICAL_FEATURE_COLS: list[str] = ["day_of_week", "month"]
MIN_TRAINING_ROWS = 10


def build_feature_row(target: date, reference_date: date) -> list[float]:
    """Feature vector for one departure date, in ``FEATURE_COLS`` order."""
    weekday = target.weekday()
    return [
        float(weekday),
        float(target.month),
        float((target - reference_date).days),
        1.0 if weekday >= 5 else 0.0,
    ]


class LightGBMFarePredictor:
    """LightGBM regression over date-derived features.

    ``fit()`` trains and keeps a booster for reuse; ``predict()`` uses the
    stored booster when present, otherwise trains a throwaway booster on the
    history it is given so each call stays independent.

    Attributes:
        reference_date: "Today" for lead-time features; defaults to the
            current date at call time.
        MODEL_VERSION:  Version string embedded in artifact metadata.
    """

    MODEL_VERSION = "v0.3.0"

    def __init__(
        self,
        reference_date: Optional[date] = None,
        num_leaves: int = 15,
        learning_rate: float = 0.1,
        n_estimators: int = 100,
        min_child_samples: int = 3,
    ) -> None:
        self.reference_date = reference_date
        self._hyperparams: dict[str, Any] = {
            "num_leaves":        num_leaves,
            "learning_rate":     learning_rate,
            "n_estimators":      n_estimators,
            "min_child_samples": min_child_samples,
        }
        self._booster = None       # lgb.Booster; None until fit()
        self._train_metrics: dict[str, float] = {}
        self._training_rows: int = 0
        self._trained_at: str = ""

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def is_fitted(self) -> bool:
        """True after fit() has been called successfully."""
        return self._booster is not None

    @property
    def train_metrics(self) -> dict[str, float]:
        """In-sample metrics from the most recent fit() call."""
        return dict(self._train_metrics)

    def _reference(self) -> date:
        return self.reference_date or date.today()

    # ── Training ──────────────────────────────────────────────────────────────

    def _train(self, history: Mapping[date, float]):
        import lightgbm as lgb
        import numpy as np

        if len(history) < MIN_TRAINING_ROWS:
            raise ValueError(
                f"LightGBMFarePredictor needs >= {MIN_TRAINING_ROWS} training rows; "
                f"got {len(history)}."
            )

        reference = self._reference()
        days = sorted(history)
        X = np.array([build_feature_row(d, reference) for d in days], dtype=np.float64)
        y = np.array([float(history[d]) for d in days], dtype=np.float64)

        params = {
            "objective":         "regression_l1",  # MAE loss, robust to fare spikes
            "metric":            "mae",
            "num_leaves":        self._hyperparams["num_leaves"],
            "learning_rate":     self._hyperparams["learning_rate"],
            "min_child_samples": self._hyperparams["min_child_samples"],
            "min_data_in_bin":   1,
            "verbose":           -1,
            "n_jobs":            1,
        }
        dtrain = lgb.Dataset(
            X,
            label=y,
            feature_name=FEATURE_COLS,
            categorical_feature=[FEATURE_COLS.index(c) for c in CATEGORICAL_FEATURE_COLS],
            free_raw_data=False,
        )
        booster = lgb.train(
            params,
            dtrain,
            num_boost_round=self._hyperparams["n_estimators"],
        )
        return booster, X, y

    def fit(self, history: Mapping[date, float]) -> dict[str, float]:
        """Train on observed daily fares and keep the booster.

        Args:
            history: Observed date → daily fare.

        Returns:
            In-sample metrics: mae, rmse, n_train.

        Raises:
            ValueError: Fewer than 10 observed days.
        """
        booster, X, y = self._train(history)
        self._booster = booster
        self._training_rows = len(y)
        self._trained_at = date.today().isoformat()
        self._train_metrics = self._evaluate(X, y)
        logger.info(
            "LightGBMFarePredictor trained on %d rows (mae=%.2f).",
            self._training_rows, self._train_metrics.get("mae", float("nan")),
        )
        return dict(self._train_metrics)

    # ── Inference ─────────────────────────────────────────────────────────────

    def predict(
        self,
        history: Mapping[date, float],
        horizon_dates: list[date],
    ) -> list[PredictorEstimate]:
        """Predict a tiered fare band for each horizon date.

        Raises:
            PredictorUnavailableError: If no booster is fitted and the history
                is too short to train one.
        """
        if not horizon_dates:
            return []

        import numpy as np

        booster = self._booster
        if booster is None:
            try:
                booster, _, _ = self._train(history)
            except ValueError as exc:
                raise PredictorUnavailableError(str(exc)) from exc

        reference = self._reference()
        X = np.array([build_feature_row(d, reference) for d in horizon_dates], dtype=np.float64)
        preds = booster.predict(X)
        return [
            tiered_estimate(d, max(0.0, float(p)), reference)
            for d, p in zip(horizon_dates, preds)
        ]

    # ── Evaluation ────────────────────────────────────────────────────────────

    def _evaluate(self, X, y) -> dict[str, float]:
        """Compute MAE and RMSE on a feature matrix + true labels."""
        preds = self._booster.predict(X)
        n = len(y)
        if n == 0:
            return {}
        mae_sum = rmse_sum = 0.0
        for actual, pred in zip(y, preds):
            err = actual - pred
            mae_sum  += abs(err)
            rmse_sum += err * err
        return {
            "mae":     mae_sum / n,
            "rmse":    math.sqrt(rmse_sum / n),
            "n_train": float(n),
        }

    # ── Persistence ───────────────────────────────────────────────────────────

    def save(self, artifact_path: Path) -> None:
        """Serialize the booster to a joblib pickle file.

        Raises:
            RuntimeError: If the model has not been fitted.
        """
        if not self.is_fitted:
            raise RuntimeError("Cannot save an unfitted LightGBMFarePredictor.")

        import joblib

        artifact_path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(
            {
                "booster":        self._booster,
                "hyperparams":    self._hyperparams,
                "train_metrics":  self._train_metrics,
                "training_rows":  self._training_rows,
                "reference_date": self.reference_date,
                "model_version":  self.MODEL_VERSION,
                "trained_at":     self._trained_at,
            },
            artifact_path,
        )
        logger.info("Model artifact saved: %s", artifact_path)

    @classmethod
    def load(cls, artifact_path: Path) -> "LightGBMFarePredictor":
        """Load a serialized predictor from disk.

        Raises:
            FileNotFoundError: If artifact_path does not exist.
        """
        import joblib

        if not artifact_path.exists():
            raise FileNotFoundError(f"Model artifact not found: {artifact_path}")

        state = joblib.load(artifact_path)
        inst = cls(reference_date=state.get("reference_date"), **state.get("hyperparams", {}))
        inst._booster       = state["booster"]
        inst._train_metrics = state.get("train_metrics", {})
        inst._training_rows = state.get("training_rows", 0)
        inst._trained_at    = state.get("trained_at", "")
        logger.info("Model artifact loaded: %s (trained=%s)", artifact_path, inst._trained_at)
        return inst

    def write_metadata(self, meta_path: Path, route_label: str) -> None:
        """Write a JSON metadata sidecar alongside the model artifact."""
        meta = {
            "schema_version":  self.MODEL_VERSION,
            "model_type":      "lightgbm",
            "route":           route_label,
            "trained_at":      self._trained_at,
            "feature_columns": FEATURE_COLS,
            "hyperparameters": self._hyperparams,
            "train_metrics":   self._train_metrics,
            "training_rows":   self._training_rows,
        }
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.write_text(json.dumps(meta, indent=2))
        logger.debug("Model metadata written: %s", meta_path)
