"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``FARE_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Every component that needs tunable policy (season weights, tertile positions,
cache max age, comparison window) receives the relevant config section as an
argument.  There is no module-level config singleton.
"""

from __future__ import annotations

import math
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class SeasonConfig(BaseModel):
    """Composite season score weights and tertile split positions.

    The 0.6 / 0.3 / 0.1 weighting and the 0.33 / 0.67 index positions are
    empirical choices; they live here so they can be tuned without touching
    the scoring or classification code.
    """

    model_config = ConfigDict(frozen=True)

    price_weight: float = 0.6
    holiday_weight: float = 0.3
    weather_weight: float = 0.1
    neutral_score: float = 50.0
    low_position: float = 0.33
    high_position: float = 0.67
    min_periods: int = 3

    @field_validator("price_weight", "holiday_weight", "weather_weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Season weights must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("neutral_score")
    @classmethod
    def validate_neutral(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"neutral_score must be in [0, 100], got {v}.")
        return v

    @field_validator("min_periods")
    @classmethod
    def validate_min_periods(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"min_periods must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_policy(self) -> "SeasonConfig":
        total = self.price_weight + self.holiday_weight + self.weather_weight
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Season weights must sum to 1.0, got {total:.4f}.")
        if not 0.0 <= self.low_position < self.high_position < 1.0:
            raise ValueError(
                "Tertile positions must satisfy 0 <= low_position < high_position < 1, "
                f"got low={self.low_position}, high={self.high_position}."
            )
        return self


class CacheConfig(BaseModel):
    """Cached aggregate freshness policy."""

    model_config = ConfigDict(frozen=True)

    max_age_days: int = 7

    @field_validator("max_age_days")
    @classmethod
    def validate_max_age(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_age_days must be >= 1, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation engine parameters."""

    model_config = ConfigDict(frozen=True)

    comparison_window_days: int = 7
    analysis_months_each_side: int = 6
    default_duration_min: int = 3
    default_duration_max: int = 5
    child_price_factor: float = 0.75
    infant_price_factor: float = 0.1

    @field_validator("comparison_window_days", "analysis_months_each_side")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Window sizes must be >= 1, got {v}.")
        return v

    @field_validator("child_price_factor", "infant_price_factor")
    @classmethod
    def validate_factor(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Passenger price factors must be in [0.0, 1.0], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_duration(self) -> "RecommendationConfig":
        if not 0 <= self.default_duration_min <= self.default_duration_max:
            raise ValueError(
                "default_duration_min must be >= 0 and <= default_duration_max, "
                f"got {self.default_duration_min}..{self.default_duration_max}."
            )
        return self


class ForecastConfig(BaseModel):
    """Price-band forecast settings."""

    model_config = ConfigDict(frozen=True)

    horizon_days: int = 30
    history_days: int = 30
    confidence_pct: float = 0.80
    trend_threshold_pct: float = 5.0

    @field_validator("horizon_days", "history_days")
    @classmethod
    def validate_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Forecast day counts must be >= 1, got {v}.")
        return v

    @field_validator("confidence_pct")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError(f"confidence_pct must be in (0.0, 1.0), got {v}.")
        return v


class RouteConfig(BaseModel):
    """Route defaults and destination → province lookup for weather data."""

    model_config = ConfigDict(frozen=True)

    default_origin: str = "BKK"
    destination_provinces: dict[str, str] = {
        "CNX": "chiang-mai",
        "HKT": "phuket",
        "KBV": "krabi",
        "HDY": "hat-yai",
    }

    def province_for(self, destination: str) -> Optional[str]:
        """Return the weather province slug for a destination code, if known."""
        return self.destination_provinces.get(destination.upper())


class DataConfig(BaseModel):
    """Filesystem paths for CSV inputs and model artifacts."""

    model_config = ConfigDict(frozen=True)

    prices_csv: str = "data/raw/prices.csv"
    weather_csv: str = "data/raw/weather.csv"
    holidays_csv: str = "data/raw/holidays.csv"
    model_dir: str = "data/models"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/fare_forecaster.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    season: SeasonConfig = SeasonConfig()
    cache: CacheConfig = CacheConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    forecast: ForecastConfig = ForecastConfig()
    routes: RouteConfig = RouteConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply FARE_FORECASTER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply FARE_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      FARE_FORECASTER_LOG_LEVEL               → raw["logging"]["level"]
      FARE_FORECASTER_DEBUG                   → raw["debug"]
      FARE_FORECASTER_CACHE_MAX_AGE_DAYS      → raw["cache"]["max_age_days"]
      FARE_FORECASTER_COMPARISON_WINDOW_DAYS  → raw["recommendation"]["comparison_window_days"]
    """
    if log_level := os.environ.get("FARE_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("FARE_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if max_age := os.environ.get("FARE_FORECASTER_CACHE_MAX_AGE_DAYS"):
        raw.setdefault("cache", {})["max_age_days"] = int(max_age)

    if window := os.environ.get("FARE_FORECASTER_COMPARISON_WINDOW_DAYS"):
        raw.setdefault("recommendation", {})["comparison_window_days"] = int(window)

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        season=SeasonConfig(**raw.get("season", {})),
        cache=CacheConfig(**raw.get("cache", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        forecast=ForecastConfig(**raw.get("forecast", {})),
        routes=RouteConfig(**raw.get("routes", {})),
        data=DataConfig(**raw.get("data", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
