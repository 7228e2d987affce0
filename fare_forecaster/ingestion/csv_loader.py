"""
CSV loaders for fares, weather scores and holiday scores.

All files are comma delimited with a header row.  Empty optional cells map
to ``None``.

Prices (``prices.csv``)
  Required: origin, destination, departure_date, price
  Optional: airline, trip_type, travel_class, return_date

Weather (``weather.csv``)
  Required: province, period
  Optional: weather_score

Holidays (``holidays.csv``)
  Required: period
  Optional: holiday_score, holidays   (names separated by ``;``)

Date formats:
  departure_date / return_date → YYYY-MM-DD
  period                       → YYYY-MM

Every row is validated before anything is returned.  If any row fails, one
``ValueError`` lists the first 10 failures.
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from fare_forecaster.models.price import PriceRecord, Route
from fare_forecaster.models.season import HolidayStatistic, WeatherStatistic
from fare_forecaster.utils.time_utils import parse_period

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRICE_CSV_COLUMNS = frozenset({"origin", "destination", "departure_date", "price"})
WEATHER_CSV_COLUMNS = frozenset({"province", "period"})
HOLIDAY_CSV_COLUMNS = frozenset({"period"})

_MAX_ERRORS_SHOWN = 10


def parse_price_csv(path: Path) -> list[tuple[Route, PriceRecord]]:
    """Parse observed fares into ``(Route, PriceRecord)`` pairs.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row fails validation.
    """
    rows = _read_rows(path, PRICE_CSV_COLUMNS, "Price")
    result = _convert_rows(rows, _row_to_price, path)
    logger.info("Parsed %d fares from %s", len(result), path.name)
    return result


def parse_weather_csv(path: Path) -> list[WeatherStatistic]:
    """Parse monthly weather scores per province.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row fails validation.
    """
    rows = _read_rows(path, WEATHER_CSV_COLUMNS, "Weather")
    result = _convert_rows(rows, _row_to_weather, path)
    logger.info("Parsed %d weather scores from %s", len(result), path.name)
    return result


def parse_holiday_csv(path: Path) -> list[HolidayStatistic]:
    """Parse monthly holiday scores.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row fails validation.
    """
    rows = _read_rows(path, HOLIDAY_CSV_COLUMNS, "Holiday")
    result = _convert_rows(rows, _row_to_holiday, path)
    logger.info("Parsed %d holiday periods from %s", len(result), path.name)
    return result


# ── Private helpers ────────────────────────────────────────────────────────────

def _read_rows(path: Path, required: frozenset[str], kind: str) -> list[dict[str, str]]:
    if not path.exists():
        raise FileNotFoundError(f"{kind} CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip() for c in reader.fieldnames}
        missing = required - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = [{(k or "").strip(): (v or "") for k, v in row.items()} for row in reader]

    if not rows:
        logger.warning("%s CSV is empty (header only): %s", kind, path)
    return rows


def _convert_rows(
    rows: list[dict[str, str]],
    converter: Callable[[dict[str, str]], T],
    path: Path,
) -> list[T]:
    converted: list[T] = []
    errors: list[tuple[int, str]] = []

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            converted.append(converter(row))
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))

    if errors:
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:_MAX_ERRORS_SHOWN])
        suffix = (
            f"\n  … and {len(errors) - _MAX_ERRORS_SHOWN} more"
            if len(errors) > _MAX_ERRORS_SHOWN else ""
        )
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )
    return converted


def _row_to_price(row: dict[str, str]) -> tuple[Route, PriceRecord]:
    route = Route(origin=_req(row, "origin"), destination=_req(row, "destination"))
    record = PriceRecord(
        departure_date=_parse_date(row, "departure_date", required=True),
        return_date=_parse_date(row, "return_date"),
        price=_parse_float(row, "price", required=True),
        airline=_opt(row, "airline"),
        trip_type=(_opt(row, "trip_type") or "one-way").lower(),
        travel_class=(_opt(row, "travel_class") or "economy").lower(),
    )
    return route, record


def _row_to_weather(row: dict[str, str]) -> WeatherStatistic:
    return WeatherStatistic(
        province=_req(row, "province").lower(),
        period=_parse_period_field(row, "period"),
        weather_score=_parse_float(row, "weather_score"),
    )


def _row_to_holiday(row: dict[str, str]) -> HolidayStatistic:
    names = _opt(row, "holidays")
    return HolidayStatistic(
        period=_parse_period_field(row, "period"),
        holiday_score=_parse_float(row, "holiday_score"),
        holidays=[n.strip() for n in names.split(";") if n.strip()] if names else [],
    )


def _req(row: dict[str, str], key: str) -> str:
    """Return a required string field, stripped; raise if empty."""
    v = row.get(key, "").strip()
    if not v:
        raise ValueError(f"Required field '{key}' is empty.")
    return v


def _opt(row: dict[str, str], key: str) -> Optional[str]:
    """Return an optional string field, or None if absent/empty."""
    v = row.get(key, "").strip()
    return v if v else None


def _parse_date(row: dict[str, str], key: str, required: bool = False) -> Optional[date]:
    v = _opt(row, key)
    if v is None:
        if required:
            raise ValueError(f"Required date field '{key}' is empty.")
        return None
    try:
        return date.fromisoformat(v)
    except ValueError:
        raise ValueError(f"Invalid date for '{key}': '{v}'. Expected YYYY-MM-DD format.")


def _parse_float(row: dict[str, str], key: str, required: bool = False) -> Optional[float]:
    v = _opt(row, key)
    if v is None:
        if required:
            raise ValueError(f"Required numeric field '{key}' is empty.")
        return None
    try:
        return float(v.replace(",", ""))
    except ValueError:
        raise ValueError(f"Invalid number for '{key}': '{v}'.")


def _parse_period_field(row: dict[str, str], key: str) -> str:
    v = _req(row, key)
    year, month = parse_period(v)
    return f"{year:04d}-{month:02d}"
