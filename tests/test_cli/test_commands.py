"""
Tests for fare_forecaster/cli.py, driven through typer's CliRunner.

What we test
------------
validate-config : prints key settings; missing config file exits 1.
seasons         : prints the season table for a CSV-backed route.
analyze         : prints seasons + recommendation and [OK]; no fares exits 1.
price-band      : prints actual (A) and forecast (F) rows.
check-cache     : lists missing departure dates and exits 1.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

import pytest
from typer.testing import CliRunner

from fare_forecaster.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_root_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def workspace(tmp_path):
    """Config with no log file plus fares / weather / holiday CSVs."""
    lines = ["origin,destination,departure_date,price,airline"]
    for month in range(1, 13):
        for day in (5, 15, 25):
            price = 1500 + abs(month - 6) * 200 + day
            lines.append(f"BKK,CNX,2025-{month:02d}-{day:02d},{price},AirAsia")
    start = date(2025, 6, 1)
    for i in range(10):
        d = start + timedelta(days=i)
        if d.day not in (5,):
            lines.append(f"BKK,HKT,{d.isoformat()},{2000 + i * 10},Thai Smile")
    prices = tmp_path / "prices.csv"
    prices.write_text("\n".join(lines) + "\n", encoding="utf-8")

    weather = tmp_path / "weather.csv"
    weather.write_text("province,period,weather_score\nchiang-mai,2025-06,40\n", encoding="utf-8")
    holidays = tmp_path / "holidays.csv"
    holidays.write_text("period,holiday_score,holidays\n2025-04,90,Songkran\n", encoding="utf-8")

    config = tmp_path / "app.toml"
    config.write_text(
        "[logging]\n"
        'level = "WARNING"\n'
        'log_file = ""\n'
        "[data]\n"
        f'prices_csv = "{prices.as_posix()}"\n'
        f'weather_csv = "{weather.as_posix()}"\n'
        f'holidays_csv = "{holidays.as_posix()}"\n'
        f'model_dir = "{(tmp_path / "models").as_posix()}"\n',
        encoding="utf-8",
    )
    return config


def test_validate_config(workspace):
    result = runner.invoke(app, ["validate-config", "--config", str(workspace)])
    assert result.exit_code == 0
    assert "Configuration validated successfully." in result.output
    assert "Cache max age:    7d" in result.output


def test_validate_config_missing(tmp_path):
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "absent.toml")])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_seasons(workspace):
    result = runner.invoke(
        app,
        ["seasons", "--config", str(workspace), "--destination", "CNX",
         "--date", "2025-06-15", "--trip-type", "one-way"],
    )
    assert result.exit_code == 0, result.output
    assert "=== Seasons for BKK->CNX ===" in result.output
    assert "[LOW]" in result.output


def test_analyze(workspace):
    result = runner.invoke(
        app,
        ["analyze", "--config", str(workspace), "--destination", "CNX",
         "--date", "2025-03-15", "--trip-type", "one-way", "--adults", "2"],
    )
    assert result.exit_code == 0, result.output
    assert "=== Recommendation ===" in result.output
    assert "[OK] Analysis complete." in result.output


def test_analyze_no_fares(workspace):
    result = runner.invoke(
        app,
        ["analyze", "--config", str(workspace), "--destination", "KBV",
         "--date", "2025-03-15", "--trip-type", "one-way"],
    )
    assert result.exit_code == 1
    assert "No one-way price data" in result.output


def test_price_band(workspace):
    result = runner.invoke(
        app,
        ["price-band", "--config", str(workspace), "--destination", "HKT",
         "--date", "2025-06-10", "--horizon", "5"],
    )
    assert result.exit_code == 0, result.output
    assert "=== Price Band ===" in result.output
    assert "2025-06-11  F" in result.output


def test_check_cache_reports_missing_dates(workspace):
    result = runner.invoke(
        app,
        ["check-cache", "--config", str(workspace), "--destination", "HKT",
         "--start", "2025-06-01", "--end", "2025-06-12"],
    )
    assert result.exit_code == 1
    assert "[FRESH]" in result.output
    assert "2025-06-05" in result.output
    assert "2025-06-11" in result.output
