"""
Fare Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load fares / weather / holidays from CSV into in-memory stores.
  4. Run the analysis.
  5. Report result to stdout.

Install and run::

    pip install -e .
    fare-forecaster --help
    fare-forecaster validate-config
    fare-forecaster seasons --destination CNX --date 2025-03-15
    fare-forecaster analyze --destination CNX --date 2025-03-15 --adults 2
    fare-forecaster price-band --destination HKT --date 2025-03-15 --predictor lightgbm
    fare-forecaster check-cache --destination CNX --start 2025-03-01 --end 2025-03-31
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="fare-forecaster",
    help="Flight fare seasonality, travel-period recommendations and price bands.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from fare_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from fare_forecaster.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _parse_date_or_exit(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"[ERROR] {option} must be YYYY-MM-DD, got '{value}'.", err=True)
        raise typer.Exit(code=1)


def _route_or_exit(origin: Optional[str], destination: str, config):
    from pydantic import ValidationError

    from fare_forecaster.models.price import Route

    try:
        return Route(origin=origin or config.routes.default_origin, destination=destination)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid route: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_stores_or_exit(
    config,
    prices_csv: Optional[str],
    weather_csv: Optional[str],
    holidays_csv: Optional[str],
):
    """Build in-memory stores from CSV files.

    The price file is required; missing weather / holiday files only mean
    neutral context scores.
    """
    import logging

    from fare_forecaster.ingestion.csv_loader import (
        parse_holiday_csv,
        parse_price_csv,
        parse_weather_csv,
    )
    from fare_forecaster.stores import (
        InMemoryHolidayStore,
        InMemoryPriceStore,
        InMemoryWeatherStore,
    )

    logger = logging.getLogger(__name__)

    try:
        price_store = InMemoryPriceStore.from_rows(
            parse_price_csv(Path(prices_csv or config.data.prices_csv))
        )
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    weather_path = Path(weather_csv or config.data.weather_csv)
    holidays_path = Path(holidays_csv or config.data.holidays_csv)
    try:
        weather = parse_weather_csv(weather_path) if weather_path.exists() else []
        holidays = parse_holiday_csv(holidays_path) if holidays_path.exists() else []
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not weather_path.exists():
        logger.warning("Weather CSV not found (%s); weather scores will be neutral.", weather_path)
    if not holidays_path.exists():
        logger.warning("Holiday CSV not found (%s); holiday scores will be neutral.", holidays_path)

    return price_store, InMemoryWeatherStore(weather), InMemoryHolidayStore(holidays)


def _build_predictor(kind: str, config, route, reference_date: date, save_model: bool):
    """Return a predictor for ``kind`` (``naive`` or ``lightgbm``)."""
    from fare_forecaster.forecasting.predictor import SeasonalNaivePredictor

    if kind == "naive":
        return SeasonalNaivePredictor(confidence_pct=config.forecast.confidence_pct)
    if kind != "lightgbm":
        typer.echo(f"[ERROR] Unknown predictor '{kind}'. Use 'naive' or 'lightgbm'.", err=True)
        raise typer.Exit(code=1)

    from fare_forecaster.ml.lgbm_model import LightGBMFarePredictor

    artifact = Path(config.data.model_dir) / f"lgbm_{route.origin}_{route.destination}.pkl"
    if artifact.exists() and not save_model:
        model = LightGBMFarePredictor.load(artifact)
        model.reference_date = reference_date
        return model
    return LightGBMFarePredictor(reference_date=reference_date)


def _query_or_exit(**fields):
    from pydantic import ValidationError

    from fare_forecaster.models.recommendation import RecommendationQuery

    try:
        return RecommendationQuery(**fields)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid query: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    show_full: bool = typer.Option(
        False,
        "--show-full",
        help="Print full config as JSON.",
    ),
) -> None:
    """Load and validate the config; print key settings."""
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    s = config.season
    typer.echo(
        f"  Season weights:   price={s.price_weight} holiday={s.holiday_weight} "
        f"weather={s.weather_weight}"
    )
    typer.echo(f"  Tertile split:    {s.low_position} / {s.high_position}")
    typer.echo(f"  Cache max age:    {config.cache.max_age_days}d")
    typer.echo(f"  Compare window:   {config.recommendation.comparison_window_days}d")
    typer.echo(f"  Default origin:   {config.routes.default_origin}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))


@app.command("seasons")
def seasons(
    destination: str = typer.Option(..., "--destination", help="Destination airport code."),
    travel_date: str = typer.Option(..., "--date", help="Anchor date YYYY-MM-DD."),
    origin: Optional[str] = typer.Option(None, "--origin", help="Origin code (default from config)."),
    trip_type: str = typer.Option("round-trip", "--trip-type", help="one-way or round-trip."),
    prices_csv: Optional[str] = typer.Option(None, "--prices", help="Fares CSV path."),
    weather_csv: Optional[str] = typer.Option(None, "--weather", help="Weather CSV path."),
    holidays_csv: Optional[str] = typer.Option(None, "--holidays", help="Holidays CSV path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Classify the months around a date into low / normal / high seasons."""
    from fare_forecaster.pipeline.analyze import classify_window, fetch_fares, query_window
    from fare_forecaster.reporting.formatters import (
        format_season_summaries,
        format_season_table,
    )
    from fare_forecaster.seasonality.aggregator import aggregate_periods
    from fare_forecaster.seasonality.summary import summarize_seasons

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    route = _route_or_exit(origin, destination, config)
    query = _query_or_exit(
        start_date=_parse_date_or_exit(travel_date, "--date"),
        trip_type=trip_type,
        duration_min=config.recommendation.default_duration_min,
        duration_max=config.recommendation.default_duration_max,
    )
    price_store, weather_store, holiday_store = _load_stores_or_exit(
        config, prices_csv, weather_csv, holidays_csv
    )

    start, end = query_window(query, config.recommendation.analysis_months_each_side)
    records = fetch_fares(price_store, route, query, start, end)
    periods = aggregate_periods(records)
    scores, insufficient = classify_window(periods, route, weather_store, holiday_store, config)

    typer.echo(format_season_table(scores, str(route)))
    if insufficient:
        typer.echo(
            f"[WARN] Only {len(periods)} period(s) with fares between {start} and {end}; "
            f"need {config.season.min_periods}."
        )
        return
    typer.echo(format_season_summaries(summarize_seasons(scores, records)))


@app.command("analyze")
def analyze(
    destination: str = typer.Option(..., "--destination", help="Destination airport code."),
    travel_date: str = typer.Option(..., "--date", help="Requested departure YYYY-MM-DD."),
    end_date: Optional[str] = typer.Option(None, "--end-date", help="End of requested range."),
    origin: Optional[str] = typer.Option(None, "--origin", help="Origin code (default from config)."),
    trip_type: str = typer.Option("round-trip", "--trip-type", help="one-way or round-trip."),
    travel_class: str = typer.Option("economy", "--class", help="economy, business or first."),
    airlines: Optional[list[str]] = typer.Option(None, "--airline", help="Airline allow-list (repeatable)."),
    adults: int = typer.Option(1, "--adults"),
    children: int = typer.Option(0, "--children"),
    infants: int = typer.Option(0, "--infants"),
    min_days: Optional[int] = typer.Option(None, "--min-days", help="Shortest round-trip stay."),
    max_days: Optional[int] = typer.Option(None, "--max-days", help="Longest round-trip stay."),
    predictor_kind: Optional[str] = typer.Option(
        None, "--predictor", help="Add a price band: 'naive' or 'lightgbm'."
    ),
    prices_csv: Optional[str] = typer.Option(None, "--prices", help="Fares CSV path."),
    weather_csv: Optional[str] = typer.Option(None, "--weather", help="Weather CSV path."),
    holidays_csv: Optional[str] = typer.Option(None, "--holidays", help="Holidays CSV path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend the cheapest travel period for a route and date."""
    from fare_forecaster.models.recommendation import Passengers
    from fare_forecaster.pipeline.analyze import RouteAnalysisRequest, analyze_route
    from fare_forecaster.recommendations.engine import NoPriceDataError
    from fare_forecaster.reporting.formatters import (
        format_price_band,
        format_recommendation,
        format_season_summaries,
        format_season_table,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    route = _route_or_exit(origin, destination, config)
    rec_cfg = config.recommendation
    query = _query_or_exit(
        start_date=_parse_date_or_exit(travel_date, "--date"),
        end_date=_parse_date_or_exit(end_date, "--end-date") if end_date else None,
        trip_type=trip_type,
        travel_class=travel_class,
        airlines=tuple(airlines or ()),
        duration_min=min_days if min_days is not None else rec_cfg.default_duration_min,
        duration_max=max_days if max_days is not None else rec_cfg.default_duration_max,
        passengers=Passengers(adults=adults, children=children, infants=infants),
    )
    stores = _load_stores_or_exit(config, prices_csv, weather_csv, holidays_csv)
    predictor = (
        _build_predictor(predictor_kind, config, route, query.start_date, save_model=False)
        if predictor_kind else None
    )

    try:
        result = analyze_route(
            RouteAnalysisRequest(route=route, query=query),
            *stores,
            config=config,
            predictor=predictor,
        )
    except NoPriceDataError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_season_table(result.season_scores, str(route)))
    if result.insufficient_data:
        typer.echo("[WARN] Not enough months with fares to classify seasons.")
    else:
        typer.echo(format_season_summaries(result.summaries))
    typer.echo(format_recommendation(result.recommendation))
    if result.price_band is not None:
        typer.echo(format_price_band(result.price_band, result.price_trend))
    typer.echo("")
    typer.echo("[OK] Analysis complete.")


@app.command("price-band")
def price_band(
    destination: str = typer.Option(..., "--destination", help="Destination airport code."),
    travel_date: str = typer.Option(..., "--date", help="Last day of observed history YYYY-MM-DD."),
    origin: Optional[str] = typer.Option(None, "--origin", help="Origin code (default from config)."),
    trip_type: str = typer.Option("one-way", "--trip-type", help="one-way or round-trip."),
    predictor_kind: str = typer.Option("naive", "--predictor", help="'naive' or 'lightgbm'."),
    horizon: Optional[int] = typer.Option(None, "--horizon", help="Forecast days (default from config)."),
    save_model: bool = typer.Option(
        False, "--save-model", help="Train LightGBM on the history and save the artifact."
    ),
    prices_csv: Optional[str] = typer.Option(None, "--prices", help="Fares CSV path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show observed fares plus a low / typical / high forecast band."""
    from datetime import timedelta

    from fare_forecaster.forecasting.band import PriceBandForecaster, daily_average_prices
    from fare_forecaster.forecasting.trend import compute_price_trend
    from fare_forecaster.ingestion.csv_loader import parse_price_csv
    from fare_forecaster.reporting.formatters import format_price_band
    from fare_forecaster.stores import InMemoryPriceStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    route = _route_or_exit(origin, destination, config)
    anchor = _parse_date_or_exit(travel_date, "--date")
    horizon_days = horizon if horizon is not None else config.forecast.horizon_days
    if horizon_days < 0:
        typer.echo(f"[ERROR] --horizon must be >= 0, got {horizon_days}.", err=True)
        raise typer.Exit(code=1)
    if save_model and predictor_kind != "lightgbm":
        typer.echo("[ERROR] --save-model requires --predictor lightgbm.", err=True)
        raise typer.Exit(code=1)

    try:
        store = InMemoryPriceStore.from_rows(
            parse_price_csv(Path(prices_csv or config.data.prices_csv))
        )
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    history_start = anchor - timedelta(days=config.forecast.history_days - 1)
    actuals = daily_average_prices(store.get_prices(route, history_start, anchor, trip_type))
    predictor = _build_predictor(predictor_kind, config, route, anchor, save_model)

    if save_model:
        artifact = Path(config.data.model_dir) / f"lgbm_{route.origin}_{route.destination}.pkl"
        try:
            metrics = predictor.fit(actuals)
        except ValueError as exc:
            typer.echo(f"[ERROR] Cannot train model: {exc}", err=True)
            raise typer.Exit(code=1)
        predictor.save(artifact)
        predictor.write_metadata(artifact.with_suffix(".json"), str(route))
        typer.echo(f"  Model saved: {artifact} (mae={metrics.get('mae', 0.0):.2f})")

    band = PriceBandForecaster(predictor).build(actuals, horizon_days, forecast_start=anchor)
    trend = None
    if band.actual_points and band.forecast_points:
        trend = compute_price_trend(
            band.actual_points[-1].typical,
            band.forecast_points[-1].typical,
            threshold_pct=config.forecast.trend_threshold_pct,
        )
    typer.echo(format_price_band(band, trend))


@app.command("check-cache")
def check_cache(
    destination: str = typer.Option(..., "--destination", help="Destination airport code."),
    start: str = typer.Option(..., "--start", help="First departure date YYYY-MM-DD."),
    end: str = typer.Option(..., "--end", help="Last departure date YYYY-MM-DD."),
    origin: Optional[str] = typer.Option(None, "--origin", help="Origin code (default from config)."),
    prices_csv: Optional[str] = typer.Option(None, "--prices", help="Fares CSV path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Report fare-file freshness and departure dates with no cached fares.

    Exits 1 when the file is stale or any date is missing.
    """
    from fare_forecaster.governance.freshness import check_cache_entry, find_missing_dates
    from fare_forecaster.ingestion.csv_loader import parse_price_csv
    from fare_forecaster.models.cache import CacheEntry
    from fare_forecaster.reporting.formatters import format_cache_verdict
    from fare_forecaster.stores import InMemoryPriceStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    route = _route_or_exit(origin, destination, config)
    start_date = _parse_date_or_exit(start, "--start")
    end_date = _parse_date_or_exit(end, "--end")
    path = Path(prices_csv or config.data.prices_csv)

    try:
        store = InMemoryPriceStore.from_rows(parse_price_csv(path))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    updated_at = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    verdict = check_cache_entry(
        CacheEntry(
            key=f"prices:{route.origin}-{route.destination}",
            updated_at=updated_at,
            max_age_days=config.cache.max_age_days,
        )
    )
    typer.echo(format_cache_verdict(verdict))

    cached = [r.departure_date for r in store.get_prices(route, start_date, end_date)]
    missing = find_missing_dates(cached, start_date, end_date)
    if missing:
        typer.echo(f"  Missing dates ({len(missing)}):")
        for d in missing:
            typer.echo(f"    {d.isoformat()}")
    else:
        typer.echo("  No missing dates.")

    if not verdict.is_fresh or missing:
        raise typer.Exit(code=1)
    typer.echo("[OK] Cache is fresh and complete.")


if __name__ == "__main__":
    app()
