"""
Route analysis: one traveller query in, one ``RouteAnalysis`` out.

Analysis flow
-------------
1. Build the analysis window: ``analysis_months_each_side`` months before
   the requested month through ``analysis_months_each_side - 1`` after it
   (12 months for the default 6), stretched to cover ``end_date`` when the
   query asks for a longer range.
2. Fetch fares for the window from the Price Store and keep the fares that
   answer the query (``pricing.fares_for_query``).  Round trips priced from
   one-way legs need return legs up to ``duration_max`` days past the
   window, so the fetch runs that far.  The same fares feed aggregation,
   the recommendation and the price band.
3. Aggregate monthly periods, then look up weather (via the destination's
   province) and holiday scores for each period.
4. Score and classify.  Fewer than ``min_periods`` periods is reported as
   ``insufficient_data=True`` with no seasons rather than raised.
5. Summarize seasons and build the recommendation.
6. When a predictor is supplied, build a price band from the observed daily
   fares leading up to the requested date, and derive a price trend from
   the last observed fare to the end of the forecast.

``NoPriceDataError`` from the recommendation step propagates to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from fare_forecaster.config import AppConfig
from fare_forecaster.forecasting.band import PriceBandForecaster, daily_average_prices
from fare_forecaster.forecasting.predictor import Predictor
from fare_forecaster.forecasting.trend import compute_price_trend
from fare_forecaster.models.forecast import PriceBand, PriceTrend
from fare_forecaster.models.price import PricePeriod, PriceRecord, Route
from fare_forecaster.models.recommendation import Recommendation, RecommendationQuery
from fare_forecaster.models.season import SeasonScore, SeasonSummary
from fare_forecaster.recommendations.engine import RecommendationEngine
from fare_forecaster.recommendations.pricing import fares_for_query
from fare_forecaster.seasonality.aggregator import aggregate_periods
from fare_forecaster.seasonality.classifier import (
    InsufficientDataError,
    TertilePolicy,
    classify_scores,
)
from fare_forecaster.seasonality.scorer import SeasonWeights, score_periods
from fare_forecaster.seasonality.summary import summarize_seasons
from fare_forecaster.stores import HolidayStore, PriceStore, WeatherStore
from fare_forecaster.utils.logging import route_logger
from fare_forecaster.utils.time_utils import analysis_window, period_bounds, period_key


@dataclass(frozen=True)
class RouteAnalysisRequest:
    """A route plus the traveller's query."""

    route: Route
    query: RecommendationQuery


@dataclass
class RouteAnalysis:
    """Everything derived for one route query."""

    route:             Route
    window_start:      date
    window_end:        date
    province:          Optional[str]
    periods:           list[PricePeriod] = field(default_factory=list)
    season_scores:     list[SeasonScore] = field(default_factory=list)
    summaries:         list[SeasonSummary] = field(default_factory=list)
    recommendation:    Optional[Recommendation] = None
    insufficient_data: bool = False
    price_band:        Optional[PriceBand] = None
    price_trend:       Optional[PriceTrend] = None


def query_window(query: RecommendationQuery, months_each_side: int) -> tuple[date, date]:
    """Analysis window for a query, widened to include ``end_date`` if later."""
    start, end = analysis_window(query.start_date, months_each_side)
    if query.end_date is not None:
        _, end_of_range = period_bounds(period_key(query.end_date))
        end = max(end, end_of_range)
    return start, end


def fetch_fares(
    price_store: PriceStore,
    route: Route,
    query: RecommendationQuery,
    window_start: date,
    window_end: date,
) -> list[PriceRecord]:
    """Fares departing inside the window that answer ``query``.

    Round-trip queries read every trip type up to ``duration_max`` days past
    the window so one-way legs can be paired; one-way queries read one-way
    fares only.
    """
    if query.trip_type == "round-trip":
        fetch_end = window_end + timedelta(days=query.duration_max)
        records = price_store.get_prices(route, window_start, fetch_end)
    else:
        records = price_store.get_prices(route, window_start, window_end, query.trip_type)

    fares = [
        r for r in fares_for_query(records, query) if r.departure_date <= window_end
    ]
    route_logger(__name__, route).info(
        "Analyzing %s..%s: %d fare(s) read, %d matching.",
        window_start, window_end, len(records), len(fares),
    )
    return fares


def classify_window(
    periods: list[PricePeriod],
    route: Route,
    weather_store: WeatherStore,
    holiday_store: HolidayStore,
    config: AppConfig,
) -> tuple[list[SeasonScore], bool]:
    """Score and classify periods; returns ``(scores, insufficient_data)``."""
    province = config.routes.province_for(route.destination)
    if province is None:
        route_logger(__name__, route).debug("No weather province; weather scores will be neutral.")
        weather = {}
    else:
        weather = {p.period: weather_store.get_weather_score(province, p.period) for p in periods}
    holidays = {p.period: holiday_store.get_holiday_score(p.period) for p in periods}

    scored = score_periods(
        periods, weather, holidays, SeasonWeights.from_config(config.season)
    )
    try:
        return classify_scores(scored, TertilePolicy.from_config(config.season)), False
    except InsufficientDataError as exc:
        route_logger(__name__, route).warning("Season classification skipped: %s", exc)
        return [], True


def build_price_band(
    records: list[PriceRecord],
    anchor: date,
    predictor: Predictor,
    config: AppConfig,
) -> tuple[PriceBand, Optional[PriceTrend]]:
    """Price band for the ``history_days`` leading up to ``anchor`` plus forecast."""
    history_start = anchor - timedelta(days=config.forecast.history_days - 1)
    actuals = daily_average_prices(
        r for r in records if history_start <= r.departure_date <= anchor
    )
    band = PriceBandForecaster(predictor).build(
        actuals, config.forecast.horizon_days, forecast_start=anchor
    )

    trend: Optional[PriceTrend] = None
    actual, forecast = band.actual_points, band.forecast_points
    if actual and forecast:
        trend = compute_price_trend(
            actual[-1].typical,
            forecast[-1].typical,
            threshold_pct=config.forecast.trend_threshold_pct,
        )
    return band, trend


def analyze_route(
    request: RouteAnalysisRequest,
    price_store: PriceStore,
    weather_store: WeatherStore,
    holiday_store: HolidayStore,
    config: Optional[AppConfig] = None,
    predictor: Optional[Predictor] = None,
) -> RouteAnalysis:
    """Run seasonality analysis and recommendation for one route query.

    Args:
        request:       Route and traveller query.
        price_store:   Source of observed fares.
        weather_store: Source of weather scores by province and period.
        holiday_store: Source of holiday scores by period.
        config:        Application config; defaults are used when omitted.
        predictor:     Optional predictor; enables the price band.

    Returns:
        Populated ``RouteAnalysis``.

    Raises:
        NoPriceDataError: If no fares in the window match the query.
    """
    config = config or AppConfig()
    route, query = request.route, request.query

    window_start, window_end = query_window(
        query, config.recommendation.analysis_months_each_side
    )
    matching = fetch_fares(price_store, route, query, window_start, window_end)

    periods = aggregate_periods(matching)
    scores, insufficient = classify_window(periods, route, weather_store, holiday_store, config)
    summaries = summarize_seasons(scores, matching) if scores else []

    recommendation = RecommendationEngine(config.recommendation).recommend(
        query, scores, matching, route=route
    )

    band: Optional[PriceBand] = None
    trend: Optional[PriceTrend] = None
    if predictor is not None:
        band, trend = build_price_band(matching, query.start_date, predictor, config)

    return RouteAnalysis(
        route=route,
        window_start=window_start,
        window_end=window_end,
        province=config.routes.province_for(route.destination),
        periods=periods,
        season_scores=scores,
        summaries=summaries,
        recommendation=recommendation,
        insufficient_data=insufficient,
        price_band=band,
        price_trend=trend,
    )
