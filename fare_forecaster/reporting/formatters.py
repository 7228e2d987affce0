"""
ASCII terminal formatters for CLI commands.

All formatters accept result models / dataclasses and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Freshness banners
-----------------
Cache checks print one banner line per entry::

  [FRESH] prices:BKK-CNX  updated 2d ago (max 7d)
  [STALE] prices:BKK-HKT  updated 9d ago (max 7d)
  [AGE UNKNOWN] prices:BKK-KBV  never updated
"""

from __future__ import annotations

from typing import Optional

from fare_forecaster.governance.freshness import CacheVerdict
from fare_forecaster.models.forecast import PriceBand, PriceTrend
from fare_forecaster.models.recommendation import PriceComparison, Recommendation
from fare_forecaster.models.season import SeasonScore, SeasonSummary


def _money(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:,.2f}"


# ── Freshness banner ─────────────────────────────────────────────────────────


def format_cache_verdict(verdict: CacheVerdict) -> str:
    """Return a one-line freshness indicator for a cache entry."""
    if verdict.age_days is None:
        return f"  [AGE UNKNOWN] {verdict.key}  never updated"
    tag = "[FRESH]" if verdict.is_fresh else "[STALE]"
    return (
        f"  {tag} {verdict.key}  updated {verdict.age_days}d ago "
        f"(max {verdict.max_age_days}d)"
    )


# ── Seasons ───────────────────────────────────────────────────────────────────


def format_season_table(scores: list[SeasonScore], route_label: str) -> str:
    """Format classified periods as an ASCII table, one row per period.

    Example::

          Period    Avg price  Pctl  Holiday  Weather  Score  Season
          ------------------------------------------------------------
          2025-01    2,310.00  33.3     50.0     50.0   40.0     low
    """
    lines: list[str] = ["", f"=== Seasons for {route_label} ==="]
    if not scores:
        lines.append("  (not enough periods to classify seasons)")
        return "\n".join(lines)

    header = (
        f"    {'Period':<8}  {'Avg price':>10}  {'Pctl':>5}  {'Holiday':>7}  "
        f"{'Weather':>7}  {'Score':>5}  {'Season':>6}"
    )
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for s in scores:
        lines.append(
            f"    {s.period:<8}  {_money(s.avg_price):>10}  {s.percentile:>5.1f}  "
            f"{s.holiday_score:>7.1f}  {s.weather_score:>7.1f}  "
            f"{s.composite_score:>5.1f}  {s.season:>6}"
        )
    return "\n".join(lines)


def format_season_summaries(summaries: list[SeasonSummary]) -> str:
    """One block per season: member periods, price range and best deal."""
    lines: list[str] = []
    for summary in summaries:
        lines.append("")
        lines.append(f"  [{summary.season.upper()}]")
        lines.append(f"    Periods:   {', '.join(summary.periods) or '-'}")
        if summary.best_deal is None:
            lines.append("    (no fares)")
            continue
        lines.append(
            f"    Range:     {_money(summary.price_min)} - {_money(summary.price_max)}"
        )
        deal = summary.best_deal
        lines.append(
            f"    Best deal: {deal.departure_date}  {_money(deal.price)}"
            + (f"  ({deal.airline})" if deal.airline else "")
        )
    return "\n".join(lines)


# ── Recommendation ────────────────────────────────────────────────────────────


def _format_comparison(label: str, comparison: Optional[PriceComparison]) -> str:
    if comparison is None:
        return f"    {label:<10} n/a"
    return (
        f"    {label:<10} {comparison.departure_date}  {_money(comparison.price)}  "
        f"({comparison.difference:+,.2f}, {comparison.percentage:+.1f}%)"
    )


def format_recommendation(rec: Recommendation) -> str:
    """Format a ``Recommendation`` as a short labelled block."""
    lines: list[str] = ["", "=== Recommendation ==="]
    lines.append(f"  Requested season: {rec.season}")
    lines.append(
        f"  Base price:       {_money(rec.base_price)}"
        + (f"  ({rec.base_airline})" if rec.base_airline else "")
    )
    trip = f"{rec.start_date}"
    if rec.return_date is not None:
        trip += f" -> {rec.return_date} ({rec.duration_days}d)"
    lines.append(f"  Recommended:      {trip}  {_money(rec.price)}"
                 + (f"  ({rec.airline})" if rec.airline else ""))
    lines.append(f"  Period:           {rec.period}")
    lines.append(f"  Savings:          {_money(rec.savings)}")
    lines.append("  Nearby dates:")
    lines.append(_format_comparison("Earlier", rec.if_go_before))
    lines.append(_format_comparison("Later", rec.if_go_after))
    return "\n".join(lines)


# ── Price band ────────────────────────────────────────────────────────────────


def format_price_band(band: PriceBand, trend: Optional[PriceTrend] = None) -> str:
    """Format a ``PriceBand`` as a table; actual rows are tagged ``A``, forecasts ``F``."""
    lines: list[str] = ["", "=== Price Band ==="]
    lines.append(f"  Last actual: {band.last_actual_date or 'none'}")
    if not band.forecast_available:
        lines.append("  [DEGRADED] predictor unavailable; showing observed prices only")
    if not band.points:
        lines.append("  (no prices)")
        return "\n".join(lines)

    header = f"    {'Date':<10}  {'':1}  {'Low':>10}  {'Typical':>10}  {'High':>10}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for p in band.points:
        tag = "A" if p.is_actual else "F"
        lines.append(
            f"    {p.target_date.isoformat():<10}  {tag}  {_money(p.low):>10}  "
            f"{_money(p.typical):>10}  {_money(p.high):>10}"
        )
    if trend is not None:
        lines.append("")
        lines.append(f"  Trend: {trend.trend} ({trend.change_percent:+.2f}%)")
    return "\n".join(lines)
