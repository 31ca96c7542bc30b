"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept analysis models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Degraded banners
----------------
Every report that can be a fallback starts with a status banner so readers
can tell at a glance whether the numbers are real::

  [OK] Analysis complete
  [DEGRADED] Analysis error: ...   <- neutral placeholders; do not act on these

Missing values
--------------
``None`` predictions (no harvest history) are printed as ``N/A``, never as
zero.
"""

from __future__ import annotations

from typing import Optional, Sequence

from coffee_analytics.models.analysis import (
    ComprehensiveReport,
    ForecastEntry,
    QualityOutlook,
    Recommendation,
    SeasonalAnalysisReport,
)
from coffee_analytics.taxonomy.agronomy import Season
from coffee_analytics.timeseries.seasons import SEASON_DISPLAY_NAMES


def _num(value: Optional[float], fmt: str = ".1f", suffix: str = "") -> str:
    return "N/A" if value is None else f"{value:{fmt}}{suffix}"


# ── Status banner ─────────────────────────────────────────────────────────────


def format_status_banner(degraded: bool, error: Optional[str] = None) -> str:
    """Return a one-line health indicator for a report."""
    if degraded:
        return f"  [DEGRADED] {error or 'unknown error'} -- values below are placeholders"
    return "  [OK] Analysis complete"


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations(recommendations: Sequence[Recommendation]) -> str:
    """Format a prioritised recommendation list as an ASCII table.

    Rows appear in the order given (already ranked by the caller)::

          #  Severity  Type          Message
        ----------------------------------------------------------------
          1  high      temperature   Temperature is too high. ...
    """
    lines: list[str] = []
    if not recommendations:
        lines.append("  (no recommendations)")
        return "\n".join(lines)

    header = f"  {'#':>3}  {'Severity':<8}  {'Type':<12}  Message"
    lines.append(header)
    lines.append("  " + "-" * 64)
    for i, rec in enumerate(recommendations, start=1):
        lines.append(f"  {i:>3}  {rec.severity.value:<8}  {rec.type.value:<12}  {rec.message}")
    return "\n".join(lines)


# ── Growth forecast ───────────────────────────────────────────────────────────


def format_growth_forecast(entries: Sequence[ForecastEntry], max_rows: int = 14) -> str:
    """Format the first ``max_rows`` forecast days as a table."""
    lines: list[str] = []
    if not entries:
        lines.append("  (no forecast available)")
        return "\n".join(lines)

    header = (
        f"  {'Day':>4}  {'Date':<10}  {'Season':<12}  {'Predicted':>10}  "
        f"{'Optimal range':>15}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for entry in entries[:max_rows]:
        band = f"{entry.optimal_range.min:g}-{entry.optimal_range.max:g}"
        lines.append(
            f"  {entry.day:>4}  {entry.date.isoformat():<10}  {entry.season.value:<12}  "
            f"{_num(entry.predicted_value, '.2f'):>10}  {band:>15}"
        )
    if len(entries) > max_rows:
        lines.append(f"  ... showing {max_rows} of {len(entries)} days (use --json for the full set)")
    return "\n".join(lines)


# ── Comprehensive report ──────────────────────────────────────────────────────


def format_comprehensive_report(report: ComprehensiveReport) -> str:
    """Format the headline numbers, factor status, forecast and advice."""
    current = report.current_analysis
    lines: list[str] = []
    lines.append("")
    lines.append("=== Comprehensive Farm Analysis ===")
    lines.append(format_status_banner(report.degraded, report.error))
    lines.append("")
    lines.append(f"  Risk score:       {current.risk_score}/100")
    lines.append(f"  Growth trend:     {current.growth_trend.value}")
    lines.append(f"  Yield prediction: {_num(current.yield_prediction, '.2f')}")
    lines.append(f"  Confidence:       {report.forecast.confidence}%")

    lines.append("")
    lines.append("  [ENVIRONMENT]")
    header = f"    {'Factor':<12}  {'Value':>8}  {'Status':<8}  {'Optimal':>14}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for name, status in report.environmental_status.items():
        value = f"{status.value:g}{status.unit}"
        band = f"{status.optimal.min:g}-{status.optimal.max:g}{status.unit}"
        lines.append(f"    {name:<12}  {value:>8}  {status.status.value:<8}  {band:>14}")

    lines.append("")
    lines.append("  [GROWTH FORECAST]")
    lines.append(format_growth_forecast(report.forecast.growth))

    lines.append("")
    lines.append("  [RECOMMENDATIONS]")
    lines.append(format_recommendations(report.recommendations))
    return "\n".join(lines)


# ── Seasonal report ───────────────────────────────────────────────────────────


def format_seasonal_report(report: SeasonalAnalysisReport) -> str:
    """Format the per-season yield outlook and seasonal advice.

    The current season is marked with ``*``::

          Season              Predicted   Target   Conf.  Status
          ---------------------------------------------------------
        * Wet Season             812.40    750.0    100%  optimal
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Seasonal Analysis ===")
    lines.append(format_status_banner(report.degraded, report.error))
    lines.append(f"  Current season: {SEASON_DISPLAY_NAMES[report.current_season]}")

    lines.append("")
    lines.append("  [YIELD OUTLOOK]")
    if not report.yield_forecast:
        lines.append("  (no yield forecast available)")
    else:
        header = (
            f"    {'Season':<20}  {'Predicted':>9}  {'Target':>7}  "
            f"{'Conf.':>6}  {'Variance':>17}  Status"
        )
        lines.append(header)
        lines.append("    " + "-" * (len(header) - 4))
        for season in Season:
            forecast = report.yield_forecast.get(season)
            if forecast is None:
                continue
            marker = "*" if season is report.current_season else " "
            variance = f"{forecast.variance.min:.1f}-{forecast.variance.max:.1f}"
            lines.append(
                f"  {marker} {SEASON_DISPLAY_NAMES[season]:<20}  {forecast.predicted_yield:>9.2f}  "
                f"{forecast.target:>7.1f}  {forecast.confidence:>5.0f}%  {variance:>17}  "
                f"{forecast.status.value}"
            )

    lines.append("")
    lines.append("  [GROWTH FORECAST]")
    lines.append(format_growth_forecast(report.growth_forecast))

    lines.append("")
    lines.append("  [RECOMMENDATIONS]")
    lines.append(format_recommendations(report.recommendations))
    return "\n".join(lines)


# ── Quality outlook ───────────────────────────────────────────────────────────


def format_quality_outlook(outlook: QualityOutlook) -> str:
    """Format the projected grade split, condition factors and seasonal yields."""
    dist = outlook.distribution
    factors = outlook.factors
    lines: list[str] = []
    lines.append("")
    lines.append("=== Quality Outlook ===")

    lines.append("")
    lines.append("  [GRADE DISTRIBUTION]")
    lines.append(f"    Premium:    {dist.premium:>6.1f}%")
    lines.append(f"    Fine:       {dist.fine:>6.1f}%")
    lines.append(f"    Commercial: {dist.commercial:>6.1f}%")

    lines.append("")
    lines.append("  [CONDITION FACTORS]")
    lines.append(f"    pH:         {factors.ph:.2f}")
    lines.append(f"    Moisture:   {factors.moisture:.2f}")
    lines.append(f"    Fertilizer: {factors.fertilizer:.2f}")
    lines.append(f"    Combined:   {factors.multiplier:.2f}")

    lines.append("")
    lines.append("  [SEASONAL YIELD]")
    for season in Season:
        value = outlook.seasonal_yields.get(season)
        lines.append(f"    {SEASON_DISPLAY_NAMES[season]:<20}  {_num(value, '.2f'):>10}")
    return "\n".join(lines)
