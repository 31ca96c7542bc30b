"""
Coffee farm analytics — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load and validate JSON inputs.
  4. Run the analysis.
  5. Print the ASCII report, or the model dump with ``--json``.

Install and run::

    pip install -e .
    coffee-analytics --help
    coffee-analytics validate-config
    coffee-analytics analyze --harvests harvests.json --conditions now.json
    coffee-analytics seasonal-report --harvests harvests.json --as-of 2025-07-01
    coffee-analytics quality --harvests harvests.json --status plot.json
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="coffee-analytics",
    help="Coffee farm analytics — growth, yield, risk and quality reports.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Return the resolved AppConfig or exit 1 with an [ERROR] line."""
    from coffee_analytics.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        # pydantic, TOML decode and int() conversion errors are all ValueErrors
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Apply the [logging] section before any command output."""
    from coffee_analytics.utils.logging import configure_logging
    configure_logging(config.logging)


def _records_or_exit(path: str, label: str) -> list[Any]:
    from coffee_analytics.reporting.reader import load_records

    records = load_records(Path(path))
    if records is None:
        typer.echo(f"[ERROR] {label} file must be a readable JSON array: {path}", err=True)
        raise typer.Exit(code=1)
    return records


def _record_or_exit(path: str, label: str) -> dict[str, Any]:
    from coffee_analytics.reporting.reader import load_record

    record = load_record(Path(path))
    if record is None:
        typer.echo(f"[ERROR] {label} file must be a readable JSON object: {path}", err=True)
        raise typer.Exit(code=1)
    return record


def _date_or_exit(value: Optional[str], option: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid {option} date: {exc}", err=True)
        raise typer.Exit(code=1)


def _orchestrator_or_exit(config, harvests_file: str, weather_file: Optional[str] = None):
    """Build and initialise an orchestrator from the given input files."""
    from coffee_analytics.analytics.orchestrator import AnalyticsOrchestrator
    from coffee_analytics.errors import ValidationError

    harvests = _records_or_exit(harvests_file, "Harvest")
    weather = _records_or_exit(weather_file, "Weather") if weather_file else []

    orchestrator = AnalyticsOrchestrator(config)
    try:
        orchestrator.initialize(harvests, weather)
    except ValidationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    return orchestrator


def _echo_json(model) -> None:
    typer.echo(json.dumps(model.model_dump(mode="json"), indent=2))


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="TOML file to validate instead of config/default.toml.",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Also dump every resolved setting as JSON.",
    ),
) -> None:
    """Resolve all config layers and print the effective settings.

    Exits 1 when a file is missing or a value is out of range.
    """
    config = _load_config_or_exit(config_path)

    rows = [
        ("Forecast horizon", f"{config.forecast.horizon_days}d"),
        ("Comprehensive horizon", f"{config.forecast.comprehensive_horizon_days}d"),
        ("Trend window", str(config.forecast.trend_window)),
        ("Recommendations", f"top {config.recommendations.top_n}"),
        ("Log level", config.logging.level),
        ("Debug mode", str(config.debug)),
    ]
    typer.echo("Effective configuration:")
    for label, value in rows:
        typer.echo(f"  {label + ':':<23}{value}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("analyze")
def analyze(
    harvests_file: str = typer.Option(
        ...,
        "--harvests",
        help="JSON array of harvest records (coffee_raw_quantity, grades, harvest_date).",
    ),
    conditions_file: str = typer.Option(
        ...,
        "--conditions",
        help="JSON object with current conditions (temperature, humidity, pH, ...).",
    ),
    weather_file: Optional[str] = typer.Option(
        None,
        "--weather",
        help="Optional JSON array of weather records joined to harvests by date.",
    ),
    start_date: Optional[str] = typer.Option(
        None,
        "--start-date",
        help="First day of the growth forecast (ISO date). Defaults to today (UTC).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="TOML config file (default: config/default.toml).",
    ),
) -> None:
    """Run the comprehensive analysis for one set of current conditions.

    Combines risk score, growth trend, yield prediction, a short growth
    forecast, per-factor status and the prioritised recommendations.
    A degraded report is still printed; the exit code is 0 either way.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    start = _date_or_exit(start_date, "--start-date")
    conditions = _record_or_exit(conditions_file, "Conditions")
    orchestrator = _orchestrator_or_exit(config, harvests_file, weather_file)

    report = orchestrator.comprehensive_analysis(conditions, start=start)

    if as_json:
        _echo_json(report)
        return

    from coffee_analytics.reporting.formatters import format_comprehensive_report
    typer.echo(format_comprehensive_report(report))


@app.command("seasonal-report")
def seasonal_report(
    harvests_file: str = typer.Option(
        ...,
        "--harvests",
        help="JSON array of harvest records.",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Reference date for the current season (ISO date). Defaults to today (UTC).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="TOML config file (default: config/default.toml).",
    ),
) -> None:
    """Per-season yield outlook, growth forecast and seasonal care advice."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    reference = _date_or_exit(as_of, "--as-of")
    orchestrator = _orchestrator_or_exit(config, harvests_file)

    report = orchestrator.seasonal_analysis(reference)

    if as_json:
        _echo_json(report)
        return

    from coffee_analytics.reporting.formatters import format_seasonal_report
    typer.echo(format_seasonal_report(report))


@app.command("quality")
def quality(
    harvests_file: str = typer.Option(
        ...,
        "--harvests",
        help="JSON array of harvest records with grade quantities.",
    ),
    status_file: str = typer.Option(
        ...,
        "--status",
        help="JSON object with plot status (pH or soil_ph, moisture_level, last_fertilized).",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Reference date for fertiliser recency (ISO date). Defaults to today (UTC).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the outlook as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="TOML config file (default: config/default.toml).",
    ),
) -> None:
    """Projected quality-grade distribution and seasonal yield map."""
    from coffee_analytics.errors import ValidationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    reference = _date_or_exit(as_of, "--as-of")
    status = _record_or_exit(status_file, "Status")
    orchestrator = _orchestrator_or_exit(config, harvests_file)

    try:
        outlook = orchestrator.quality_outlook(status, today=reference)
    except ValidationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(outlook)
        return

    from coffee_analytics.reporting.formatters import format_quality_outlook
    typer.echo(format_quality_outlook(outlook))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
