"""
Runtime settings for the analytics core and its CLI.

Layers, lowest precedence first:
  1. ``config/default.toml``   committed defaults (built-in defaults if absent)
  2. ``config/local.toml``     per-machine overrides next to the chosen file
  3. ``.env``                  loaded into the environment, never overriding it
  4. ``COFFEE_ANALYTICS_*``    environment variables (see ``ENV_OVERRIDES``)

Call ``load_config()`` once per process and pass the ``AppConfig`` down.

Only operational knobs live here (forecast horizons, trend window, list
length, logging). Agronomic thresholds such as optimal temperature bands,
severity weights and seasonal targets are fixed policy constants in the
modules that apply them.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ── Sections ──────────────────────────────────────────────────────────────────


class ForecastConfig(BaseModel):
    """Forecast horizon and trend detection settings."""

    model_config = ConfigDict(frozen=True)

    horizon_days: int = 90
    comprehensive_horizon_days: int = 7
    trend_window: int = 3

    @field_validator("horizon_days", "comprehensive_horizon_days", "trend_window")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation list settings."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 5

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_n must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Log level, optional log file and line format."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'; expected one of {list(_LOG_LEVELS)}.")
        return level


class AppConfig(BaseModel):
    """Complete application configuration.

    ``AppConfig()`` gives the built-in defaults and is what library callers
    get when they pass no config.
    """

    model_config = ConfigDict(frozen=True)

    forecast: ForecastConfig = ForecastConfig()
    recommendations: RecommendationConfig = RecommendationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Environment overrides ─────────────────────────────────────────────────────


def _as_flag(text: str) -> bool:
    return text.strip().lower() in ("1", "true", "yes", "on")


# Variable → (section or None for top level, key, converter).
ENV_OVERRIDES: Mapping[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "COFFEE_ANALYTICS_LOG_LEVEL":    ("logging", "level", str),
    "COFFEE_ANALYTICS_HORIZON_DAYS": ("forecast", "horizon_days", int),
    "COFFEE_ANALYTICS_TOP_N":        ("recommendations", "top_n", int),
    "COFFEE_ANALYTICS_DEBUG":        (None, "debug", _as_flag),
}


# ── Loader ────────────────────────────────────────────────────────────────────


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Read, layer and validate the configuration.

    Args:
        config_path: TOML file to start from. When omitted,
            ``<project root>/config/default.toml`` is used if it exists.

    Returns:
        A frozen ``AppConfig``.

    Raises:
        FileNotFoundError: ``config_path`` was given and does not exist.
        pydantic.ValidationError: A layered value is out of range.
    """
    root = _project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = root / "config" / "default.toml"

    layers = [_read_toml(path), _read_toml(path.parent / "local.toml"), _env_layer()]
    merged: dict[str, Any] = {}
    for layer in layers:
        merged = _overlay(merged, layer)

    # [project] debug is accepted as an alias for the top-level flag.
    project = merged.pop("project", {})
    merged.setdefault("debug", project.get("debug", False))
    return AppConfig.model_validate(merged)


def _project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in here.parents:
        if (candidate / "pyproject.toml").exists():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def _env_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for name, (section, key, convert) in ENV_OVERRIDES.items():
        text = os.environ.get(name)
        if not text:
            continue
        target = layer if section is None else layer.setdefault(section, {})
        target[key] = convert(text)
    return layer


def _overlay(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``top`` laid over it; nested tables merge key by key."""
    merged = dict(base)
    for key, value in top.items():
        below = merged.get(key)
        merged[key] = (
            _overlay(below, value)
            if isinstance(below, Mapping) and isinstance(value, Mapping)
            else value
        )
    return merged
