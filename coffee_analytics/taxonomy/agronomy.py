"""
Agronomic taxonomy for the coffee farm analytics core.

Every categorical value that flows through the core is one of these closed
enums:

  - ``Season``             — the seasonal regime a calendar date belongs to.
  - ``Trend``              — qualitative direction of the growth series.
  - ``Severity``           — urgency of a recommendation.
  - ``RecommendationType`` — what a recommendation is about.
  - ``MoistureLevel``      — soil moisture reading from a status record.
  - ``YieldStatus``        — projected yield vs. the seasonal target.
  - ``FactorStatus``       — one environmental reading vs. its optimal band.
  - ``EnvironmentalFactor`` — which reading a factor status describes.

Lookup tables keyed by these enums are built with ``complete_table()``, which
fails at import time if any member is missing, so a lookup can never fall
through to a silent default.

The only ``coffee_analytics`` import is ``errors`` (for ``Season.parse``).
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Mapping, TypeVar

from coffee_analytics.errors import ValidationError

_E = TypeVar("_E", bound=StrEnum)
_V = TypeVar("_V")


class Season(StrEnum):
    """Seasonal regime of the tropical coffee calendar."""

    WET = "wet"
    """Main growing season with optimal rainfall."""

    DRY = "dry"
    """Water-stressed months; reduced yield."""

    TRANSITIONAL = "transitional"
    """Shoulder months between the wet and dry regimes."""

    @classmethod
    def parse(cls, value: "str | Season") -> "Season":
        """Return the ``Season`` for a canonical value or a legacy label.

        Accepts the canonical values plus the labels found in exported farm
        data (``"wetSeason"``, ``"drySeason"``, ``"transition"``).

        Raises:
            ValidationError: If ``value`` names no known season.
        """
        if isinstance(value, Season):
            return value
        key = str(value).strip()
        if key in _SEASON_ALIASES:
            return _SEASON_ALIASES[key]
        try:
            return cls(key.lower())
        except ValueError:
            raise ValidationError(
                f"Unknown season '{value}'. Must be one of {[s.value for s in cls]}."
            ) from None


_SEASON_ALIASES: dict[str, Season] = {
    "wetSeason":  Season.WET,
    "drySeason":  Season.DRY,
    "transition": Season.TRANSITIONAL,
}


class Trend(StrEnum):
    """Direction of the recent observation window vs. the one before it."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Severity(StrEnum):
    """Urgency of a recommendation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationType(StrEnum):
    """Subject tag of a recommendation."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    SOIL = "soil"
    GROWTH = "growth"
    YIELD = "yield"
    SEASONAL = "seasonal"
    SEASONAL_TIP = "seasonal_tip"
    ERROR = "error"


class MoistureLevel(StrEnum):
    """Discrete soil moisture reading."""

    VERY_DRY = "very_dry"
    DRY = "dry"
    MODERATE = "moderate"
    MOIST = "moist"
    VERY_MOIST = "very_moist"


class YieldStatus(StrEnum):
    """Projected seasonal yield compared with the season's target triple."""

    OPTIMAL = "optimal"
    ACCEPTABLE = "acceptable"
    BELOW_TARGET = "below_target"


class FactorStatus(StrEnum):
    """One environmental reading compared with its optimal band."""

    LOW = "low"
    OPTIMAL = "optimal"
    HIGH = "high"
    UNKNOWN = "unknown"


class EnvironmentalFactor(StrEnum):
    """Environmental readings reported with a status in the comprehensive report.

    Values are the external report keys (note ``pH``).
    """

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PH = "pH"
    RAINFALL = "rainfall"


def complete_table(enum_cls: type[_E], table: dict[_E, _V]) -> Mapping[_E, _V]:
    """Freeze ``table`` after checking it covers every member of ``enum_cls``.

    Raises:
        KeyError: If a member is missing or a foreign key is present.
    """
    missing = set(enum_cls) - set(table)
    extra = set(table) - set(enum_cls)
    if missing or extra:
        raise KeyError(
            f"Lookup table for {enum_cls.__name__} is not closed: "
            f"missing={sorted(missing)}, extra={sorted(map(str, extra))}"
        )
    return MappingProxyType(dict(table))


# ── Severity tables ───────────────────────────────────────────────────────────

SEVERITY_PRIORITY: Mapping[Severity, int] = complete_table(Severity, {
    Severity.HIGH:   3,
    Severity.MEDIUM: 2,
    Severity.LOW:    1,
})
"""Sort weight used when prioritising recommendation lists."""

SEVERITY_YIELD_WEIGHT: Mapping[Severity, float] = complete_table(Severity, {
    Severity.HIGH:   0.80,
    Severity.MEDIUM: 0.90,
    Severity.LOW:    0.95,
})
"""Multiplicative yield discount applied per active recommendation."""
