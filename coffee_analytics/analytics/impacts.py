"""
Multi-factor yield impact curves.

Each factor is an independent multiplier on the time-series base estimate,
clamped to its own band:

    factor        formula                          band
    temperature   2 − |t − 25| / 10                [0.5, 1.2]
    rainfall      r / 1500                         [0.6, 1.3]
    fertiliser    0.7 + 0.5 × level                [0.7, 1.2]
    pest          1 − 0.6 × level                  [0.4, 1.0]

    yield = max(0, base × temperature × rainfall × fertiliser × pest)

Optimum points: 25 °C (tolerance 5 °C, so the curve saturates at the 1.2 cap
for any temperature within ±8 °C of it), 1500 mm rainfall.
"""

from __future__ import annotations

from dataclasses import dataclass

from coffee_analytics.models.records import EnvironmentalReading

OPTIMAL_TEMPERATURE_C = 25.0
TEMPERATURE_TOLERANCE_C = 5.0
OPTIMAL_RAINFALL_MM = 1500.0

TEMPERATURE_BAND = (0.5, 1.2)
RAINFALL_BAND = (0.6, 1.3)
FERTILIZER_BAND = (0.7, 1.2)
PEST_BAND = (0.4, 1.0)


@dataclass(frozen=True)
class ImpactFactors:
    """The four clamped multipliers for one reading."""

    temperature: float
    rainfall: float
    fertilizer: float
    pest: float

    @property
    def combined(self) -> float:
        return self.temperature * self.rainfall * self.fertilizer * self.pest


def temperature_impact(temperature: float) -> float:
    deviation = abs(temperature - OPTIMAL_TEMPERATURE_C) / (TEMPERATURE_TOLERANCE_C * 2)
    return _clamp(2 - deviation, *TEMPERATURE_BAND)


def rainfall_impact(rainfall: float) -> float:
    return _clamp(rainfall / OPTIMAL_RAINFALL_MM, *RAINFALL_BAND)


def fertilizer_impact(level: float) -> float:
    return _clamp(0.7 + level * 0.5, *FERTILIZER_BAND)


def pest_impact(level: float) -> float:
    return _clamp(1 - level * 0.6, *PEST_BAND)


def impact_factors(reading: EnvironmentalReading) -> ImpactFactors:
    return ImpactFactors(
        temperature=temperature_impact(reading.temperature),
        rainfall=rainfall_impact(reading.rainfall),
        fertilizer=fertilizer_impact(reading.fertilizer_application),
        pest=pest_impact(reading.pest_disease_incidence),
    )


def apply_impacts(base: float, reading: EnvironmentalReading) -> float:
    """Scale ``base`` by all four factors; never negative."""
    return max(0.0, base * impact_factors(reading).combined)


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
