"""Tests for coffee_analytics/analytics/impacts.py — clamped yield multipliers."""

from __future__ import annotations

import pytest

from coffee_analytics.analytics.impacts import (
    apply_impacts,
    fertilizer_impact,
    impact_factors,
    pest_impact,
    rainfall_impact,
    temperature_impact,
)
from coffee_analytics.models.records import EnvironmentalReading


class TestTemperatureImpact:
    @pytest.mark.parametrize("temperature,expected", [
        (25, 1.2), (33, 1.2), (17, 1.2), (35, 1.0), (15, 1.0), (45, 0.5),
    ])
    def test_curve(self, temperature, expected):
        assert temperature_impact(temperature) == pytest.approx(expected)

    def test_between_saturation_and_floor(self):
        assert temperature_impact(34) == pytest.approx(1.1)


class TestRainfallImpact:
    @pytest.mark.parametrize("rainfall,expected", [(1500, 1.0), (3000, 1.3), (600, 0.6), (1200, 0.8)])
    def test_curve(self, rainfall, expected):
        assert rainfall_impact(rainfall) == pytest.approx(expected)


class TestFertilizerAndPest:
    @pytest.mark.parametrize("level,expected", [(0, 0.7), (0.5, 0.95), (1, 1.2)])
    def test_fertilizer(self, level, expected):
        assert fertilizer_impact(level) == pytest.approx(expected)

    @pytest.mark.parametrize("level,expected", [(0, 1.0), (0.5, 0.7), (1, 0.4)])
    def test_pest(self, level, expected):
        assert pest_impact(level) == pytest.approx(expected)


class TestApplyImpacts:
    def test_default_reading(self):
        # 1.2 × 1.0 × 0.7 × 1.0
        assert impact_factors(EnvironmentalReading()).combined == pytest.approx(0.84)
        assert apply_impacts(100, EnvironmentalReading()) == pytest.approx(84.0)

    def test_all_factors(self):
        reading = EnvironmentalReading(
            temperature=35, rainfall=900, fertilizer_application=1.0, pest_disease_incidence=0.5,
        )
        assert apply_impacts(200, reading) == pytest.approx(200 * 1.0 * 0.6 * 1.2 * 0.7)

    def test_zero_base(self):
        assert apply_impacts(0, EnvironmentalReading()) == 0.0
