"""Tests for agronomy taxonomy integrity — enums, aliases, closed lookup tables."""

from __future__ import annotations

import pytest

from coffee_analytics.errors import ValidationError
from coffee_analytics.taxonomy.agronomy import (
    SEVERITY_PRIORITY,
    SEVERITY_YIELD_WEIGHT,
    MoistureLevel,
    RecommendationType,
    Season,
    Severity,
    Trend,
    complete_table,
)


class TestSeasonEnum:
    def test_exactly_three_seasons(self):
        assert {s.value for s in Season} == {"wet", "dry", "transitional"}

    def test_parse_canonical_values(self):
        assert Season.parse("wet") is Season.WET
        assert Season.parse("DRY") is Season.DRY
        assert Season.parse(" transitional ") is Season.TRANSITIONAL

    def test_parse_legacy_labels(self):
        assert Season.parse("wetSeason") is Season.WET
        assert Season.parse("drySeason") is Season.DRY
        assert Season.parse("transition") is Season.TRANSITIONAL

    def test_parse_passes_members_through(self):
        assert Season.parse(Season.WET) is Season.WET

    def test_parse_unknown_raises(self):
        with pytest.raises(ValidationError, match="Unknown season"):
            Season.parse("monsoon")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Season.parse("")


class TestOtherEnums:
    @pytest.mark.parametrize("enum_cls", [Trend, Severity, RecommendationType, MoistureLevel])
    def test_values_are_lowercase_slugs(self, enum_cls):
        for member in enum_cls:
            assert member.value == member.value.lower()
            assert " " not in member.value

    def test_recommendation_types_cover_engine_outputs(self):
        required = {"temperature", "humidity", "soil", "growth", "yield", "seasonal", "seasonal_tip", "error"}
        assert {m.value for m in RecommendationType} == required

    def test_str_enum_compares_to_plain_string(self):
        assert Severity.HIGH == "high"
        assert f"{Trend.STABLE}" == "stable"


class TestSeverityTables:
    def test_priority_order(self):
        assert SEVERITY_PRIORITY[Severity.HIGH] > SEVERITY_PRIORITY[Severity.MEDIUM]
        assert SEVERITY_PRIORITY[Severity.MEDIUM] > SEVERITY_PRIORITY[Severity.LOW]

    def test_yield_weights(self):
        assert SEVERITY_YIELD_WEIGHT[Severity.HIGH] == pytest.approx(0.80)
        assert SEVERITY_YIELD_WEIGHT[Severity.MEDIUM] == pytest.approx(0.90)
        assert SEVERITY_YIELD_WEIGHT[Severity.LOW] == pytest.approx(0.95)

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            SEVERITY_PRIORITY[Severity.HIGH] = 10  # type: ignore[index]


class TestCompleteTable:
    def test_missing_member_raises(self):
        with pytest.raises(KeyError, match="missing"):
            complete_table(Trend, {Trend.STABLE: 1, Trend.INCREASING: 2})

    def test_foreign_key_raises(self):
        table = {t: 0 for t in Trend}
        table["sideways"] = 1  # type: ignore[index]
        with pytest.raises(KeyError, match="extra"):
            complete_table(Trend, table)

    def test_complete_table_is_a_copy(self):
        source = {t: 0 for t in Trend}
        frozen = complete_table(Trend, source)
        source[Trend.STABLE] = 99
        assert frozen[Trend.STABLE] == 0
