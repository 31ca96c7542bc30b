"""
Tests for coffee_analytics/forecasting/yield_forecaster.py.

What we test
------------
environmental_factor():
  - Equals the current season's weight with no active recommendations.
  - Discounted multiplicatively per recommendation severity.
  - Floored at 0.6.

forecast_seasonal_yield():
  - One entry per season with historical stats, confidence and variance.
  - Only the current season is scaled by the environmental factor.
  - Status thresholds: optimal ≥ target, acceptable ≥ min, else below_target.
  - Empty store → zero projections, zero confidence.

forecast_growth():
  - Materialised list, pure function of the store.
"""

from __future__ import annotations

from datetime import date

import pytest

from coffee_analytics.forecasting.yield_forecaster import YieldForecaster, yield_status
from coffee_analytics.models.analysis import Recommendation
from coffee_analytics.taxonomy.agronomy import RecommendationType, Season, Severity, YieldStatus
from coffee_analytics.timeseries.seasons import SeasonalClassifier
from coffee_analytics.timeseries.series_store import SeriesStore

JULY = date(2024, 7, 1)
FEBRUARY = date(2024, 2, 1)


def _rec(severity: Severity) -> Recommendation:
    return Recommendation(type=RecommendationType.GROWTH, severity=severity, message=f"{severity} issue")


@pytest.fixture
def forecaster() -> YieldForecaster:
    store = SeriesStore()
    for value, day in [
        (500, date(2024, 1, 15)), (520, date(2024, 3, 15)),
        (800, date(2024, 6, 15)), (850, date(2024, 8, 15)),
        (600, date(2024, 11, 15)),
    ]:
        store.append(value, day)
    return YieldForecaster(store)


class TestEnvironmentalFactor:
    def test_base_weight(self, forecaster):
        assert forecaster.environmental_factor(as_of=JULY) == pytest.approx(1.2)
        assert forecaster.environmental_factor(as_of=FEBRUARY) == pytest.approx(0.8)

    def test_severity_discounts(self, forecaster):
        assert forecaster.environmental_factor([_rec(Severity.MEDIUM)], FEBRUARY) == pytest.approx(0.72)
        assert forecaster.environmental_factor([_rec(Severity.HIGH)], FEBRUARY) == pytest.approx(0.64)
        assert forecaster.environmental_factor([_rec(Severity.LOW)], JULY) == pytest.approx(1.14)

    def test_floor(self, forecaster):
        recs = [_rec(Severity.HIGH), _rec(Severity.HIGH)]
        assert forecaster.environmental_factor(recs, FEBRUARY) == pytest.approx(0.6)


class TestForecastSeasonalYield:
    def test_all_seasons_present(self, forecaster):
        assert set(forecaster.forecast_seasonal_yield(as_of=JULY)) == set(Season)

    def test_current_season_scaled(self, forecaster):
        result = forecaster.forecast_seasonal_yield(as_of=JULY)
        wet = result[Season.WET]
        assert wet.predicted_yield == pytest.approx(990.0)
        assert wet.variance.min == pytest.approx(891.0)
        assert wet.variance.max == pytest.approx(1089.0)
        assert wet.historical.average == pytest.approx(825.0)
        assert wet.historical.min == 800
        assert wet.historical.max == 850
        assert wet.confidence == pytest.approx(40.0)
        assert wet.target == 750
        assert wet.status is YieldStatus.OPTIMAL

    def test_other_seasons_unscaled(self, forecaster):
        result = forecaster.forecast_seasonal_yield(as_of=JULY)
        assert result[Season.DRY].predicted_yield == pytest.approx(510.0)
        assert result[Season.DRY].status is YieldStatus.OPTIMAL
        assert result[Season.TRANSITIONAL].predicted_yield == pytest.approx(600.0)
        assert result[Season.TRANSITIONAL].status is YieldStatus.OPTIMAL
        assert result[Season.TRANSITIONAL].confidence == pytest.approx(20.0)

    def test_dry_season_acceptable(self, forecaster):
        dry = forecaster.forecast_seasonal_yield(as_of=FEBRUARY)[Season.DRY]
        assert dry.predicted_yield == pytest.approx(408.0)
        assert dry.status is YieldStatus.ACCEPTABLE

    def test_active_recommendations_push_below_target(self, forecaster):
        recs = [_rec(Severity.HIGH)] * 3
        wet = forecaster.forecast_seasonal_yield(recs, as_of=JULY)[Season.WET]
        assert wet.predicted_yield == pytest.approx(506.88)
        assert wet.status is YieldStatus.BELOW_TARGET

    def test_discount_never_exceeds_forty_percent(self, forecaster):
        recs = [_rec(Severity.HIGH)] * 10
        wet = forecaster.forecast_seasonal_yield(recs, as_of=JULY)[Season.WET]
        assert wet.predicted_yield == pytest.approx(825.0 * 0.6)

    def test_empty_store(self):
        result = YieldForecaster(SeriesStore()).forecast_seasonal_yield(as_of=JULY)
        for forecast in result.values():
            assert forecast.predicted_yield == 0
            assert forecast.confidence == 0
            assert forecast.status is YieldStatus.BELOW_TARGET

    def test_confidence_caps_at_100(self):
        store = SeriesStore()
        for day in range(1, 8):
            store.append(700, date(2024, 7, day))
        wet = YieldForecaster(store).forecast_seasonal_yield(as_of=JULY)[Season.WET]
        assert wet.confidence == pytest.approx(100.0)


class TestYieldStatus:
    @pytest.mark.parametrize("predicted,expected", [
        (750, YieldStatus.OPTIMAL),
        (749.99, YieldStatus.ACCEPTABLE),
        (600, YieldStatus.ACCEPTABLE),
        (599.99, YieldStatus.BELOW_TARGET),
    ])
    def test_thresholds(self, predicted, expected):
        target = SeasonalClassifier().target_for(Season.WET)
        assert yield_status(predicted, target) is expected


class TestForecastGrowth:
    def test_returns_list_of_entries(self, forecaster):
        entries = forecaster.forecast_growth(90, start=JULY)
        assert isinstance(entries, list)
        assert len(entries) == 90

    def test_pure_function_of_store(self, forecaster):
        assert forecaster.forecast_growth(14, start=JULY) == forecaster.forecast_growth(14, start=JULY)

    def test_uses_store_estimate(self, forecaster):
        # estimate 632.5 × wet 1.2
        assert forecaster.forecast_growth(1, start=JULY)[0].predicted_value == pytest.approx(759.0)
