"""
Tests for coffee_analytics/timeseries/series_store.py.

What we test
------------
append():
  - Rejects bools, NaN, infinities, negatives, non-numbers and bad dates.
  - Accepts date, datetime and ISO strings; stores immutable observations.

current_trend():
  - Fewer than two observations → stable.
  - Window is clamped to n // 2 and compares equal-size windows.
  - Works on the timestamp-sorted series, not insertion order.

next_value_estimate():
  - None when empty, the value itself for one observation.
  - last + (recent mean − prior mean) / w, floored at zero.

daily_forecast():
  - horizon_days entries, consecutive dates, 1-based day numbers.
  - Season-weighted value, season target band, None without data.
  - horizon_days < 1 raises on first iteration.
  - Restartable: two calls on the same store give identical output.

seasonal_stats():
  - Every season present; empty seasons are all-zero.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from coffee_analytics.errors import ValidationError
from coffee_analytics.taxonomy.agronomy import Season, Trend
from coffee_analytics.timeseries.series_store import SeriesStore


def _store(*values: float, start_month: int = 1) -> SeriesStore:
    """Store with one observation per day from ``start_month``/1/2024."""
    store = SeriesStore()
    for i, value in enumerate(values):
        store.append(value, date(2024, start_month, 1 + i))
    return store


class TestAppend:
    @pytest.mark.parametrize("bad", [True, float("nan"), float("inf"), -0.01, "12", None])
    def test_rejects_bad_values(self, store, bad):
        with pytest.raises(ValidationError):
            store.append(bad, date(2024, 1, 1))
        assert len(store) == 0

    @pytest.mark.parametrize("bad", ["2024-13-01", "", 1704067200, None])
    def test_rejects_bad_timestamps(self, store, bad):
        with pytest.raises(ValidationError):
            store.append(1.0, bad)

    def test_accepts_date_forms(self, store):
        store.append(1, date(2024, 1, 1))
        store.append(2.5, datetime(2024, 1, 2, 8, 0))
        store.append(0, "2024-01-03T00:00:00Z")
        assert [o.timestamp for o in store.observations] == [
            date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
        ]
        assert [o.value for o in store.observations] == [1.0, 2.5, 0.0]

    def test_observations_is_a_snapshot(self, store):
        store.append(1, date(2024, 1, 1))
        snapshot = store.observations
        store.append(2, date(2024, 1, 2))
        assert len(snapshot) == 1
        assert len(store) == 2

    def test_empty_store_is_falsy(self, store):
        assert not store
        assert store.last_value() is None


class TestCurrentTrend:
    def test_empty_and_single_are_stable(self, store):
        assert store.current_trend() is Trend.STABLE
        store.append(10, date(2024, 1, 1))
        assert store.current_trend() is Trend.STABLE

    def test_two_points(self):
        assert _store(1, 2).current_trend() is Trend.INCREASING
        assert _store(2, 1).current_trend() is Trend.DECREASING
        assert _store(5, 5).current_trend() is Trend.STABLE

    def test_window_clamped_to_half(self):
        # n=5, window=3 → w=2: [40, 50] vs [20, 30]
        assert _store(100, 20, 30, 40, 50).current_trend(3) is Trend.INCREASING

    def test_full_window(self):
        # w=3: [1, 1, 1] vs [9, 9, 9]
        assert _store(9, 9, 9, 1, 1, 1).current_trend(3) is Trend.DECREASING

    def test_uses_timestamp_order(self, store):
        store.append(10, date(2024, 1, 3))
        store.append(1, date(2024, 1, 1))
        store.append(5, date(2024, 1, 2))
        assert store.current_trend() is Trend.INCREASING
        assert store.last_value() == 10

    def test_float_noise_is_stable(self):
        assert _store(0.1 + 0.2, 0.3).current_trend() is Trend.STABLE


class TestNextValueEstimate:
    def test_empty_is_none(self, store):
        assert store.next_value_estimate() is None

    def test_single_observation(self):
        assert _store(42).next_value_estimate() == 42

    def test_extrapolates_per_observation_change(self):
        # w=3: recent mean 5, prior mean 2 → 6 + 3 / 3
        assert _store(1, 2, 3, 4, 5, 6).next_value_estimate(3) == pytest.approx(7.0)

    def test_window_larger_than_history(self):
        assert _store(1, 2, 3, 4, 5, 6).next_value_estimate(10) == pytest.approx(7.0)

    def test_out_of_order_input(self, store):
        store.append(10, date(2024, 1, 3))
        store.append(1, date(2024, 1, 1))
        store.append(5, date(2024, 1, 2))
        assert store.next_value_estimate() == pytest.approx(15.0)

    def test_never_negative(self):
        assert _store(100, 10).next_value_estimate() == 0.0


class TestDailyForecast:
    def test_length_dates_and_days(self):
        entries = list(_store(100).daily_forecast(10, start=date(2024, 6, 1)))
        assert [e.day for e in entries] == list(range(1, 11))
        assert entries[0].date == date(2024, 6, 1)
        assert entries[-1].date == date(2024, 6, 10)

    def test_season_weighting_across_boundary(self):
        entries = list(_store(100).daily_forecast(2, start=date(2024, 5, 31)))
        assert entries[0].season is Season.TRANSITIONAL
        assert entries[0].predicted_value == pytest.approx(100.0)
        assert (entries[0].optimal_range.min, entries[0].optimal_range.max) == (500, 750)
        assert entries[1].season is Season.WET
        assert entries[1].predicted_value == pytest.approx(120.0)
        assert (entries[1].optimal_range.min, entries[1].optimal_range.max) == (600, 900)

    def test_dry_season_weight(self):
        entry = next(_store(100).daily_forecast(1, start=date(2024, 2, 1)))
        assert entry.predicted_value == pytest.approx(80.0)

    def test_empty_store_has_no_prediction(self, store):
        entries = list(store.daily_forecast(3, start=date(2024, 1, 1)))
        assert len(entries) == 3
        assert all(e.predicted_value is None for e in entries)

    @pytest.mark.parametrize("horizon", [0, -5])
    def test_non_positive_horizon_raises(self, store, horizon):
        with pytest.raises(ValidationError):
            next(store.daily_forecast(horizon))

    def test_restartable(self):
        store = _store(3, 5, 4, 8)
        first = list(store.daily_forecast(30, start=date(2024, 4, 20)))
        second = list(store.daily_forecast(30, start=date(2024, 4, 20)))
        assert first == second

    def test_values_rounded_to_cents(self):
        entry = next(_store(10, 10.333).daily_forecast(1, start=date(2024, 7, 1)))
        assert entry.predicted_value == round(entry.predicted_value, 2)


class TestSeasonalStats:
    def test_groups_by_season(self, store):
        store.append(500, date(2024, 1, 15))
        store.append(520, date(2024, 3, 15))
        store.append(800, date(2024, 6, 15))
        stats = store.seasonal_stats()
        assert stats[Season.DRY].count == 2
        assert stats[Season.DRY].average == pytest.approx(510.0)
        assert stats[Season.DRY].min == 500
        assert stats[Season.DRY].max == 520
        assert stats[Season.WET].count == 1

    def test_empty_seasons_are_zero(self, store):
        stats = store.seasonal_stats()
        assert set(stats) == set(Season)
        assert all(s.count == 0 and s.average == 0 for s in stats.values())
