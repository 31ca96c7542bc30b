"""
Series store: an append-only, caller-owned collection of dated observations.

The store is the only stateful component of the core. It is created
explicitly, filled through explicit ``append`` calls, and lives exactly as
long as its owner (normally one ``AnalyticsOrchestrator``). Nothing is
persisted; re-initialising an orchestrator builds a new store.

Single-writer contract
----------------------
No internal locking is provided. Concurrent ``append`` calls on the same
instance are a data race and must be serialised by the caller. Read-only
methods may run concurrently with each other but not with an ``append``.

Trend and extrapolation rules
-----------------------------
Observations may arrive out of date order; every analysis works on the
timestamp-sorted series (stable, so same-day observations keep insertion
order).

``current_trend(window)``:
    n < 2                          → stable
    w = max(1, min(window, n // 2))
    recent = last w values, prior = the w values before them
    mean(recent) > mean(prior)     → increasing
    mean(recent) < mean(prior)     → decreasing
    otherwise                      → stable

``next_value_estimate(window)``:
    empty                          → None  (no data, not a zero forecast)
    one observation                → that value
    otherwise                      → max(0, last + (mean(recent) − mean(prior)) / w)
    i.e. the last value moved by the average per-observation change between
    the two windows.
"""

from __future__ import annotations

import datetime as dt
import math
from statistics import fmean
from typing import Any, Iterator, Optional

from coffee_analytics.errors import ValidationError
from coffee_analytics.models.analysis import (
    ForecastEntry,
    Observation,
    SeasonStats,
    ValueRange,
)
from coffee_analytics.taxonomy.agronomy import Season, Trend
from coffee_analytics.timeseries.seasons import SeasonalClassifier
from coffee_analytics.utils.time_utils import is_real_number, parse_date, today

DEFAULT_TREND_WINDOW = 3

# Relative tolerance under which two window means count as equal.
_EQUALITY_TOLERANCE = 1e-9


class SeriesStore:
    """Ordered (value, date) observations with trend and forecast primitives."""

    def __init__(self) -> None:
        self._observations: list[Observation] = []

    def __len__(self) -> int:
        return len(self._observations)

    def __bool__(self) -> bool:
        return bool(self._observations)

    # ── Writes ────────────────────────────────────────────────────────────────

    def append(self, value: Any, timestamp: Any) -> Observation:
        """Record one observation.

        Args:
            value: Non-negative finite number (``bool`` is rejected).
            timestamp: ``date``, ``datetime`` or ISO-8601 string.

        Returns:
            The stored, immutable ``Observation``.

        Raises:
            ValidationError: If the value is not a non-negative number or the
                timestamp is not a valid date.
        """
        if not is_real_number(value):
            raise ValidationError(
                f"Observation value must be a finite number, got {value!r}.",
                field="value", value=value,
            )
        if value < 0:
            raise ValidationError(
                f"Observation value must be non-negative, got {value}.",
                field="value", value=value,
            )
        day = parse_date(timestamp)
        if day is None:
            raise ValidationError(
                f"Observation timestamp is not a valid date: {timestamp!r}.",
                field="timestamp", value=timestamp,
            )

        obs = Observation(value=float(value), timestamp=day)
        self._observations.append(obs)
        return obs

    # ── Reads ─────────────────────────────────────────────────────────────────

    @property
    def observations(self) -> tuple[Observation, ...]:
        """All observations in insertion order."""
        return tuple(self._observations)

    def sorted_observations(self) -> list[Observation]:
        """All observations sorted by timestamp (stable)."""
        return sorted(self._observations, key=lambda o: o.timestamp)

    def last_value(self) -> Optional[float]:
        """Value of the chronologically latest observation, or ``None``."""
        if not self._observations:
            return None
        return self.sorted_observations()[-1].value

    def current_trend(self, window: int = DEFAULT_TREND_WINDOW) -> Trend:
        """Compare the latest window mean against the preceding window mean."""
        split = self._split_windows(window)
        if split is None:
            return Trend.STABLE
        recent, prior = split
        recent_mean, prior_mean = fmean(recent), fmean(prior)

        if math.isclose(recent_mean, prior_mean, rel_tol=_EQUALITY_TOLERANCE):
            return Trend.STABLE
        if recent_mean > prior_mean:
            return Trend.INCREASING
        return Trend.DECREASING

    def next_value_estimate(self, window: int = DEFAULT_TREND_WINDOW) -> Optional[float]:
        """Extrapolate one step ahead; ``None`` when the store is empty."""
        if not self._observations:
            return None
        values = [o.value for o in self.sorted_observations()]
        split = self._split_windows(window)
        if split is None:
            return values[-1]
        recent, prior = split
        step = (fmean(recent) - fmean(prior)) / len(recent)
        return max(0.0, values[-1] + step)

    def daily_forecast(
        self,
        horizon_days: int,
        start: Optional[dt.date] = None,
        classifier: Optional[SeasonalClassifier] = None,
        window: int = DEFAULT_TREND_WINDOW,
    ) -> Iterator[ForecastEntry]:
        """Lazily yield ``horizon_days`` season-weighted daily forecast entries.

        Each entry carries the season of its date, the one-step estimate
        scaled by that season's weight, and the season's target band. When
        the store is empty ``predicted_value`` is ``None`` on every entry.

        Args:
            horizon_days: Number of calendar days to cover (>= 1).
            start: First forecast date (UTC today when omitted).
            classifier: Season authority (a fresh ``SeasonalClassifier`` when omitted).
            window: Trend window passed to ``next_value_estimate``.

        Raises:
            ValidationError: If ``horizon_days < 1``. Raised on the first
                ``next()``, as for any generator.
        """
        if horizon_days < 1:
            raise ValidationError(
                f"horizon_days must be >= 1, got {horizon_days}.",
                field="horizon_days", value=horizon_days,
            )
        classifier = classifier or SeasonalClassifier()
        first = start or today()
        base = self.next_value_estimate(window)

        for offset in range(horizon_days):
            day = first + dt.timedelta(days=offset)
            season = classifier.classify(day)
            target = classifier.target_for(season)
            predicted = None if base is None else round(base * classifier.weight_for(season), 2)
            yield ForecastEntry(
                day=offset + 1,
                date=day,
                season=season,
                predicted_value=predicted,
                optimal_range=ValueRange(min=target.min, max=target.max),
            )

    def seasonal_stats(
        self,
        classifier: Optional[SeasonalClassifier] = None,
    ) -> dict[Season, SeasonStats]:
        """Average/min/max/count of observations per season they fall in.

        Seasons without observations are present with all-zero stats.
        """
        classifier = classifier or SeasonalClassifier()
        grouped: dict[Season, list[float]] = {season: [] for season in Season}
        for obs in self._observations:
            grouped[classifier.classify(obs.timestamp)].append(obs.value)

        return {
            season: SeasonStats(
                average=fmean(values), min=min(values), max=max(values), count=len(values),
            ) if values else SeasonStats()
            for season, values in grouped.items()
        }

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _split_windows(self, window: int) -> Optional[tuple[list[float], list[float]]]:
        """Return ``(recent, prior)`` windows of equal size, or ``None`` if n < 2."""
        n = len(self._observations)
        if n < 2:
            return None
        w = max(1, min(window, n // 2))
        values = [o.value for o in self.sorted_observations()]
        return values[-w:], values[-2 * w:-w]
