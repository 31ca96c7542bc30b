"""
Yield forecaster: growth and per-season yield projections.

Seasonal yield projection
-------------------------
For each season:

    historical   = average / min / max of observations tagged with that season
    confidence   = min(count / 5, 1) * 100
    predicted    = historical.average
                   × environmental_factor     (current season only)
    variance     = [0.9 × predicted, 1.1 × predicted]
    status       = optimal       if predicted >= target.target
                   acceptable    if predicted >= target.min
                   below_target  otherwise

environmental_factor (current season only):

    factor = weight(current season)
             × Π severity_weight(rec)   for each active recommendation
               (high 0.80, medium 0.90, low 0.95)
    factor = max(0.6, factor)           # yield is never discounted by > 40%

Both methods are pure functions of the store's contents at call time:
calling them twice without new observations gives identical output.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Optional

from coffee_analytics.models.analysis import (
    ForecastEntry,
    Recommendation,
    SeasonalYieldForecast,
    SeasonalYieldTarget,
    SeasonStats,
    ValueRange,
)
from coffee_analytics.taxonomy.agronomy import (
    SEVERITY_YIELD_WEIGHT,
    Season,
    YieldStatus,
)
from coffee_analytics.timeseries.seasons import SeasonalClassifier
from coffee_analytics.timeseries.series_store import DEFAULT_TREND_WINDOW, SeriesStore
from coffee_analytics.utils.time_utils import today

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 90
ENVIRONMENTAL_FACTOR_FLOOR = 0.6
FULL_CONFIDENCE_OBSERVATIONS = 5
VARIANCE_BAND = (0.9, 1.1)


class YieldForecaster:
    """Season-aware projections over one ``SeriesStore``.

    Args:
        store: The observation series to project from.
        classifier: Season authority; a fresh ``SeasonalClassifier`` by default.
        trend_window: Window size used for the one-step estimate.
    """

    def __init__(
        self,
        store: SeriesStore,
        classifier: Optional[SeasonalClassifier] = None,
        trend_window: int = DEFAULT_TREND_WINDOW,
    ) -> None:
        self.store = store
        self.classifier = classifier or SeasonalClassifier()
        self.trend_window = trend_window

    def forecast_growth(
        self,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        start: Optional[dt.date] = None,
    ) -> list[ForecastEntry]:
        """Materialise the daily forecast for ``horizon_days`` days from ``start``."""
        return list(
            self.store.daily_forecast(
                horizon_days,
                start=start,
                classifier=self.classifier,
                window=self.trend_window,
            )
        )

    def environmental_factor(
        self,
        recommendations: Iterable[Recommendation] = (),
        as_of: Optional[dt.date] = None,
    ) -> float:
        """Current-season weight discounted by active recommendation severities."""
        season = self.classifier.current_season(as_of)
        factor = self.classifier.weight_for(season)
        for rec in recommendations:
            factor *= SEVERITY_YIELD_WEIGHT[rec.severity]
        return max(ENVIRONMENTAL_FACTOR_FLOOR, factor)

    def forecast_seasonal_yield(
        self,
        recommendations: Iterable[Recommendation] = (),
        as_of: Optional[dt.date] = None,
    ) -> dict[Season, SeasonalYieldForecast]:
        """Project yield for every season against its fixed target.

        Args:
            recommendations: Currently active recommendations; they discount
                the current season's projection only.
            as_of: Date that decides the current season (UTC today by default).

        Returns:
            Mapping with one ``SeasonalYieldForecast`` per season.
        """
        as_of = as_of or today()
        recommendations = list(recommendations)
        current = self.classifier.current_season(as_of)
        stats_by_season = self.store.seasonal_stats(self.classifier)

        forecast: dict[Season, SeasonalYieldForecast] = {}
        for season in Season:
            stats = stats_by_season[season]
            target = self.classifier.target_for(season)

            predicted = stats.average
            if season is current:
                predicted *= self.environmental_factor(recommendations, as_of)

            forecast[season] = _build_season_forecast(season, predicted, stats, target)

        logger.debug(
            "Seasonal yield forecast | current=%s | observations=%d | active_recs=%d",
            current, len(self.store), len(recommendations),
        )
        return forecast


def yield_status(predicted: float, target: SeasonalYieldTarget) -> YieldStatus:
    """Classify a projected yield against a season's target triple."""
    if predicted >= target.target:
        return YieldStatus.OPTIMAL
    if predicted >= target.min:
        return YieldStatus.ACCEPTABLE
    return YieldStatus.BELOW_TARGET


def _build_season_forecast(
    season: Season,
    predicted: float,
    stats: SeasonStats,
    target: SeasonalYieldTarget,
) -> SeasonalYieldForecast:
    low, high = VARIANCE_BAND
    confidence = min(stats.count / FULL_CONFIDENCE_OBSERVATIONS, 1.0) * 100
    return SeasonalYieldForecast(
        season=season,
        predicted_yield=round(predicted, 2),
        target=target.target,
        confidence=confidence,
        variance=ValueRange(min=round(predicted * low, 2), max=round(predicted * high, 2)),
        historical=SeasonStats(
            average=round(stats.average, 2),
            min=round(stats.min, 2),
            max=round(stats.max, 2),
            count=stats.count,
        ),
        status=yield_status(predicted, target),
    )
