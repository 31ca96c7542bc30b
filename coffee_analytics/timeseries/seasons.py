"""
Seasonal classifier: maps calendar dates to one of three seasonal regimes.

Month table (tropical coffee calendar, policy constant)
-------------------------------------------------------
    dry           Jan  Feb  Mar  Apr
    transitional  May                      Nov  Dec
    wet                Jun  Jul  Aug  Sep  Oct

Every month appears exactly once, so ``classify`` is total over the year.

Season weights scale the daily growth forecast and the current-season yield
projection: wet 1.2 (main growing season), dry 0.8 (water stress),
transitional 1.0.

The seasonal yield targets live here as well, because both the daily
forecast (optimal band per entry) and the yield forecaster (status per
season) key them by the same season tags.
"""

from __future__ import annotations

import datetime as dt
from types import MappingProxyType
from typing import Any, Mapping

from coffee_analytics.errors import ValidationError
from coffee_analytics.models.analysis import SeasonalPattern, SeasonalYieldTarget
from coffee_analytics.taxonomy.agronomy import Season, complete_table
from coffee_analytics.utils.time_utils import parse_date, today as utc_today

MONTH_TO_SEASON: Mapping[int, Season] = MappingProxyType({
    1:  Season.DRY,
    2:  Season.DRY,
    3:  Season.DRY,
    4:  Season.DRY,
    5:  Season.TRANSITIONAL,
    6:  Season.WET,
    7:  Season.WET,
    8:  Season.WET,
    9:  Season.WET,
    10: Season.WET,
    11: Season.TRANSITIONAL,
    12: Season.TRANSITIONAL,
})

SEASONAL_PATTERNS: Mapping[Season, SeasonalPattern] = complete_table(Season, {
    Season.WET: SeasonalPattern(
        weight=1.2, description="Main growing season with optimal rainfall",
    ),
    Season.DRY: SeasonalPattern(
        weight=0.8, description="Reduced yield due to water stress",
    ),
    Season.TRANSITIONAL: SeasonalPattern(
        weight=1.0, description="Moderate growth with changing conditions",
    ),
})

SEASONAL_YIELD_TARGETS: Mapping[Season, SeasonalYieldTarget] = complete_table(Season, {
    Season.WET: SeasonalYieldTarget(
        season=Season.WET, min=600, target=750, max=900,
        description="Main growing season with optimal rainfall",
    ),
    Season.DRY: SeasonalYieldTarget(
        season=Season.DRY, min=400, target=500, max=650,
        description="Reduced yield due to water stress",
    ),
    Season.TRANSITIONAL: SeasonalYieldTarget(
        season=Season.TRANSITIONAL, min=500, target=600, max=750,
        description="Moderate growth with changing conditions",
    ),
})

SEASON_DISPLAY_NAMES: Mapping[Season, str] = complete_table(Season, {
    Season.WET:          "Wet Season",
    Season.DRY:          "Dry Season",
    Season.TRANSITIONAL: "Transitional Period",
})


class SeasonalClassifier:
    """Sole authority mapping a calendar date to a ``Season``.

    Stateless; instances are interchangeable and safe to share.
    """

    @property
    def seasonal_patterns(self) -> Mapping[Season, SeasonalPattern]:
        """Read-only ``{season: SeasonalPattern(weight, description)}`` table."""
        return SEASONAL_PATTERNS

    def classify(self, when: Any) -> Season:
        """Return the season of ``when``.

        Args:
            when: ``date``, ``datetime`` or ISO-8601 string.

        Raises:
            ValidationError: If ``when`` is not a valid date.
        """
        day = parse_date(when)
        if day is None:
            raise ValidationError(f"Cannot classify invalid date: {when!r}", field="date", value=when)
        return MONTH_TO_SEASON[day.month]

    def weight_for(self, season: Season | str) -> float:
        """Forecast multiplier (> 0) for ``season``."""
        return SEASONAL_PATTERNS[Season.parse(season)].weight

    def target_for(self, season: Season | str) -> SeasonalYieldTarget:
        """Fixed yield target triple for ``season``."""
        return SEASONAL_YIELD_TARGETS[Season.parse(season)]

    def display_name(self, season: Season | str) -> str:
        return SEASON_DISPLAY_NAMES[Season.parse(season)]

    def current_season(self, today: dt.date | None = None) -> Season:
        """Season of ``today`` (UTC today when omitted)."""
        return self.classify(today or utc_today())
