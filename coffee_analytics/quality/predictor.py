"""
Quality distribution predictor: projected grade split and seasonal yield.

Pure functions over their inputs; no store, no state.

Base distribution
-----------------
    base.grade = Σ grade quantity / Σ raw quantity × 100

Condition factors (fixed step functions)
----------------------------------------
    pH          1.2 inside [6.0, 6.5], else 0.8
    moisture    very_dry 0.6 | dry 0.8 | moderate 1.2 | moist 1.0 | very_moist 0.7
    fertiliser  1.2 if fertilised within 90 days,
                1.0 within 135 days (1.5 cycles),
                0.8 otherwise

    m = mean(pH, moisture, fertiliser)

Projected distribution
----------------------
    premium     = min(100, base.premium    × m)
    fine        = min(100, base.fine       × (2 − m))
    commercial  = min(100, base.commercial × (2 − m))

Favourable conditions (m > 1) lift the premium share and suppress the lower
grades by the same margin; poor conditions do the opposite.

Seasonal yield
--------------
    yield = mean(raw quantity) × seasonal factor × m
    seasonal factor: wet 1.2, dry 0.8, transitional 1.0
"""

from __future__ import annotations

import datetime as dt
from typing import Mapping, NamedTuple, Optional, Sequence

from coffee_analytics.models.analysis import QualityDistribution, QualityFactors, QualityOutlook
from coffee_analytics.models.records import HarvestRecord, QualityConditions
from coffee_analytics.taxonomy.agronomy import MoistureLevel, Season, complete_table
from coffee_analytics.utils.time_utils import days_between, today as utc_today

OPTIMAL_PH_RANGE = (6.0, 6.5)
OPTIMAL_MOISTURE = MoistureLevel.MODERATE
FERTILIZER_CYCLE_DAYS = 90

MOISTURE_FACTORS: Mapping[MoistureLevel, float] = complete_table(MoistureLevel, {
    MoistureLevel.VERY_DRY:   0.6,
    MoistureLevel.DRY:        0.8,
    MoistureLevel.MODERATE:   1.2,
    MoistureLevel.MOIST:      1.0,
    MoistureLevel.VERY_MOIST: 0.7,
})

SEASONAL_YIELD_FACTORS: Mapping[Season, float] = complete_table(Season, {
    Season.WET:          1.2,
    Season.DRY:          0.8,
    Season.TRANSITIONAL: 1.0,
})


def ph_factor(ph: float) -> float:
    low, high = OPTIMAL_PH_RANGE
    return 1.2 if low <= ph <= high else 0.8


def moisture_factor(moisture: MoistureLevel) -> float:
    return MOISTURE_FACTORS[MoistureLevel(moisture)]


def fertilizer_factor(last_fertilized: dt.date, today: Optional[dt.date] = None) -> float:
    """Recency factor of the last fertiliser application."""
    days = days_between(last_fertilized, today or utc_today())
    if days <= FERTILIZER_CYCLE_DAYS:
        return 1.2
    if days <= FERTILIZER_CYCLE_DAYS * 1.5:
        return 1.0
    return 0.8


def quality_factors(conditions: QualityConditions, today: Optional[dt.date] = None) -> QualityFactors:
    """The three condition factors for one plot."""
    return QualityFactors(
        ph=ph_factor(conditions.ph),
        moisture=moisture_factor(conditions.moisture),
        fertilizer=fertilizer_factor(conditions.last_fertilized, today),
    )


class BaseShares(NamedTuple):
    """Historical grade shares in percent, before any condition adjustment."""

    premium: float = 0.0
    fine: float = 0.0
    commercial: float = 0.0


def base_distribution(harvests: Sequence[HarvestRecord]) -> BaseShares:
    """Historical share of each grade in the total raw quantity, in percent.

    Returns all zeros when there is no history or the raw total is zero.
    Shares are not capped: grade totals may exceed raw quantity in
    hand-entered records, and only the projected shares are clamped to 100.
    """
    total = sum(h.raw_quantity for h in harvests)
    if not harvests or total <= 0:
        return BaseShares()

    def share(grade_total: float) -> float:
        return grade_total / total * 100

    return BaseShares(
        premium=share(sum(h.premium_grade for h in harvests)),
        fine=share(sum(h.fine_grade for h in harvests)),
        commercial=share(sum(h.commercial_grade for h in harvests)),
    )


def predict_quality_distribution(
    conditions: QualityConditions,
    harvests: Sequence[HarvestRecord],
    today: Optional[dt.date] = None,
) -> QualityDistribution:
    """Project the grade split under current conditions.

    Args:
        conditions: Current plot status.
        harvests: Historical harvests (read-only snapshot).
        today: Reference date for fertiliser recency (UTC today by default).

    Returns:
        ``QualityDistribution`` with each share in [0, 100]; all zero when
        ``harvests`` is empty.
    """
    if not harvests:
        return QualityDistribution()

    base = base_distribution(harvests)
    m = quality_factors(conditions, today).multiplier

    return QualityDistribution(
        premium=min(100.0, base.premium * m),
        fine=min(100.0, base.fine * (2 - m)),
        commercial=min(100.0, base.commercial * (2 - m)),
    )


def predict_seasonal_yield(
    conditions: QualityConditions,
    harvests: Sequence[HarvestRecord],
    season: Season | str,
    today: Optional[dt.date] = None,
) -> Optional[float]:
    """Mean historical raw quantity scaled by season and conditions.

    Returns:
        Projected yield, or ``None`` when there is no history to project from.
    """
    if not harvests:
        return None
    base_yield = sum(h.raw_quantity for h in harvests) / len(harvests)
    seasonal = SEASONAL_YIELD_FACTORS[Season.parse(season)]
    return base_yield * seasonal * quality_factors(conditions, today).multiplier


def predict_seasonal_yields(
    conditions: QualityConditions,
    harvests: Sequence[HarvestRecord],
    today: Optional[dt.date] = None,
) -> dict[Season, Optional[float]]:
    """``predict_seasonal_yield`` for every season."""
    return {
        season: predict_seasonal_yield(conditions, harvests, season, today)
        for season in Season
    }


def predict_quality_outlook(
    conditions: QualityConditions,
    harvests: Sequence[HarvestRecord],
    today: Optional[dt.date] = None,
) -> QualityOutlook:
    """Distribution, seasonal yield map and factors in one result."""
    return QualityOutlook(
        distribution=predict_quality_distribution(conditions, harvests, today),
        seasonal_yields=predict_seasonal_yields(conditions, harvests, today),
        factors=quality_factors(conditions, today),
    )
