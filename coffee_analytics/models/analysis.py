"""
Analysis output models.

Every structure the core returns to the presentation layer is defined here.
All models are frozen — a report is built once per call and never mutated.

Degraded results
----------------
Boundary entry points never raise. Their result models carry two extra
fields, ``degraded`` and ``error``: a healthy result has ``degraded=False``
and ``error=None``; a fallback result has ``degraded=True`` and the failure
message in ``error``. The validator on each such model enforces that the two
fields agree, so a caller can branch on ``degraded`` without string checks.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from coffee_analytics.taxonomy.agronomy import (
    EnvironmentalFactor,
    FactorStatus,
    RecommendationType,
    Season,
    Severity,
    Trend,
    YieldStatus,
)


class _DegradableResult(BaseModel):
    """Mixin for results that may be a documented fallback."""

    model_config = ConfigDict(frozen=True)

    degraded: bool = False
    error: Optional[str] = None

    @model_validator(mode="after")
    def validate_degraded_flag(self):
        if self.degraded and not self.error:
            raise ValueError("A degraded result must carry an error message.")
        if not self.degraded and self.error is not None:
            raise ValueError("error is only allowed on degraded results.")
        return self


# ── Series data ───────────────────────────────────────────────────────────────


class Observation(BaseModel):
    """A single (value, date) point recorded by a ``SeriesStore``."""

    model_config = ConfigDict(frozen=True)

    value: float
    timestamp: dt.date

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Observation value must be non-negative, got {v}.")
        return v


class SeasonStats(BaseModel):
    """Historical summary of the observations falling in one season."""

    model_config = ConfigDict(frozen=True)

    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0


# ── Seasons ───────────────────────────────────────────────────────────────────


class ValueRange(BaseModel):
    """Closed numeric band ``[min, max]``."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def validate_order(self) -> "ValueRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must be <= max ({self.max}).")
        return self


class SeasonalPattern(BaseModel):
    """Forecast weight and description of one season."""

    model_config = ConfigDict(frozen=True)

    weight: float
    description: str

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Seasonal weight must be > 0, got {v}.")
        return v


class SeasonalYieldTarget(BaseModel):
    """Fixed yield target triple for one season."""

    model_config = ConfigDict(frozen=True)

    season: Season
    min: float
    target: float
    max: float
    description: str

    @model_validator(mode="after")
    def validate_triple(self) -> "SeasonalYieldTarget":
        if not self.min <= self.target <= self.max:
            raise ValueError(
                f"Yield target must satisfy min <= target <= max, got "
                f"{self.min} / {self.target} / {self.max}."
            )
        return self


# ── Forecasts ─────────────────────────────────────────────────────────────────


class ForecastEntry(BaseModel):
    """One day of the season-aware growth forecast.

    Attributes:
        day: 1-based offset from the forecast start.
        date: Calendar date of this entry.
        season: Season the date falls in.
        predicted_value: Season-weighted estimate, or ``None`` when the series
            holds no data (no prediction possible).
        optimal_range: The season's target band.
    """

    model_config = ConfigDict(frozen=True)

    day: int
    date: dt.date
    season: Season
    predicted_value: Optional[float]
    optimal_range: ValueRange

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"day must be >= 1, got {v}.")
        return v


class SeasonalYieldForecast(BaseModel):
    """Projected yield for one season against its target."""

    model_config = ConfigDict(frozen=True)

    season: Season
    predicted_yield: float
    target: float
    confidence: float
    variance: ValueRange
    historical: SeasonStats
    status: YieldStatus


# ── Recommendations ───────────────────────────────────────────────────────────


class Recommendation(BaseModel):
    """A severity-tagged, human-readable action item."""

    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    severity: Severity
    message: str

    @field_validator("message")
    @classmethod
    def validate_message_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("message must not be empty.")
        return v.strip()


def failure_message(exc: BaseException) -> str:
    """Non-empty description of a caught exception for a degraded result."""
    return str(exc).strip() or type(exc).__name__


def error_recommendation(message: str) -> Recommendation:
    """Build the single recommendation carried by a degraded result."""
    return Recommendation(
        type=RecommendationType.ERROR,
        severity=Severity.HIGH,
        message=f"Analysis error: {message}",
    )


# ── Reports ───────────────────────────────────────────────────────────────────


class ConditionAnalysis(_DegradableResult):
    """Result of evaluating one (temperature, humidity, pH) reading."""

    growth_trend: Trend
    predicted_next_value: Optional[float]
    recommendations: list[Recommendation]


class SeasonalAnalysisReport(_DegradableResult):
    """Season-level outlook: growth forecast, yield forecast and care advice."""

    current_season: Season
    growth_forecast: list[ForecastEntry]
    yield_forecast: dict[Season, SeasonalYieldForecast]
    seasonal_patterns: dict[Season, SeasonalPattern]
    recommendations: list[Recommendation]


class EnvironmentalFactorReport(BaseModel):
    """One environmental reading compared with its optimal band."""

    model_config = ConfigDict(frozen=True)

    value: float
    status: FactorStatus
    unit: str
    optimal: ValueRange


class CurrentAnalysis(BaseModel):
    """Headline numbers of a comprehensive report."""

    model_config = ConfigDict(frozen=True)

    risk_score: int
    yield_prediction: Optional[float]
    growth_trend: Trend

    @field_validator("risk_score")
    @classmethod
    def validate_risk_score(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"risk_score must be in [0, 100], got {v}.")
        return v


class GrowthOutlook(BaseModel):
    """Short-range growth forecast with an overall confidence percentage."""

    model_config = ConfigDict(frozen=True)

    growth: list[ForecastEntry]
    confidence: int


class ComprehensiveReport(_DegradableResult):
    """Top-level report returned by ``AnalyticsOrchestrator.comprehensive_analysis``."""

    current_analysis: CurrentAnalysis
    forecast: GrowthOutlook
    recommendations: list[Recommendation]
    environmental_status: dict[EnvironmentalFactor, EnvironmentalFactorReport]


# ── Quality ───────────────────────────────────────────────────────────────────


class QualityDistribution(BaseModel):
    """Projected percentage split across the three quality grades."""

    model_config = ConfigDict(frozen=True)

    premium: float = 0.0
    fine: float = 0.0
    commercial: float = 0.0

    @field_validator("premium", "fine", "commercial")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Grade share must be in [0, 100], got {v}.")
        return v


class QualityFactors(BaseModel):
    """The three condition factors behind a quality prediction."""

    model_config = ConfigDict(frozen=True)

    ph: float
    moisture: float
    fertilizer: float

    @property
    def multiplier(self) -> float:
        """Mean of the three factors."""
        return (self.ph + self.moisture + self.fertilizer) / 3


class QualityOutlook(BaseModel):
    """Quality distribution plus the per-season yield map for one plot."""

    model_config = ConfigDict(frozen=True)

    distribution: QualityDistribution
    seasonal_yields: dict[Season, Optional[float]]
    factors: QualityFactors
