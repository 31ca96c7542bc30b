"""
Analytics orchestrator: the single entry point for a farm analysis session.

Owns one ``SeriesStore`` (raw harvest quantity by harvest date), the
``DecisionSupportEngine`` built on it and the validated harvest history.

Lifecycle
---------
1. ``initialize(harvests, weather)`` — validate both batches, rebuild the
   store from scratch, join each harvest to same-day weather.
2. ``comprehensive_analysis(conditions)`` — normalise the reading, then
   combine risk score, trend, yield prediction, 7-day growth forecast,
   confidence, per-factor status and the prioritised recommendations.

``comprehensive_analysis`` is a boundary and never raises; every other
method raises ``ValidationError`` on bad input.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Mapping, NamedTuple, Optional, Sequence

from coffee_analytics.analytics.impacts import apply_impacts
from coffee_analytics.analytics.validation import (
    CONDITION_FIELDS,
    validate_conditions,
    validate_harvest_batch,
    validate_status_record,
    validate_weather_batch,
)
from coffee_analytics.config import AppConfig
from coffee_analytics.dss.engine import NEUTRAL_RISK_SCORE, OPTIMAL_TEMPERATURE, DecisionSupportEngine
from coffee_analytics.errors import ValidationError
from coffee_analytics.models.analysis import (
    ComprehensiveReport,
    CurrentAnalysis,
    EnvironmentalFactorReport,
    GrowthOutlook,
    QualityOutlook,
    Recommendation,
    SeasonalAnalysisReport,
    ValueRange,
    error_recommendation,
    failure_message,
)
from coffee_analytics.models.records import EnvironmentalReading, HarvestRecord, WeatherRecord
from coffee_analytics.quality.predictor import predict_quality_outlook
from coffee_analytics.recommendations.ranker import prioritize_recommendations
from coffee_analytics.taxonomy.agronomy import (
    EnvironmentalFactor,
    FactorStatus,
    RecommendationType,
    Severity,
    Trend,
    complete_table,
)
from coffee_analytics.timeseries.seasons import SeasonalClassifier
from coffee_analytics.timeseries.series_store import SeriesStore
from coffee_analytics.utils.time_utils import today as utc_today

logger = logging.getLogger(__name__)

YIELD_DROP_THRESHOLD = 0.9


class FactorRange(NamedTuple):
    """Optimal band and display unit of one reported environmental factor."""

    low: float
    high: float
    unit: str
    default: float


ENVIRONMENTAL_RANGES: Mapping[EnvironmentalFactor, FactorRange] = complete_table(EnvironmentalFactor, {
    EnvironmentalFactor.TEMPERATURE: FactorRange(20.0, 28.0, "°C", 25.0),
    EnvironmentalFactor.HUMIDITY:    FactorRange(60.0, 80.0, "%", 70.0),
    EnvironmentalFactor.PH:          FactorRange(6.0, 7.0, "", 6.5),
    EnvironmentalFactor.RAINFALL:    FactorRange(1200.0, 1800.0, "mm", 1500.0),
})

# Factor → EnvironmentalReading attribute.
_READING_ATTRS: Mapping[EnvironmentalFactor, str] = complete_table(EnvironmentalFactor, {
    EnvironmentalFactor.TEMPERATURE: "temperature",
    EnvironmentalFactor.HUMIDITY:    "humidity",
    EnvironmentalFactor.PH:          "ph",
    EnvironmentalFactor.RAINFALL:    "rainfall",
})


def data_quality(history_size: int) -> float:
    """History depth score: 1.0 for 5+ harvests, 0.8 for 3+, else 0.6."""
    if history_size >= 5:
        return 1.0
    if history_size >= 3:
        return 0.8
    return 0.6


class AnalyticsOrchestrator:
    """Owns the store, engine and harvest history for one analysis session.

    Args:
        config: Application config (horizons, trend window, top-N). Loaded
            defaults are used when omitted.
        classifier: Season authority shared with the engine.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        classifier: Optional[SeasonalClassifier] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.classifier = classifier or SeasonalClassifier()
        self.history: list[HarvestRecord] = []
        self._reset()

    def _reset(self) -> None:
        self.store = SeriesStore()
        self.engine = DecisionSupportEngine(
            self.store, self.classifier, self.config.forecast.trend_window,
        )
        self.history = []

    # ── Initialisation ────────────────────────────────────────────────────────

    def initialize(
        self,
        harvest_batch: Sequence[Any],
        weather_batch: Sequence[Any] = (),
    ) -> int:
        """Rebuild all session state from external batches.

        Args:
            harvest_batch: Harvest rows (``coffee_raw_quantity``, grades,
                ``harvest_date``).
            weather_batch: Weather rows (``temperature``, ``humidity``,
                ``timestamp``, optional ``rainfall``).

        Returns:
            Number of harvests loaded.

        Raises:
            ValidationError: If either batch is not a list, or no harvest row
                survives validation.
        """
        harvests = validate_harvest_batch(harvest_batch)
        weather = validate_weather_batch(weather_batch)
        if not harvests:
            raise ValidationError("No valid harvest data available", field="harvest_data")

        self._reset()
        weather_by_day: dict[dt.date, WeatherRecord] = {}
        for record in weather:
            weather_by_day.setdefault(record.timestamp, record)

        for harvest in harvests:
            self.store.append(harvest.raw_quantity, harvest.harvest_date)
            self.history.append(
                harvest.model_copy(update={"weather": weather_by_day.get(harvest.harvest_date)})
            )
        self.history.sort(key=lambda h: h.harvest_date)

        logger.info(
            "Initialised | harvests=%d | weather=%d | joined=%d",
            len(harvests), len(weather), sum(1 for h in self.history if h.weather is not None),
        )
        return len(harvests)

    # ── Yield ─────────────────────────────────────────────────────────────────

    def predict_yield(self, reading: EnvironmentalReading) -> Optional[float]:
        """Next-harvest estimate scaled by the four impact factors.

        Returns ``None`` when the store holds no data.
        """
        base = self.store.next_value_estimate(self.config.forecast.trend_window)
        if base is None:
            return None
        return apply_impacts(base, reading)

    def last_harvest(self) -> Optional[HarvestRecord]:
        """Most recent harvest by date, or ``None`` before initialisation."""
        return self.history[-1] if self.history else None

    def yield_recommendations(
        self,
        prediction: Optional[float],
        reading: EnvironmentalReading,
    ) -> list[Recommendation]:
        recs: list[Recommendation] = []
        last = self.last_harvest()
        last_yield = last.raw_quantity if last is not None else 0.0

        if prediction is not None and prediction < last_yield * YIELD_DROP_THRESHOLD:
            recs.append(Recommendation(
                type=RecommendationType.YIELD,
                severity=Severity.HIGH,
                message="Predicted yield is significantly lower than last harvest. "
                        "Review all growing conditions.",
            ))

        low, high = OPTIMAL_TEMPERATURE
        if not low <= reading.temperature <= high:
            recs.append(Recommendation(
                type=RecommendationType.TEMPERATURE,
                severity=Severity.MEDIUM,
                message="Temperature is outside optimal range. "
                        f"Adjust greenhouse conditions to maintain {low:g}-{high:g}°C.",
            ))
        return recs

    # ── Reporting helpers ─────────────────────────────────────────────────────

    def calculate_confidence(self, raw_conditions: Any) -> int:
        """Confidence percentage from history depth and reading completeness.

        ``round((data_quality × 0.6 + completeness × 0.4) × 100)`` where
        completeness is the share of the six reading fields supplied valid.

        Raises:
            ValidationError: If ``raw_conditions`` is not a mapping.
        """
        _, supplied = validate_conditions(raw_conditions)
        return self._confidence(supplied)

    def _confidence(self, supplied: int) -> int:
        completeness = supplied / len(CONDITION_FIELDS)
        return round((data_quality(len(self.history)) * 0.6 + completeness * 0.4) * 100)

    @staticmethod
    def analyze_environmental_factor(
        factor: EnvironmentalFactor | str,
        value: float,
    ) -> EnvironmentalFactorReport:
        """Compare one value with the factor's optimal band.

        Raises:
            ValidationError: For an unknown factor name.
        """
        try:
            band = ENVIRONMENTAL_RANGES[EnvironmentalFactor(factor)]
        except ValueError:
            raise ValidationError(
                f"Unknown environmental factor {factor!r}. "
                f"Must be one of {[f.value for f in EnvironmentalFactor]}.",
                field="factor", value=factor,
            ) from None
        if value < band.low:
            status = FactorStatus.LOW
        elif value > band.high:
            status = FactorStatus.HIGH
        else:
            status = FactorStatus.OPTIMAL
        return EnvironmentalFactorReport(
            value=value, status=status, unit=band.unit,
            optimal=ValueRange(min=band.low, max=band.high),
        )

    # ── Boundary ──────────────────────────────────────────────────────────────

    def comprehensive_analysis(
        self,
        raw_conditions: Any,
        start: Optional[dt.date] = None,
    ) -> ComprehensiveReport:
        """Full report for one set of current conditions.

        Never raises: any failure yields a degraded report (risk 50, no yield
        prediction, trend ``stable``, empty forecast, confidence 0, a single
        error recommendation, every factor ``unknown`` at its default).
        """
        try:
            reading, supplied = validate_conditions(raw_conditions)
            insights = self.engine.analyze(reading.temperature, reading.humidity, reading.ph)
            risk = self.engine.risk_score(reading.temperature, reading.humidity, reading.ph)
            growth = self.engine.growth_forecast(
                self.config.forecast.comprehensive_horizon_days,
                start=start or utc_today(),
            )
            prediction = self.predict_yield(reading)
            recs = prioritize_recommendations(
                [*insights.recommendations, *self.yield_recommendations(prediction, reading)],
                limit=self.config.recommendations.top_n,
            )
            report = ComprehensiveReport(
                current_analysis=CurrentAnalysis(
                    risk_score=risk,
                    yield_prediction=prediction,
                    growth_trend=insights.growth_trend,
                ),
                forecast=GrowthOutlook(growth=growth, confidence=self._confidence(supplied)),
                recommendations=recs,
                environmental_status={
                    key: self.analyze_environmental_factor(key, getattr(reading, attr))
                    for key, attr in _READING_ATTRS.items()
                },
            )
        except Exception as exc:
            logger.exception("Comprehensive analysis failed")
            return _degraded_report(failure_message(exc))

        logger.info(
            "Comprehensive analysis | risk=%d | trend=%s | recommendations=%d",
            report.current_analysis.risk_score,
            report.current_analysis.growth_trend,
            len(report.recommendations),
        )
        return report

    # ── Pass-throughs ─────────────────────────────────────────────────────────

    def seasonal_analysis(self, as_of: Optional[dt.date] = None) -> SeasonalAnalysisReport:
        return self.engine.seasonal_analysis(as_of, self.config.forecast.horizon_days)

    def quality_outlook(self, status_record: Any, today: Optional[dt.date] = None) -> QualityOutlook:
        """Quality distribution and seasonal yields for one plot status record.

        Raises:
            ValidationError: If the status record is malformed.
        """
        conditions = validate_status_record(status_record)
        return predict_quality_outlook(conditions, self.history, today)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _degraded_report(message: str) -> ComprehensiveReport:
    return ComprehensiveReport(
        current_analysis=CurrentAnalysis(
            risk_score=NEUTRAL_RISK_SCORE, yield_prediction=None, growth_trend=Trend.STABLE,
        ),
        forecast=GrowthOutlook(growth=[], confidence=0),
        recommendations=[error_recommendation(message)],
        environmental_status={
            key: EnvironmentalFactorReport(
                value=band.default,
                status=FactorStatus.UNKNOWN,
                unit=band.unit,
                optimal=ValueRange(min=band.low, max=band.high),
            )
            for key, band in ENVIRONMENTAL_RANGES.items()
        },
        degraded=True,
        error=message,
    )
