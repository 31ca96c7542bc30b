"""
Decision support engine: risk scoring and rule-based recommendations.

Validation band (readings outside it are rejected, not scored)
--------------------------------------------------------------
    temperature   15 – 35 °C
    humidity      30 – 100 %
    pH            4 – 8
Values must also be finite, positive numbers (``bool`` is rejected).

Recommendation rules (independent; any combination may fire)
-------------------------------------------------------------
    temperature < 20            high    temperature too low
    temperature > 28            high    temperature too high
    humidity    < 60            medium  humidity too low
    humidity    > 80            high    humidity too high
    pH          < 6.0           medium  soil too acidic
    pH          > 7.0           medium  soil too alkaline
    growth trend decreasing     high    growth declining

Risk score (0–100)
------------------
    +25   temperature outside [20, 28]
    +25   humidity outside [60, 80]
    +25   pH outside [6.0, 7.0]
    +25   growth trend decreasing   (+12.5 stable, +0 increasing)
    score = min(100, round(total))  with Python's round (half to even).

Error policy
------------
``validate_environmental_params`` and ``evaluate_conditions`` are leaves and
raise ``ValidationError``. ``analyze``, ``risk_score``, ``growth_forecast``
and ``seasonal_analysis`` are boundaries: they log the failure and return a
documented neutral result instead of raising.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Mapping, Optional

from coffee_analytics.errors import ValidationError
from coffee_analytics.forecasting.yield_forecaster import DEFAULT_HORIZON_DAYS, YieldForecaster
from coffee_analytics.models.analysis import (
    ConditionAnalysis,
    ForecastEntry,
    Recommendation,
    SeasonalAnalysisReport,
    SeasonalYieldForecast,
    ValueRange,
    error_recommendation,
    failure_message,
)
from coffee_analytics.taxonomy.agronomy import (
    RecommendationType,
    Season,
    Severity,
    Trend,
    YieldStatus,
    complete_table,
)
from coffee_analytics.timeseries.seasons import SeasonalClassifier
from coffee_analytics.timeseries.series_store import DEFAULT_TREND_WINDOW, SeriesStore
from coffee_analytics.utils.time_utils import is_real_number, today

logger = logging.getLogger(__name__)

NEUTRAL_RISK_SCORE = 50

# (min, max) accepted by validation
VALID_TEMPERATURE = (15.0, 35.0)
VALID_HUMIDITY = (30.0, 100.0)
VALID_PH = (4.0, 8.0)

# (min, max) optimal bands used by rules and risk scoring
OPTIMAL_TEMPERATURE = (20.0, 28.0)
OPTIMAL_HUMIDITY = (60.0, 80.0)
OPTIMAL_PH = (6.0, 7.0)

_FACTOR_PENALTY = 25.0
_TREND_PENALTY: Mapping[Trend, float] = complete_table(Trend, {
    Trend.DECREASING: 25.0,
    Trend.STABLE:     12.5,
    Trend.INCREASING: 0.0,
})

# First tip is the primary recommendation; the rest are secondary tips.
SEASONAL_CARE_TIPS: Mapping[Season, tuple[str, str, str, str]] = complete_table(Season, {
    Season.WET: (
        "Monitor for fungal diseases due to high humidity",
        "Ensure proper drainage to prevent waterlogging",
        "Implement disease prevention measures",
        "Consider reducing irrigation frequency",
    ),
    Season.DRY: (
        "Increase irrigation frequency",
        "Apply mulch to retain soil moisture",
        "Provide shade protection during peak heat",
        "Monitor for drought stress symptoms",
    ),
    Season.TRANSITIONAL: (
        "Adjust irrigation based on rainfall patterns",
        "Prepare for upcoming seasonal changes",
        "Monitor temperature and humidity fluctuations",
        "Balance nutrient applications",
    ),
})


class DecisionSupportEngine:
    """Evaluates readings against optimal ranges and the store's growth trend.

    The engine remembers the recommendations of its last successful
    ``analyze`` call (the *active recommendations*); they discount the
    current season's yield projection.

    Args:
        store: Growth series; a new empty ``SeriesStore`` by default.
        classifier: Season authority.
        trend_window: Window size for trend detection and estimates.
    """

    def __init__(
        self,
        store: Optional[SeriesStore] = None,
        classifier: Optional[SeasonalClassifier] = None,
        trend_window: int = DEFAULT_TREND_WINDOW,
    ) -> None:
        self.store = store if store is not None else SeriesStore()
        self.classifier = classifier or SeasonalClassifier()
        self.trend_window = trend_window
        self.forecaster = YieldForecaster(self.store, self.classifier, trend_window)
        self._active: list[Recommendation] = []

    @property
    def active_recommendations(self) -> list[Recommendation]:
        """Recommendations from the last successful ``analyze`` call."""
        return list(self._active)

    def add_growth_data(self, value: Any, timestamp: Any) -> None:
        """Append one growth observation (raises ``ValidationError`` on bad input)."""
        self.store.append(value, timestamp)

    # ── Leaves (raise) ────────────────────────────────────────────────────────

    def validate_environmental_params(self, temperature: Any, humidity: Any, ph: Any) -> None:
        """Reject non-numeric, non-positive or out-of-band readings.

        Raises:
            ValidationError: Naming the first offending reading.
        """
        _check_reading("Temperature", temperature, VALID_TEMPERATURE, "°C")
        _check_reading("Humidity", humidity, VALID_HUMIDITY, "%")
        _check_reading("pH", ph, VALID_PH, "")

    def evaluate_conditions(self, temperature: Any, humidity: Any, ph: Any) -> list[Recommendation]:
        """Apply the rule table to a validated reading.

        Raises:
            ValidationError: If the reading fails validation.
        """
        self.validate_environmental_params(temperature, humidity, ph)
        recs: list[Recommendation] = []

        if temperature < OPTIMAL_TEMPERATURE[0]:
            recs.append(_rec(RecommendationType.TEMPERATURE, Severity.HIGH,
                             "Temperature is too low. Consider increasing greenhouse temperature."))
        elif temperature > OPTIMAL_TEMPERATURE[1]:
            recs.append(_rec(RecommendationType.TEMPERATURE, Severity.HIGH,
                             "Temperature is too high. Consider cooling measures."))

        if humidity < OPTIMAL_HUMIDITY[0]:
            recs.append(_rec(RecommendationType.HUMIDITY, Severity.MEDIUM,
                             "Humidity is low. Consider increasing misting frequency."))
        elif humidity > OPTIMAL_HUMIDITY[1]:
            recs.append(_rec(RecommendationType.HUMIDITY, Severity.HIGH,
                             "Humidity is too high. Improve ventilation."))

        if ph < OPTIMAL_PH[0]:
            recs.append(_rec(RecommendationType.SOIL, Severity.MEDIUM,
                             "Soil pH is too acidic. Consider pH adjustment."))
        elif ph > OPTIMAL_PH[1]:
            recs.append(_rec(RecommendationType.SOIL, Severity.MEDIUM,
                             "Soil pH is too alkaline. Consider pH adjustment."))

        if self.store.current_trend(self.trend_window) is Trend.DECREASING:
            recs.append(_rec(RecommendationType.GROWTH, Severity.HIGH,
                             "Growth rate is declining. Review recent environmental changes."))

        return recs

    # ── Boundaries (never raise) ──────────────────────────────────────────────

    def analyze(self, temperature: Any, humidity: Any, ph: Any) -> ConditionAnalysis:
        """Trend, next-value estimate and recommendations for one reading.

        On failure returns a degraded ``ConditionAnalysis`` (trend ``stable``,
        no estimate, one ``error`` recommendation); active recommendations
        are left untouched.
        """
        try:
            recs = self.evaluate_conditions(temperature, humidity, ph)
            analysis = ConditionAnalysis(
                growth_trend=self.store.current_trend(self.trend_window),
                predicted_next_value=self.store.next_value_estimate(self.trend_window),
                recommendations=recs,
            )
        except Exception as exc:
            message = failure_message(exc)
            logger.error("Condition analysis failed: %s", message)
            return ConditionAnalysis(
                growth_trend=Trend.STABLE,
                predicted_next_value=None,
                recommendations=[error_recommendation(message)],
                degraded=True,
                error=message,
            )

        self._active = list(recs)
        logger.debug(
            "Condition analysis | trend=%s | recommendations=%d",
            analysis.growth_trend, len(recs),
        )
        return analysis

    def risk_score(self, temperature: Any, humidity: Any, ph: Any) -> int:
        """Bounded 0–100 risk score; ``NEUTRAL_RISK_SCORE`` when scoring fails."""
        try:
            self.validate_environmental_params(temperature, humidity, ph)
            total = 0.0
            if not OPTIMAL_TEMPERATURE[0] <= temperature <= OPTIMAL_TEMPERATURE[1]:
                total += _FACTOR_PENALTY
            if not OPTIMAL_HUMIDITY[0] <= humidity <= OPTIMAL_HUMIDITY[1]:
                total += _FACTOR_PENALTY
            if not OPTIMAL_PH[0] <= ph <= OPTIMAL_PH[1]:
                total += _FACTOR_PENALTY
            total += _TREND_PENALTY[self.store.current_trend(self.trend_window)]
            return max(0, min(100, round(total)))
        except Exception as exc:
            logger.error("Risk scoring failed, returning neutral score: %s", exc)
            return NEUTRAL_RISK_SCORE

    def growth_forecast(
        self,
        days: int = DEFAULT_HORIZON_DAYS,
        start: Optional[dt.date] = None,
    ) -> list[ForecastEntry]:
        """Daily growth forecast; placeholder entries without values on failure."""
        start = start or today()
        try:
            return self.forecaster.forecast_growth(days, start=start)
        except Exception as exc:
            logger.error("Growth forecast failed, returning placeholders: %s", exc)
            season = self.classifier.classify(start)
            return [
                ForecastEntry(
                    day=i + 1,
                    date=start + dt.timedelta(days=i),
                    season=season,
                    predicted_value=None,
                    optimal_range=ValueRange(min=0.0, max=0.0),
                )
                for i in range(max(0, days))
            ]

    def seasonal_recommendations(
        self,
        yield_forecast: Mapping[Season, SeasonalYieldForecast],
        as_of: Optional[dt.date] = None,
    ) -> list[Recommendation]:
        """Active recommendations plus yield and seasonal care advice.

        Adds a high-severity ``yield`` recommendation when the current season
        is below target, then the season's primary tip (``seasonal``,
        medium) and its three secondary tips (``seasonal_tip``, low).
        """
        season = self.classifier.current_season(as_of)
        recs = list(self._active)

        forecast = yield_forecast.get(season)
        if forecast is not None and forecast.status is YieldStatus.BELOW_TARGET:
            recs.append(_rec(
                RecommendationType.YIELD, Severity.HIGH,
                f"Current yield trajectory is below target for "
                f"{self.classifier.display_name(season)}. "
                "Consider implementing intensive care measures.",
            ))

        primary, *secondary = SEASONAL_CARE_TIPS[season]
        recs.append(_rec(RecommendationType.SEASONAL, Severity.MEDIUM, primary))
        recs.extend(_rec(RecommendationType.SEASONAL_TIP, Severity.LOW, tip) for tip in secondary)
        return recs

    def seasonal_analysis(
        self,
        as_of: Optional[dt.date] = None,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> SeasonalAnalysisReport:
        """Season-level report; degraded (empty forecasts, error advice) on failure."""
        as_of = as_of or today()
        season = self.classifier.current_season(as_of)
        try:
            yield_forecast = self.forecaster.forecast_seasonal_yield(self._active, as_of=as_of)
            return SeasonalAnalysisReport(
                current_season=season,
                growth_forecast=self.growth_forecast(horizon_days, start=as_of),
                yield_forecast=yield_forecast,
                seasonal_patterns=dict(self.classifier.seasonal_patterns),
                recommendations=self.seasonal_recommendations(yield_forecast, as_of),
            )
        except Exception as exc:
            logger.exception("Seasonal analysis failed")
            message = failure_message(exc)
            return SeasonalAnalysisReport(
                current_season=season,
                growth_forecast=[],
                yield_forecast={},
                seasonal_patterns=dict(self.classifier.seasonal_patterns),
                recommendations=[error_recommendation(message)],
                degraded=True,
                error=message,
            )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _rec(rec_type: RecommendationType, severity: Severity, message: str) -> Recommendation:
    return Recommendation(type=rec_type, severity=severity, message=message)


def _check_reading(name: str, value: Any, band: tuple[float, float], unit: str) -> None:
    if not is_real_number(value) or value <= 0:
        raise ValidationError(f"{name} must be a positive number", field=name, value=value)
    low, high = band
    if not low <= value <= high:
        raise ValidationError(
            f"{name} must be between {low:g}{unit} and {high:g}{unit}",
            field=name, value=value,
        )
