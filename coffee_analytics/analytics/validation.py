"""
Validation and normalisation of externally supplied records.

Batch policy
------------
``validate_harvest_batch`` / ``validate_weather_batch`` raise only when the
batch itself is not a list or tuple. Individual malformed entries are dropped
and the drop count is logged; one bad row never sinks the whole batch.

Harvest rows are kept when:
  - ``coffee_raw_quantity`` is a finite number >= 0 (``bool`` rejected)
  - every grade field present is a finite number >= 0 (absent → 0)
  - ``harvest_date`` parses as a date

Weather rows are kept when:
  - ``temperature`` and ``humidity`` are finite numbers > 0
  - ``timestamp`` parses as a date
  - ``rainfall``, if present, is a finite number >= 0

Condition normalisation
-----------------------
``validate_conditions`` never drops a reading: each field that is missing,
non-numeric or outside its band is replaced by a default and a WARNING is
logged.

    field                    band          default
    temperature              15 – 35       25
    humidity                 30 – 100      70
    ph                       4 – 8         6.5
    rainfall                 0 – 5000      1500
    pest_disease_incidence   0 – 1         0
    fertilizer_application   0 – 1         0
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, NamedTuple, Optional

from pydantic import ValidationError as PydanticValidationError

from coffee_analytics.errors import ValidationError
from coffee_analytics.models.records import (
    EnvironmentalReading,
    HarvestRecord,
    QualityConditions,
    WeatherRecord,
)
from coffee_analytics.taxonomy.agronomy import MoistureLevel
from coffee_analytics.utils.time_utils import is_real_number, parse_date

logger = logging.getLogger(__name__)

GRADE_FIELDS = ("coffee_premium_grade", "coffee_fine_grade", "coffee_commercial_grade")


class ConditionField(NamedTuple):
    """Accepted band and fallback for one condition field."""

    name: str
    aliases: tuple[str, ...]
    low: float
    high: float
    default: float


CONDITION_FIELDS: tuple[ConditionField, ...] = (
    ConditionField("temperature", (), 15.0, 35.0, 25.0),
    ConditionField("humidity", (), 30.0, 100.0, 70.0),
    ConditionField("ph", ("pH", "soil_ph"), 4.0, 8.0, 6.5),
    ConditionField("rainfall", (), 0.0, 5000.0, 1500.0),
    ConditionField("pest_disease_incidence", ("pestDiseaseIncidence",), 0.0, 1.0, 0.0),
    ConditionField("fertilizer_application", ("fertilizerApplication",), 0.0, 1.0, 0.0),
)


def validate_harvest_batch(records: Any) -> list[HarvestRecord]:
    """Keep the well-formed harvest rows of ``records``.

    Raises:
        ValidationError: If ``records`` is not a list or tuple.
    """
    _require_sequence(records, "Harvest data")
    valid = [h for h in (_parse_harvest(r) for r in records) if h is not None]
    _log_dropped("harvest", len(records), len(valid))
    return valid


def validate_weather_batch(records: Any) -> list[WeatherRecord]:
    """Keep the well-formed weather rows of ``records``.

    Raises:
        ValidationError: If ``records`` is not a list or tuple.
    """
    _require_sequence(records, "Weather data")
    valid = [w for w in (_parse_weather(r) for r in records) if w is not None]
    _log_dropped("weather", len(records), len(valid))
    return valid


def validate_conditions(raw: Any) -> tuple[EnvironmentalReading, int]:
    """Normalise a raw conditions mapping.

    Returns:
        ``(reading, supplied)`` where ``supplied`` counts the fields that were
        present and valid (the rest fell back to defaults).

    Raises:
        ValidationError: If ``raw`` is not a mapping.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Conditions must be an object", field="conditions", value=raw)

    values: dict[str, float] = {}
    supplied = 0
    for spec in CONDITION_FIELDS:
        value = _first_present(raw, (spec.name, *spec.aliases))
        if not is_real_number(value):
            logger.warning("Invalid %s: %r, using default: %s", spec.name, value, spec.default)
            values[spec.name] = spec.default
        elif not spec.low <= value <= spec.high:
            logger.warning(
                "%s out of range [%g-%g]: %s, using default: %s",
                spec.name, spec.low, spec.high, value, spec.default,
            )
            values[spec.name] = spec.default
        else:
            values[spec.name] = float(value)
            supplied += 1

    return EnvironmentalReading(**values), supplied


def validate_status_record(record: Any) -> QualityConditions:
    """Build ``QualityConditions`` from an environmental/status record.

    Reads ``pH`` or ``soil_ph``, ``moisture_level`` and ``last_fertilized``.

    Raises:
        ValidationError: If the record is not a mapping or a field is invalid.
    """
    if not isinstance(record, Mapping):
        raise ValidationError("Status record must be an object", field="status", value=record)

    ph = _first_present(record, ("pH", "ph", "soil_ph"))
    if not is_real_number(ph) or ph <= 0:
        raise ValidationError(f"Soil pH must be a positive number, got {ph!r}", field="pH", value=ph)

    moisture = _first_present(record, ("moisture_level", "moisture"))
    try:
        level = MoistureLevel(moisture)
    except ValueError:
        raise ValidationError(
            f"Unknown moisture level {moisture!r}. "
            f"Must be one of {[m.value for m in MoistureLevel]}.",
            field="moisture_level", value=moisture,
        ) from None

    fertilized_raw = _first_present(record, ("last_fertilized", "lastFertilized"))
    fertilized = parse_date(fertilized_raw)
    if fertilized is None:
        raise ValidationError(
            f"last_fertilized is not a valid date: {fertilized_raw!r}",
            field="last_fertilized", value=fertilized_raw,
        )

    return QualityConditions(ph=float(ph), moisture=level, last_fertilized=fertilized)


# ── Row parsers ───────────────────────────────────────────────────────────────

def _parse_harvest(row: Any) -> Optional[HarvestRecord]:
    if not isinstance(row, Mapping):
        return None
    raw = row.get("coffee_raw_quantity")
    if not is_real_number(raw) or raw < 0:
        return None
    grades: dict[str, float] = {}
    for name in GRADE_FIELDS:
        value = row.get(name, 0.0)
        if value is None:
            value = 0.0
        if not is_real_number(value) or value < 0:
            return None
        grades[name] = float(value)
    harvest_date = parse_date(row.get("harvest_date"))
    if harvest_date is None:
        return None
    try:
        return HarvestRecord(coffee_raw_quantity=float(raw), harvest_date=harvest_date, **grades)
    except PydanticValidationError as exc:
        logger.debug("Dropping harvest row: %s", exc)
        return None


def _parse_weather(row: Any) -> Optional[WeatherRecord]:
    if not isinstance(row, Mapping):
        return None
    temperature, humidity = row.get("temperature"), row.get("humidity")
    if not (is_real_number(temperature) and temperature > 0):
        return None
    if not (is_real_number(humidity) and humidity > 0):
        return None
    timestamp = parse_date(row.get("timestamp"))
    if timestamp is None:
        return None
    rainfall = row.get("rainfall")
    if rainfall is not None and not (is_real_number(rainfall) and rainfall >= 0):
        return None
    try:
        return WeatherRecord(
            temperature=float(temperature),
            humidity=float(humidity),
            timestamp=timestamp,
            rainfall=None if rainfall is None else float(rainfall),
        )
    except PydanticValidationError as exc:
        logger.debug("Dropping weather row: %s", exc)
        return None


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require_sequence(records: Any, label: str) -> None:
    if not isinstance(records, (list, tuple)):
        raise ValidationError(f"{label} must be an array", value=type(records).__name__)


def _first_present(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def _log_dropped(kind: str, total: int, kept: int) -> None:
    if kept < total:
        logger.info("Dropped %d of %d malformed %s records", total - kept, total, kind)
