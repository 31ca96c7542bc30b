"""
Tests for coffee_analytics/analytics/validation.py.

What we test
------------
validate_harvest_batch() / validate_weather_batch():
  - Non-list input raises ValidationError; empty list is fine.
  - Malformed rows are dropped, valid rows kept in order.
  - Drop count is logged.

validate_conditions():
  - Non-mapping raises ValidationError.
  - Missing, non-numeric and out-of-band fields fall back to defaults with
    a WARNING; valid fields pass through.
  - camelCase keys are accepted.
  - Returns the count of fields supplied valid.

validate_status_record():
  - Reads pH / soil_ph, moisture_level, last_fertilized.
  - Invalid records raise ValidationError naming the field.
"""

from __future__ import annotations

import logging
from datetime import date

import pytest

from coffee_analytics.analytics.validation import (
    validate_conditions,
    validate_harvest_batch,
    validate_status_record,
    validate_weather_batch,
)
from coffee_analytics.errors import ValidationError
from coffee_analytics.models.records import EnvironmentalReading
from coffee_analytics.taxonomy.agronomy import MoistureLevel


class TestHarvestBatch:
    @pytest.mark.parametrize("bad", [None, {"coffee_raw_quantity": 1}, "rows", 3])
    def test_non_list_raises(self, bad):
        with pytest.raises(ValidationError, match="must be an array"):
            validate_harvest_batch(bad)

    def test_empty(self):
        assert validate_harvest_batch([]) == []

    def test_valid_rows(self, harvest_rows):
        records = validate_harvest_batch(harvest_rows)
        assert len(records) == 5
        assert records[0].raw_quantity == 500
        assert records[0].premium_grade == 100
        assert records[2].harvest_date == date(2024, 6, 15)

    def test_tuple_accepted(self, harvest_rows):
        assert len(validate_harvest_batch(tuple(harvest_rows))) == 5

    @pytest.mark.parametrize("row", [
        {"coffee_raw_quantity": -1, "harvest_date": "2024-01-01"},
        {"coffee_raw_quantity": "12", "harvest_date": "2024-01-01"},
        {"coffee_raw_quantity": True, "harvest_date": "2024-01-01"},
        {"coffee_raw_quantity": float("nan"), "harvest_date": "2024-01-01"},
        {"coffee_raw_quantity": 10, "harvest_date": "yesterday"},
        {"coffee_raw_quantity": 10},
        {"coffee_raw_quantity": 10, "coffee_fine_grade": -2, "harvest_date": "2024-01-01"},
        {"coffee_raw_quantity": 10, "coffee_premium_grade": "lots", "harvest_date": "2024-01-01"},
        "not a row",
        None,
    ])
    def test_malformed_row_dropped(self, row):
        good = {"coffee_raw_quantity": 5, "harvest_date": "2024-01-02"}
        records = validate_harvest_batch([row, good])
        assert [r.raw_quantity for r in records] == [5]

    def test_zero_quantity_and_missing_grades(self):
        records = validate_harvest_batch([{"coffee_raw_quantity": 0, "harvest_date": "2024-01-01"}])
        assert records[0].raw_quantity == 0
        assert records[0].fine_grade == 0

    def test_null_grade_treated_as_zero(self):
        records = validate_harvest_batch([
            {"coffee_raw_quantity": 3, "coffee_fine_grade": None, "harvest_date": "2024-01-01"},
        ])
        assert records[0].fine_grade == 0

    def test_drop_count_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="coffee_analytics.analytics.validation"):
            validate_harvest_batch([{"coffee_raw_quantity": -1}, {"coffee_raw_quantity": 1, "harvest_date": "2024-01-01"}])
        assert "Dropped 1 of 2 malformed harvest records" in caplog.text


class TestWeatherBatch:
    def test_non_list_raises(self):
        with pytest.raises(ValidationError):
            validate_weather_batch({"temperature": 20})

    def test_valid_rows(self, weather_rows):
        records = validate_weather_batch(weather_rows)
        assert len(records) == 3
        assert records[0].rainfall == 210
        assert records[1].rainfall is None
        assert records[1].timestamp == date(2024, 11, 15)

    @pytest.mark.parametrize("row", [
        {"temperature": 0, "humidity": 70, "timestamp": "2024-01-01"},
        {"temperature": 20, "humidity": -5, "timestamp": "2024-01-01"},
        {"temperature": "20", "humidity": 70, "timestamp": "2024-01-01"},
        {"temperature": 20, "humidity": 70, "timestamp": "soon"},
        {"temperature": 20, "humidity": 70, "timestamp": "2024-01-01", "rainfall": -1},
        {"temperature": 20, "humidity": 70},
    ])
    def test_malformed_row_dropped(self, row):
        assert validate_weather_batch([row]) == []


class TestValidateConditions:
    def test_non_mapping_raises(self):
        with pytest.raises(ValidationError, match="Conditions must be an object"):
            validate_conditions([25, 70])

    def test_valid_conditions_pass_through(self, optimal_conditions):
        reading, supplied = validate_conditions({**optimal_conditions, "temperature": 31})
        assert reading.temperature == 31
        assert reading.ph == 6.5
        assert supplied == 6

    def test_empty_mapping_gives_defaults(self):
        reading, supplied = validate_conditions({})
        assert reading == EnvironmentalReading()
        assert supplied == 0

    @pytest.mark.parametrize("field,value,default", [
        ("temperature", 40, 25.0),
        ("temperature", "warm", 25.0),
        ("humidity", 20, 70.0),
        ("pH", 9, 6.5),
        ("rainfall", 6000, 1500.0),
        ("pest_disease_incidence", 1.5, 0.0),
        ("fertilizer_application", -0.1, 0.0),
    ])
    def test_invalid_field_falls_back(self, optimal_conditions, caplog, field, value, default):
        attr = "ph" if field == "pH" else field
        with caplog.at_level(logging.WARNING, logger="coffee_analytics.analytics.validation"):
            reading, supplied = validate_conditions({**optimal_conditions, field: value})
        assert getattr(reading, attr) == default
        assert supplied == 5
        assert "using default" in caplog.text

    def test_camel_case_keys(self):
        reading, supplied = validate_conditions({
            "pH": 5.8, "pestDiseaseIncidence": 0.3, "fertilizerApplication": 0.6,
        })
        assert reading.ph == 5.8
        assert reading.pest_disease_incidence == 0.3
        assert reading.fertilizer_application == 0.6
        assert supplied == 3

    def test_snake_case_ph(self):
        reading, _ = validate_conditions({"ph": 7.2})
        assert reading.ph == 7.2

    def test_band_edges_inclusive(self):
        reading, supplied = validate_conditions({"temperature": 15, "humidity": 100, "rainfall": 0})
        assert (reading.temperature, reading.humidity, reading.rainfall) == (15, 100, 0)
        assert supplied == 3


class TestValidateStatusRecord:
    def test_valid_record(self):
        conditions = validate_status_record({
            "pH": 6.3, "moisture_level": "moist", "last_fertilized": "2024-05-01",
        })
        assert conditions.ph == 6.3
        assert conditions.moisture is MoistureLevel.MOIST
        assert conditions.last_fertilized == date(2024, 5, 1)

    def test_soil_ph_alias(self):
        conditions = validate_status_record({
            "soil_ph": 5.9, "moisture_level": "dry", "last_fertilized": "2024-05-01T08:00:00Z",
        })
        assert conditions.ph == 5.9

    @pytest.mark.parametrize("record,field", [
        ({"moisture_level": "dry", "last_fertilized": "2024-05-01"}, "pH"),
        ({"pH": 6.0, "moisture_level": "damp", "last_fertilized": "2024-05-01"}, "moisture_level"),
        ({"pH": 6.0, "moisture_level": "dry", "last_fertilized": "never"}, "last_fertilized"),
    ])
    def test_invalid_record(self, record, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_status_record(record)
        assert exc_info.value.field == field

    def test_non_mapping(self):
        with pytest.raises(ValidationError):
            validate_status_record(None)
