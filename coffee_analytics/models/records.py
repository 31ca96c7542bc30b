"""
Input record models — what the external farm data store hands to the core.

Field names on the wire follow the store's column names
(``coffee_raw_quantity``, ``harvest_date``, ``soil_ph`` …); the models expose
short snake_case attribute names and accept either form
(``populate_by_name=True``).

All models are frozen: a batch handed to one analysis call is a read-only
snapshot for the duration of that call.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coffee_analytics.taxonomy.agronomy import MoistureLevel


class WeatherRecord(BaseModel):
    """One weather observation from the external store.

    Attributes:
        temperature: Air temperature in °C (> 0).
        humidity: Relative humidity in % (> 0).
        timestamp: Calendar date of the observation.
        rainfall: Rainfall in mm, or ``None`` if not reported.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float
    humidity: float
    timestamp: dt.date
    rainfall: Optional[float] = None

    @field_validator("temperature", "humidity")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Weather readings must be positive, got {v}.")
        return v


class HarvestRecord(BaseModel):
    """One harvest with its grade split.

    Grades are quantities in the same unit as ``raw_quantity``; they are not
    required to sum to it (culls and unsorted beans are common).

    Attributes:
        raw_quantity: Total harvested quantity (``coffee_raw_quantity``).
        premium_grade: Premium-grade quantity (``coffee_premium_grade``).
        fine_grade: Fine-grade quantity (``coffee_fine_grade``).
        commercial_grade: Commercial-grade quantity (``coffee_commercial_grade``).
        harvest_date: Calendar date of the harvest.
        weather: Same-day weather observation, when one was supplied.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raw_quantity: float = Field(alias="coffee_raw_quantity")
    premium_grade: float = Field(0.0, alias="coffee_premium_grade")
    fine_grade: float = Field(0.0, alias="coffee_fine_grade")
    commercial_grade: float = Field(0.0, alias="coffee_commercial_grade")
    harvest_date: dt.date
    weather: Optional[WeatherRecord] = None

    @field_validator("raw_quantity", "premium_grade", "fine_grade", "commercial_grade")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Harvest quantities must be non-negative, got {v}.")
        return v


class EnvironmentalReading(BaseModel):
    """Current growing conditions for one analysis call.

    Attributes:
        temperature: °C.
        humidity: Relative humidity, %.
        ph: Soil pH.
        rainfall: Seasonal rainfall, mm.
        pest_disease_incidence: Share of plants affected, 0–1.
        fertilizer_application: Fertiliser application level, 0–1.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = 25.0
    humidity: float = 70.0
    ph: float = 6.5
    rainfall: float = 1500.0
    pest_disease_incidence: float = 0.0
    fertilizer_application: float = 0.0

    @field_validator("pest_disease_incidence", "fertilizer_application")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Level must be in [0.0, 1.0], got {v}.")
        return v


class QualityConditions(BaseModel):
    """Plot status used by the quality-grade predictor.

    Attributes:
        ph: Soil pH.
        moisture: Discrete soil moisture level.
        last_fertilized: Date of the most recent fertiliser application.
    """

    model_config = ConfigDict(frozen=True)

    ph: float
    moisture: MoistureLevel
    last_fertilized: dt.date
