"""
Shared pytest fixtures for the coffee analytics test suite.

Provides:
  - ``harvest_rows``: five raw harvest records as the external store sends
    them (dict rows with ``coffee_*`` field names), spanning all seasons.
  - ``weather_rows``: weather records, two of which share a harvest date.
  - ``optimal_conditions``: a raw conditions mapping inside every optimal band.
  - ``store``: an empty ``SeriesStore``.
  - ``orchestrator``: an ``AnalyticsOrchestrator`` initialised with the rows.

Harvest series (sorted by date): 500, 520, 800, 850, 600.
  dry (Jan, Mar)     → 500, 520   avg 510
  wet (Jun, Aug)     → 800, 850   avg 825
  transitional (Nov) → 600
With the default window the store sees w = 2: recent [850, 600] (725) vs
prior [520, 800] (660) → increasing, next estimate 600 + 65 / 2 = 632.5.
"""

from __future__ import annotations

from datetime import date

import pytest

from coffee_analytics.analytics.orchestrator import AnalyticsOrchestrator
from coffee_analytics.timeseries.series_store import SeriesStore


@pytest.fixture
def harvest_rows() -> list[dict]:
    return [
        {
            "coffee_raw_quantity": 500, "coffee_premium_grade": 100,
            "coffee_fine_grade": 200, "coffee_commercial_grade": 150,
            "harvest_date": "2024-01-15",
        },
        {
            "coffee_raw_quantity": 520, "coffee_premium_grade": 110,
            "coffee_fine_grade": 210, "coffee_commercial_grade": 150,
            "harvest_date": "2024-03-15",
        },
        {
            "coffee_raw_quantity": 800, "coffee_premium_grade": 200,
            "coffee_fine_grade": 300, "coffee_commercial_grade": 250,
            "harvest_date": "2024-06-15T06:30:00Z",
        },
        {
            "coffee_raw_quantity": 850, "coffee_premium_grade": 220,
            "coffee_fine_grade": 320, "coffee_commercial_grade": 260,
            "harvest_date": "2024-08-15",
        },
        {
            "coffee_raw_quantity": 600, "coffee_premium_grade": 150,
            "coffee_fine_grade": 250, "coffee_commercial_grade": 180,
            "harvest_date": "2024-11-15",
        },
    ]


@pytest.fixture
def weather_rows() -> list[dict]:
    return [
        {"temperature": 24.5, "humidity": 72, "timestamp": "2024-06-15", "rainfall": 210},
        {"temperature": 21.0, "humidity": 65, "timestamp": "2024-11-15T12:00:00Z"},
        {"temperature": 26.0, "humidity": 80, "timestamp": "2024-02-01", "rainfall": 15},
    ]


@pytest.fixture
def optimal_conditions() -> dict:
    return {
        "temperature": 25.0,
        "humidity": 70.0,
        "pH": 6.5,
        "rainfall": 1500.0,
        "pest_disease_incidence": 0.0,
        "fertilizer_application": 0.0,
    }


@pytest.fixture
def store() -> SeriesStore:
    return SeriesStore()


@pytest.fixture
def orchestrator(harvest_rows, weather_rows) -> AnalyticsOrchestrator:
    orch = AnalyticsOrchestrator()
    orch.initialize(harvest_rows, weather_rows)
    return orch


@pytest.fixture
def july() -> date:
    """A wet-season reference date."""
    return date(2024, 7, 1)
