"""
Date utilities for season-aware farm analytics.

Key concepts:
  - Calendar dates only: every observation, harvest and fertilisation event is
    reduced to a ``date``. Times of day carry no meaning for the core.
  - Lenient parsing: external records carry ISO-8601 strings (``YYYY-MM-DD`` or
    full timestamps with ``Z`` / offsets); ``parse_date`` accepts all of them.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Optional


def today() -> date:
    """Return today's UTC calendar date."""
    return utcnow().date()


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def parse_date(value: Any) -> Optional[date]:
    """Coerce ``value`` to a calendar date, or return ``None``.

    Accepted inputs:
      - ``date`` / ``datetime`` instances (datetimes are truncated to their date).
      - ISO-8601 strings: ``2024-09-15``, ``2024-09-15T08:30:00``,
        ``2024-09-15T08:30:00Z``, ``2024-09-15T08:30:00+08:00``.

    Anything else (numbers, empty strings, malformed dates) yields ``None``.

    Args:
        value: Candidate date value from an external record.

    Returns:
        The parsed ``date`` or ``None`` if ``value`` is not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def days_between(earlier: date, later: date) -> int:
    """Return the absolute number of calendar days between two dates."""
    return abs((later - earlier).days)


def is_real_number(value: Any) -> bool:
    """True for finite ``int``/``float`` values; ``bool`` and NaN are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
