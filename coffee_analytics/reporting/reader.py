"""
Input reader: loads the JSON batches and records passed to the CLI.

All loaders return ``None`` rather than raising when the file is missing or
unparseable, so CLI commands can print one friendly error line and exit.
Shape checks beyond "is it the right JSON container" are left to
``analytics.validation``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _load_json(path: Path) -> Any:
    if not path.exists():
        logger.debug("Input file not found: %s", path)
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to load input file %s: %s", path, exc)
        return None


def load_records(path: Path) -> list[Any] | None:
    """Load a JSON array of records (harvest or weather rows).

    Returns:
        The parsed list, or None if the file is missing, unparseable or does
        not hold an array.
    """
    data = _load_json(path)
    if data is None:
        return None
    if not isinstance(data, list):
        logger.warning("Expected a JSON array in %s, got %s", path, type(data).__name__)
        return None
    return data


def load_record(path: Path) -> dict[str, Any] | None:
    """Load a single JSON object (current conditions or plot status).

    Returns:
        The parsed dict, or None if the file is missing, unparseable or does
        not hold an object.
    """
    data = _load_json(path)
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("Expected a JSON object in %s, got %s", path, type(data).__name__)
        return None
    return data
