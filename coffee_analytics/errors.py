"""
Error taxonomy for the analytics core.

``ValidationError`` is the only exception raised by inner components
(series store appends, environmental parameter checks, batch type checks).
Boundary entry points catch it, log it, and return a degraded result instead.

It subclasses ``ValueError`` so callers that already guard numeric input
with ``except ValueError`` keep working.
"""

from __future__ import annotations

from typing import Any, Optional


class ValidationError(ValueError):
    """Raised when input to a validating entry point is malformed or out of range.

    Attributes:
        field: Name of the offending field, when known.
        value: The rejected value, when known.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
