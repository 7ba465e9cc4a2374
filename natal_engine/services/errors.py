"""Typed failures raised by the chart engine.

All of them are raised while validating input, before any computation runs,
so a failed calculation never leaves a partial chart behind.
"""

from __future__ import annotations

from typing import Any


class ChartError(ValueError):
    """Base class for chart input errors."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class InvalidDateError(ChartError):
    """Raised when a birth date is not a valid calendar date."""


class InvalidTimeError(ChartError):
    """Raised when a birth time is not a valid 24-hour clock value."""


class InvalidCoordinateError(ChartError):
    """Raised when latitude or longitude fall outside their ranges."""


class InvalidTimezoneError(ChartError):
    """Raised when an explicit IANA zone or UTC offset cannot be used."""


class UnsupportedBodyError(ChartError):
    """Raised for body identifiers outside the supported set."""


class UnsupportedHouseSystemError(ChartError):
    pass


class UnsupportedModelError(ChartError):
    pass
