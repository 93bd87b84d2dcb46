"""
Forecast errors.

Only InvalidRequestError ever reaches a caller of the engine. Numerical
failures are recovered by the engine's fallback chain, and insufficient
history is reported as an empty prediction list rather than raised.
"""

from typing import Any


class ForecastError(Exception):
    """Base class for forecast engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidRequestError(ForecastError, ValueError):
    """Raised when a forecast request is malformed (bad horizon, bad history)."""


class NumericalFailureError(ForecastError, ArithmeticError):
    """Raised when a model cannot be fitted (singular system, degenerate points)."""
