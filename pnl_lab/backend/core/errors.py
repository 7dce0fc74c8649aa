"""Exceptions raised by the calculator core."""

from __future__ import annotations


class CalculatorError(Exception):
    """Base class for calculator failures."""


class CalculatorValidationError(CalculatorError, ValueError):
    """Request input is missing or malformed; nothing has been computed."""


class InvalidWindowError(CalculatorValidationError):
    """A rolling window token could not be parsed."""

    def __init__(self, token: str) -> None:
        super().__init__("Invalid window size")
        self.token = token


class InsufficientDataError(CalculatorValidationError):
    """The history holds fewer periods than the rolling window needs."""

    def __init__(self, required: int, available: int, interval_type: str) -> None:
        super().__init__(
            f"Not enough data. Need at least {required} {interval_type} periods, have {available}"
        )
        self.required = required
        self.available = available
        self.interval_type = interval_type


__all__ = [
    "CalculatorError",
    "CalculatorValidationError",
    "InvalidWindowError",
    "InsufficientDataError",
]
