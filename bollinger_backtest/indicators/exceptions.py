"""
Custom exceptions for the indicators module.
"""

from typing import Any


class IndicatorError(Exception):
    """Base exception for all indicator-related errors."""

    pass


class InvalidIndicatorConfigurationError(IndicatorError):
    """Exception raised when an indicator is configured with invalid values."""

    def __init__(self, param_name: str, value: Any, reason: str = "") -> None:
        self.param_name = param_name
        self.value = value
        message = f"Invalid indicator configuration '{param_name}': {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
