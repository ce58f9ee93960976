"""
Custom exceptions for the backtest engine module.

This module defines all custom exceptions used throughout the backtest engine.
"""

from typing import Any, List


class BacktestError(Exception):
    """Base exception for all backtest-related errors."""

    pass


class ParameterError(BacktestError):
    """Exception raised when strategy parameters cannot be resolved."""

    pass


class MissingParameterError(ParameterError):
    """Exception raised when required parameters are absent."""

    def __init__(self, missing_params: List[str]) -> None:
        self.missing_params = missing_params
        message = f"Missing required parameters: {', '.join(missing_params)}"
        super().__init__(message)


class InvalidParameterError(ParameterError):
    """Exception raised when an invalid parameter is provided."""

    def __init__(self, param_name: str, value: Any, reason: str = "") -> None:
        self.param_name = param_name
        self.value = value
        message = f"Invalid parameter '{param_name}': {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DataError(BacktestError):
    """Exception raised when data loading or validation fails."""

    pass


class EmptyDataError(DataError):
    """Exception raised when the data has no candles."""

    def __init__(self, source: str = "data") -> None:
        self.source = source
        super().__init__(f"No candles found in {source}")


class InvalidCandleError(DataError):
    """Exception raised when a candle's close price is unusable."""

    def __init__(self, index: int, value: Any, reason: str = "") -> None:
        self.index = index
        self.value = value
        message = f"Invalid close price at candle {index}: {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class FileNotFoundError(BacktestError):
    """Exception raised when a required file is not found."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")
