"""
Constants and enums for the backtest engine.
"""

from enum import Enum


class Side(str, Enum):
    """Direction of a position."""

    LONG = "LONG"
    SHORT = "SHORT"

    def __str__(self) -> str:
        return self.value


# Strategy parameter names, in the order they are reported
PARAM_NAMES = ["period", "multiplier", "sl", "tp", "usd_balance"]

# Candle CSV columns
CLOSE_COLUMN = "Close"
DATE_COLUMN = "Date"
OPTIONAL_CANDLE_COLUMNS = ["Open", "High", "Low", "Volume"]

DEFAULT_EXCHANGE = "unknown"
