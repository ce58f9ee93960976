"""
Streaming Bollinger Bands calculator.

Closes are fed one at a time. The first `period` closes only prime the
rolling window; every close after that yields a BandValue computed over
the `period` most recent closes (the new close included).
"""

import math
from collections import deque
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Deque, Optional

from bollinger_backtest.indicators.exceptions import InvalidIndicatorConfigurationError


@dataclass(frozen=True)
class BandValue:
    """Bollinger Band values for a single step."""

    middle: float
    upper: float
    lower: float


def validate_band_config(period: Any, multiplier: Any) -> None:
    """
    Validate Bollinger Band window length and multiplier.

    Args:
        period: Window length, must be a positive integer.
        multiplier: Standard deviation multiplier, must be a finite positive number.

    Raises:
        InvalidIndicatorConfigurationError: If either value is invalid.
    """
    if isinstance(period, bool) or not isinstance(period, Integral):
        raise InvalidIndicatorConfigurationError(
            "period", period, "must be an integer"
        )
    if period <= 0:
        raise InvalidIndicatorConfigurationError("period", period, "must be positive")

    if isinstance(multiplier, bool) or not isinstance(multiplier, Real):
        raise InvalidIndicatorConfigurationError(
            "multiplier", multiplier, "must be a number"
        )
    if not math.isfinite(multiplier) or multiplier <= 0:
        raise InvalidIndicatorConfigurationError(
            "multiplier", multiplier, "must be a finite positive number"
        )


class BollingerBands:
    """
    Rolling Bollinger Bands over a bounded window of closes.

    Mean and population standard deviation are recomputed exactly from
    the window on every step.

    Attributes:
        period: Window length.
        multiplier: Standard deviation multiplier.
    """

    def __init__(self, period: int, multiplier: float) -> None:
        validate_band_config(period, multiplier)
        self.period = int(period)
        self.multiplier = float(multiplier)
        self._window: Deque[float] = deque(maxlen=self.period)
        self._count = 0

    def __repr__(self) -> str:
        return f"BollingerBands(period={self.period}, multiplier={self.multiplier})"

    @property
    def count(self) -> int:
        """Number of closes consumed so far."""
        return self._count

    @property
    def is_ready(self) -> bool:
        """True once the warm-up closes have been consumed."""
        return self._count >= self.period

    def reset(self) -> None:
        """Clear the window and the warm-up counter."""
        self._window.clear()
        self._count = 0

    def next(self, close: float) -> Optional[BandValue]:
        """
        Admit a close into the window and return the bands for this step.

        Args:
            close: Closing price.

        Returns:
            None while warming up, otherwise the BandValue for the window
            ending at this close.
        """
        warming_up = not self.is_ready
        self._window.append(float(close))
        self._count += 1

        if warming_up:
            return None

        middle = sum(self._window) / self.period
        variance = sum((x - middle) ** 2 for x in self._window) / self.period
        offset = self.multiplier * math.sqrt(variance)

        return BandValue(middle=middle, upper=middle + offset, lower=middle - offset)
