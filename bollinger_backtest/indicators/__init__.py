"""
Bollinger Band Indicator Module.

Modules:
    - bands: Streaming calculator used by the backtest engine
    - calculations: Vectorized pandas calculations for analysis and export
    - exceptions: Indicator configuration errors
"""

from bollinger_backtest.indicators.bands import (
    BandValue,
    BollingerBands,
    validate_band_config,
)
from bollinger_backtest.indicators.calculations import (
    build_band_frame,
    calculate_bollinger_bands,
)
from bollinger_backtest.indicators.exceptions import (
    IndicatorError,
    InvalidIndicatorConfigurationError,
)

__all__ = [
    "BandValue",
    "BollingerBands",
    "validate_band_config",
    "build_band_frame",
    "calculate_bollinger_bands",
    "IndicatorError",
    "InvalidIndicatorConfigurationError",
]
