"""
Vectorized Bollinger Band Calculations.

Pure functions over pandas Series for whole-series band analysis and
export. Results agree with the streaming BollingerBands calculator to
floating-point tolerance; population standard deviation (ddof=0) is
used throughout.
"""

from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

from bollinger_backtest.indicators.bands import validate_band_config


def calculate_sma(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate Simple Moving Average.

    Args:
        series: Price series.
        period: Lookback period.

    Returns:
        SMA series with NaN for insufficient lookback.
    """
    return series.rolling(window=period, min_periods=period).mean()


def calculate_rolling_std(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate rolling population standard deviation.

    Args:
        series: Price series.
        period: Lookback period.

    Returns:
        Standard deviation series with NaN for insufficient lookback.
    """
    return series.rolling(window=period, min_periods=period).std(ddof=0)


def calculate_bollinger_bands(
    close: pd.Series, period: int = 20, multiplier: float = 2.0
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """
    Calculate Bollinger Bands.

    Args:
        close: Close price series.
        period: SMA period (default 20).
        multiplier: Standard deviation multiplier (default 2).

    Returns:
        Tuple of (middle_band, upper_band, lower_band).

    Raises:
        InvalidIndicatorConfigurationError: If period or multiplier is invalid.
    """
    validate_band_config(period, multiplier)

    middle = calculate_sma(close, period)
    rolling_std = calculate_rolling_std(close, period)

    upper = middle + (rolling_std * multiplier)
    lower = middle - (rolling_std * multiplier)

    return middle, upper, lower


def build_band_frame(
    closes: Union[pd.Series, Sequence[float]],
    period: int,
    multiplier: float,
    mask_warmup: bool = True,
) -> pd.DataFrame:
    """
    Build a DataFrame of closes and their Bollinger Bands.

    Args:
        closes: Close prices in chronological order.
        period: Window length.
        multiplier: Standard deviation multiplier.
        mask_warmup: If True, band values for the first `period` rows are NaN,
            matching the rows on which the backtest makes no decision.

    Returns:
        DataFrame with Close, bb_middle, bb_upper, bb_lower columns.
    """
    close = pd.Series(np.asarray(closes, dtype=float), name="Close")
    middle, upper, lower = calculate_bollinger_bands(close, period, multiplier)

    df = pd.DataFrame(
        {
            "Close": close,
            "bb_middle": middle,
            "bb_upper": upper,
            "bb_lower": lower,
        }
    )

    if mask_warmup:
        df.loc[: period - 1, ["bb_middle", "bb_upper", "bb_lower"]] = np.nan

    return df
