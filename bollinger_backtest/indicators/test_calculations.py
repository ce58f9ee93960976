"""
Tests for the vectorized Bollinger Band calculations.
"""

import numpy as np
import pandas as pd
import pytest

from bollinger_backtest.indicators.bands import BollingerBands
from bollinger_backtest.indicators.calculations import (
    build_band_frame,
    calculate_bollinger_bands,
    calculate_rolling_std,
    calculate_sma,
)
from bollinger_backtest.indicators.exceptions import InvalidIndicatorConfigurationError


class TestCalculateSMA:
    """Tests for calculate_sma function."""

    def test_sma_basic(self):
        """Test basic SMA calculation."""
        series = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        result = calculate_sma(series, 3)
        assert pd.isna(result.iloc[0])
        assert pd.isna(result.iloc[1])
        assert result.iloc[2] == pytest.approx(2.0)
        assert result.iloc[4] == pytest.approx(4.0)

    def test_sma_insufficient_data(self):
        """Test SMA with insufficient data returns NaN."""
        result = calculate_sma(pd.Series([1.0, 2.0]), 5)
        assert result.isna().all()


class TestCalculateRollingStd:
    """Tests for calculate_rolling_std function."""

    def test_population_std(self):
        """Test rolling std uses population (ddof=0) normalization."""
        result = calculate_rolling_std(pd.Series([1.0, 3.0, 5.0]), 2)
        assert pd.isna(result.iloc[0])
        assert result.iloc[1] == pytest.approx(1.0)
        assert result.iloc[2] == pytest.approx(1.0)


class TestCalculateBollingerBands:
    """Tests for calculate_bollinger_bands function."""

    def test_band_ordering(self, sample_closes):
        """Test upper >= middle >= lower where defined."""
        middle, upper, lower = calculate_bollinger_bands(sample_closes, 20, 2.0)
        valid = middle.notna()
        assert (upper[valid] >= middle[valid]).all()
        assert (middle[valid] >= lower[valid]).all()

    def test_symmetric_bands(self, sample_closes):
        """Test bands are symmetric around the middle."""
        middle, upper, lower = calculate_bollinger_bands(sample_closes, 10, 1.5)
        valid = middle.notna()
        np.testing.assert_allclose(
            (upper - middle)[valid].values, (middle - lower)[valid].values
        )

    def test_invalid_config(self, sample_closes):
        """Test invalid configuration is rejected."""
        with pytest.raises(InvalidIndicatorConfigurationError):
            calculate_bollinger_bands(sample_closes, 0, 2.0)
        with pytest.raises(InvalidIndicatorConfigurationError):
            calculate_bollinger_bands(sample_closes, 20, 0.0)

    def test_agrees_with_streaming_calculator(self, sample_closes):
        """Test vectorized bands match the streaming calculator after warm-up."""
        period, multiplier = 14, 2.0
        middle, upper, lower = calculate_bollinger_bands(sample_closes, period, multiplier)

        bb = BollingerBands(period, multiplier)
        for i, close in enumerate(sample_closes):
            band = bb.next(close)
            if band is None:
                continue
            assert band.middle == pytest.approx(middle.iloc[i])
            assert band.upper == pytest.approx(upper.iloc[i])
            assert band.lower == pytest.approx(lower.iloc[i])


class TestBuildBandFrame:
    """Tests for build_band_frame function."""

    def test_columns(self):
        """Test output columns."""
        df = build_band_frame([1.0, 2.0, 3.0, 4.0], 2, 1.0)
        assert df.columns.tolist() == ["Close", "bb_middle", "bb_upper", "bb_lower"]
        assert len(df) == 4

    def test_warmup_masked(self):
        """Test the first `period` rows have no band values."""
        df = build_band_frame([1.0, 2.0, 3.0, 4.0, 5.0], 3, 1.0)
        assert df["bb_middle"].iloc[:3].isna().all()
        assert df["bb_middle"].iloc[3] == pytest.approx(3.0)

    def test_warmup_unmasked(self):
        """Test rolling values are kept when masking is disabled."""
        df = build_band_frame([1.0, 2.0, 3.0, 4.0, 5.0], 3, 1.0, mask_warmup=False)
        assert pd.isna(df["bb_middle"].iloc[1])
        assert df["bb_middle"].iloc[2] == pytest.approx(2.0)

    def test_series_shorter_than_period(self):
        """Test short input yields all-NaN bands."""
        df = build_band_frame([1.0, 2.0], 5, 2.0)
        assert df["bb_upper"].isna().all()
