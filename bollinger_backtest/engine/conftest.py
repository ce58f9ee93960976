"""
Pytest fixtures for backtest engine tests.
"""

import tempfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from bollinger_backtest.engine.market_data import Candle, Ticker
from bollinger_backtest.engine.params import StrategyParams


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def params() -> StrategyParams:
    """Parameters used by the hand-computed scenarios (period 3, 1 std)."""
    return StrategyParams(period=3, multiplier=1.0, sl=0.1, tp=0.2, usd_balance=1000.0)


@pytest.fixture
def params_dict() -> dict:
    """Raw parameter mapping as received at the boundary."""
    return {"period": 3, "multiplier": 1.0, "sl": 0.1, "tp": 0.2, "usd_balance": 1000.0}


@pytest.fixture
def reversal_closes() -> list:
    """
    Closes that open a SHORT, stop it out, then open a LONG flushed at the end.

    close 11 -> window [10, 10, 11], upper ~10.805 -> SHORT at 11
    close 15 -> 15 > 11 * 1.1 -> stop-loss, close SHORT at 15
    close 9  -> window [11, 15, 9], lower ~9.172 -> LONG at 9
    close 9  -> inside 8.1 .. 10.8, held, force-closed at 9
    """
    return [10.0, 10.0, 10.0, 11.0, 15.0, 9.0, 9.0]


@pytest.fixture
def reversal_ticker(reversal_closes) -> Ticker:
    return Ticker(
        symbol="BTCUSDT",
        exchange="binance",
        candles=tuple(Candle(close=c) for c in reversal_closes),
    )


@pytest.fixture
def random_walk_closes() -> list:
    """Create a long realistic close series."""
    np.random.seed(7)
    return (100 + np.cumsum(np.random.randn(500))).tolist()


@pytest.fixture
def sample_candle_data() -> pd.DataFrame:
    """Create sample candle data for CSV tests."""
    np.random.seed(42)
    n_days = 60

    dates = pd.date_range(start="2023-01-01", periods=n_days, freq="D")
    close = 100 + np.cumsum(np.random.randn(n_days) * 2)

    return pd.DataFrame({
        "Date": dates,
        "Open": close - np.random.rand(n_days),
        "High": close + np.random.rand(n_days) * 2,
        "Low": close - np.random.rand(n_days) * 2,
        "Close": close,
        "Volume": np.random.randint(1000000, 10000000, n_days),
    })


@pytest.fixture
def sample_candle_csv(temp_dir, sample_candle_data) -> Path:
    """Create a sample candle CSV file."""
    file_path = temp_dir / "BTCUSDT.csv"
    sample_candle_data.to_csv(file_path, index=False)
    return file_path


@pytest.fixture
def params_yaml(temp_dir) -> Path:
    """Create a strategy parameter YAML file."""
    file_path = temp_dir / "strategy.yaml"
    file_path.write_text(
        "strategy:\n"
        "  period: 10\n"
        "  multiplier: 1.5\n"
        "  sl: 0.05\n"
        "  tp: 0.08\n"
        "  usd_balance: 1000\n"
    )
    return file_path
