"""
Bollinger Band Mean-Reversion Backtest Package.

Modules:
    - indicators: Bollinger Band calculations
    - engine: Single-position backtest engine

Main APIs:
    - run_backtest: Run the backtest on a ticker with strategy parameters
    - load_ticker: Load a candle series from CSV
    - load_params: Load strategy parameters from YAML
"""

from bollinger_backtest.engine import (
    BacktestResult,
    StrategyParams,
    Ticker,
    load_params,
    load_ticker,
    run_backtest,
)

__all__ = [
    "run_backtest",
    "load_ticker",
    "load_params",
    "BacktestResult",
    "StrategyParams",
    "Ticker",
]
__version__ = "1.0.0"
