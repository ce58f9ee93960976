"""
Backtest Engine Module.

Simulates a Bollinger Band mean-reversion strategy over a candle series,
holding at most one position at a time.

Usage (Python API):
    from bollinger_backtest.engine import run_backtest
    result = run_backtest(
        ticker={"symbol": "BTCUSDT", "exchange": "binance", "candles": candles},
        params={"period": 20, "multiplier": 2.0, "sl": 0.02, "tp": 0.04,
                "usd_balance": 1000},
    )
    print(result.total_profit)
    payload = result.to_dict()

Usage (CLI):
    python -m bollinger_backtest --data BTCUSDT.csv --params strategy.yaml
"""

from bollinger_backtest.engine.constants import Side
from bollinger_backtest.engine.market_data import Candle, Ticker, load_ticker
from bollinger_backtest.engine.params import StrategyParams, load_params
from bollinger_backtest.engine.positions import (
    FLAT,
    ClosedTrade,
    Flat,
    Open,
    OpenTrade,
    simulate_trades,
)
from bollinger_backtest.engine.profit import realized_pnl, total_profit
from bollinger_backtest.engine.runner import BacktestResult, run_backtest

__all__ = [
    # Main API functions
    "run_backtest",
    "load_ticker",
    "load_params",
    "simulate_trades",
    "realized_pnl",
    "total_profit",
    # Data classes
    "BacktestResult",
    "Candle",
    "Ticker",
    "StrategyParams",
    "OpenTrade",
    "ClosedTrade",
    "Flat",
    "Open",
    "FLAT",
    "Side",
]
