"""
Realized profit aggregation over closed trades.
"""

from typing import Iterable

from bollinger_backtest.engine.constants import Side
from bollinger_backtest.engine.positions import ClosedTrade


def realized_pnl(trade: ClosedTrade) -> float:
    """
    Calculate the realized profit or loss of a closed trade.

    LONG:  (close_price - open_price) * amount
    SHORT: (open_price - close_price) * amount
    """
    if trade.side == Side.LONG:
        return (trade.close_price - trade.open_price) * trade.amount
    return (trade.open_price - trade.close_price) * trade.amount


def total_profit(trades: Iterable[ClosedTrade]) -> float:
    """Sum realized PnL over trades, left to right."""
    total = 0.0
    for trade in trades:
        total += realized_pnl(trade)
    return total
