"""
Single-position trade state machine.

The position is either Flat or Open(trade). Each post-warm-up candle is
evaluated once:

- Flat: close > upper opens a SHORT, close < lower opens a LONG.
- Open LONG: close below the stop-loss price or above the take-profit
  price closes the trade.
- Open SHORT: close above the stop-loss price or below the take-profit
  price closes the trade.

A candle that closes a position never opens one. Whatever is still open
after the last candle is force-closed at that candle's close. All
comparisons are strict.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, List, Optional, Tuple, Union

from bollinger_backtest.engine.constants import Side
from bollinger_backtest.indicators.bands import BandValue, BollingerBands

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenTrade:
    """A position that has been entered but not exited."""

    open_price: float
    amount: float
    side: Side

    def stop_loss_price(self, sl: float) -> float:
        """Price beyond which the position is stopped out."""
        if self.side == Side.LONG:
            return self.open_price * (1.0 - sl)
        return self.open_price * (1.0 + sl)

    def take_profit_price(self, tp: float) -> float:
        """Price beyond which the position takes profit."""
        if self.side == Side.LONG:
            return self.open_price * (1.0 + tp)
        return self.open_price * (1.0 - tp)

    def close(self, close_price: float) -> "ClosedTrade":
        """Convert to a ClosedTrade at the given price."""
        return ClosedTrade(
            open_price=self.open_price,
            close_price=close_price,
            amount=self.amount,
            side=self.side,
        )


@dataclass(frozen=True)
class ClosedTrade:
    """A completed round trip."""

    open_price: float
    close_price: float
    amount: float
    side: Side

    def to_dict(self) -> Dict:
        """Convert trade to its wire representation."""
        return {
            "open_price": self.open_price,
            "close_price": self.close_price,
            "amount": self.amount,
            "side": self.side.value,
        }


@dataclass(frozen=True)
class Flat:
    """No position is open."""

    is_open: ClassVar[bool] = False


@dataclass(frozen=True)
class Open:
    """Exactly one position is open."""

    trade: OpenTrade
    is_open: ClassVar[bool] = True


PositionState = Union[Flat, Open]

FLAT = Flat()


def entry_signal(close: float, band: BandValue) -> Optional[Side]:
    """
    Check a close against the bands for an entry.

    Returns:
        SHORT above the upper band, LONG below the lower band, else None.
    """
    if close > band.upper:
        return Side.SHORT
    if close < band.lower:
        return Side.LONG
    return None


def should_exit(trade: OpenTrade, close: float, sl: float, tp: float) -> bool:
    """Check whether a close breaches the trade's stop-loss or take-profit."""
    sl_price = trade.stop_loss_price(sl)
    tp_price = trade.take_profit_price(tp)

    if trade.side == Side.LONG:
        return close < sl_price or close > tp_price
    return close > sl_price or close < tp_price


def step(
    state: PositionState,
    close: float,
    band: BandValue,
    sl: float,
    tp: float,
    usd_balance: float,
) -> Tuple[PositionState, Optional[ClosedTrade]]:
    """
    Advance the state machine by one candle.

    Args:
        state: Current position state.
        close: This candle's close price.
        band: Bollinger Bands for this candle.
        sl: Fractional stop-loss.
        tp: Fractional take-profit.
        usd_balance: Notional allocated to a new trade.

    Returns:
        Tuple of (new_state, closed_trade). closed_trade is None unless
        this candle exited a position.
    """
    if state.is_open:
        trade = state.trade
        if should_exit(trade, close, sl, tp):
            closed = trade.close(close)
            logger.debug(f"Closed {trade.side} opened at {trade.open_price} at {close}")
            return FLAT, closed
        return state, None

    side = entry_signal(close, band)
    if side is None:
        return state, None

    trade = OpenTrade(open_price=close, amount=usd_balance / close, side=side)
    logger.debug(
        f"Opened {side} at {close} (bands {band.lower:.4f} / {band.upper:.4f})"
    )
    return Open(trade), None


def flush(state: PositionState, last_close: float) -> Optional[ClosedTrade]:
    """
    Force-close any open position at the final close.

    Returns:
        The ClosedTrade, or None if the state is Flat.
    """
    if state.is_open:
        logger.debug(
            f"Force-closing {state.trade.side} opened at {state.trade.open_price} "
            f"at final close {last_close}"
        )
        return state.trade.close(last_close)
    return None


def simulate_trades(
    closes: Iterable[float],
    bands: BollingerBands,
    sl: float,
    tp: float,
    usd_balance: float,
) -> List[ClosedTrade]:
    """
    Run the state machine over a full close series.

    Closes consumed while the calculator is warming up make no decision.

    Args:
        closes: Close prices in chronological order.
        bands: Fresh Bollinger Bands calculator.
        sl: Fractional stop-loss.
        tp: Fractional take-profit.
        usd_balance: Notional allocated to each trade.

    Returns:
        Closed trades in the order they were closed.
    """
    trades: List[ClosedTrade] = []
    state: PositionState = FLAT
    last_close = None

    for close in closes:
        last_close = close
        band = bands.next(close)
        if band is None:
            continue

        state, closed = step(state, close, band, sl, tp, usd_balance)
        if closed is not None:
            trades.append(closed)

    if last_close is not None:
        closed = flush(state, last_close)
        if closed is not None:
            trades.append(closed)

    return trades
