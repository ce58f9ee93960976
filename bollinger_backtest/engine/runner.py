"""
Main runner module for the backtest engine.

This module assembles backtest results and provides the primary API and
CLI for running the Bollinger Band mean-reversion backtest.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from bollinger_backtest.engine.constants import DEFAULT_EXCHANGE, Side
from bollinger_backtest.engine.exceptions import BacktestError, DataError, ParameterError
from bollinger_backtest.engine.market_data import Ticker, load_ticker
from bollinger_backtest.engine.params import StrategyParams, load_params
from bollinger_backtest.engine.positions import ClosedTrade, simulate_trades
from bollinger_backtest.engine.profit import realized_pnl, total_profit
from bollinger_backtest.indicators.bands import BollingerBands
from bollinger_backtest.indicators.calculations import build_band_frame
from bollinger_backtest.indicators.exceptions import IndicatorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestResult:
    """
    Results from a backtest run.

    total_profit is derived from trades on every access.
    """

    symbol: str
    exchange: str
    trades: Tuple[ClosedTrade, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "trades", tuple(self.trades))

    @property
    def total_profit(self) -> float:
        """Sum of realized PnL over all closed trades."""
        return total_profit(self.trades)

    @property
    def num_trades(self) -> int:
        return len(self.trades)

    @property
    def num_long(self) -> int:
        return sum(1 for t in self.trades if t.side == Side.LONG)

    @property
    def num_short(self) -> int:
        return sum(1 for t in self.trades if t.side == Side.SHORT)

    @property
    def num_winning(self) -> int:
        return sum(1 for t in self.trades if realized_pnl(t) > 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to its wire representation."""
        return {
            "trades": [t.to_dict() for t in self.trades],
            "total_profit": self.total_profit,
            "symbol": self.symbol,
            "exchange": self.exchange,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize result to JSON."""
        return json.dumps(self.to_dict(), indent=indent)

    def trades_to_dataframe(self) -> pd.DataFrame:
        """Convert trade log to DataFrame with a per-trade pnl column."""
        if not self.trades:
            return pd.DataFrame()
        rows = []
        for trade in self.trades:
            row = trade.to_dict()
            row["pnl"] = realized_pnl(trade)
            rows.append(row)
        return pd.DataFrame(rows)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            "BACKTEST RESULTS",
            "=" * 60,
            "",
            f"Symbol: {self.symbol}",
            f"Exchange: {self.exchange}",
            "",
            "-" * 60,
            "TRADING SUMMARY",
            "-" * 60,
            "",
            f"Total Trades: {self.num_trades}",
            f"  - Long: {self.num_long}",
            f"  - Short: {self.num_short}",
            f"  - Winning: {self.num_winning}",
            f"Total Profit: ${self.total_profit:,.2f}",
        ]

        if self.trades:
            lines.extend(["", "Trades:"])
            for i, t in enumerate(self.trades, start=1):
                lines.append(
                    f"  {i:>3}. {t.side.value:5} "
                    f"open {t.open_price:>12,.4f} | "
                    f"close {t.close_price:>12,.4f} | "
                    f"pnl {realized_pnl(t):>+12,.2f}"
                )

        lines.extend(["", "=" * 60])
        return "\n".join(lines)


def run_backtest(
    ticker: Union[Ticker, Mapping[str, Any]],
    params: Union[StrategyParams, Mapping[str, Any]],
) -> BacktestResult:
    """
    Run the Bollinger Band mean-reversion backtest.

    This is the main API function for programmatic usage.

    Args:
        ticker: Ticker, or a `{symbol, exchange, candles}` mapping.
        params: StrategyParams, or a mapping with period, multiplier,
            sl, tp and usd_balance.

    Returns:
        BacktestResult with closed trades and total profit. If the series
        is shorter than the band period the result has no trades.

    Raises:
        MissingParameterError: If a parameter is absent.
        InvalidParameterError: If a parameter has the wrong type or shape.
        InvalidIndicatorConfigurationError: If period or multiplier is out of range.
        DataError: If the ticker is malformed or contains an unusable close.

    Example:
        >>> result = run_backtest(
        ...     ticker={"symbol": "BTCUSDT", "exchange": "binance", "candles": candles},
        ...     params={"period": 20, "multiplier": 2.0, "sl": 0.02, "tp": 0.04,
        ...             "usd_balance": 1000},
        ... )
        >>> print(result.total_profit)
    """
    if isinstance(params, Mapping):
        params = StrategyParams.from_dict(params)
    elif not isinstance(params, StrategyParams):
        raise ParameterError(
            f"params must be StrategyParams or a mapping, got {type(params).__name__}"
        )

    if isinstance(ticker, Mapping):
        ticker = Ticker.from_dict(ticker)
    elif not isinstance(ticker, Ticker):
        raise DataError(f"ticker must be a Ticker or a mapping, got {type(ticker).__name__}")

    bands = BollingerBands(params.period, params.multiplier)

    if len(ticker) < params.period:
        logger.info(
            f"{ticker.symbol}: {len(ticker)} candles is fewer than period "
            f"{params.period}, skipping simulation"
        )
        return BacktestResult(symbol=ticker.symbol, exchange=ticker.exchange)

    trades = simulate_trades(
        ticker.closes,
        bands,
        sl=params.sl,
        tp=params.tp,
        usd_balance=params.usd_balance,
    )

    result = BacktestResult(symbol=ticker.symbol, exchange=ticker.exchange, trades=trades)
    logger.info(
        f"{ticker.symbol}@{ticker.exchange}: {result.num_trades} trades over "
        f"{len(ticker)} candles, total profit {result.total_profit:.2f}"
    )
    return result


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="bollinger_backtest",
        description="Backtest a Bollinger Band mean-reversion strategy on candle data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m bollinger_backtest --data BTCUSDT.csv --params strategy.yaml
  python -m bollinger_backtest -d BTCUSDT.csv --period 20 --multiplier 2 \\
      --sl 0.02 --tp 0.04 --usd-balance 1000
  python -m bollinger_backtest -d BTCUSDT.csv -p strategy.yaml --sl 0.05 -o result.json

Parameter YAML Format:
  strategy:
    period: 20
    multiplier: 2.0
    sl: 0.02
    tp: 0.04
    usd_balance: 1000
""",
    )

    parser.add_argument(
        "--data",
        "-d",
        required=True,
        type=str,
        help="Path to candle CSV file (Close column required)",
    )

    parser.add_argument(
        "--symbol",
        type=str,
        default=None,
        help="Symbol to report (default: data file name)",
    )

    parser.add_argument(
        "--exchange",
        type=str,
        default=DEFAULT_EXCHANGE,
        help=f"Exchange to report (default: {DEFAULT_EXCHANGE})",
    )

    parser.add_argument(
        "--params",
        "-p",
        type=str,
        default=None,
        help="Path to YAML file with strategy parameters",
    )

    parser.add_argument("--period", type=int, default=None, help="Bollinger Band period")
    parser.add_argument(
        "--multiplier", type=float, default=None, help="Standard deviation multiplier"
    )
    parser.add_argument("--sl", type=float, default=None, help="Stop-loss fraction (0.02 = 2%%)")
    parser.add_argument("--tp", type=float, default=None, help="Take-profit fraction (0.04 = 4%%)")
    parser.add_argument(
        "--usd-balance",
        type=float,
        default=None,
        help="USD notional allocated per trade",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Path to save the result as JSON",
    )

    parser.add_argument(
        "--trades",
        "-t",
        type=str,
        default=None,
        help="Path to save trade log CSV",
    )

    parser.add_argument(
        "--bands",
        type=str,
        default=None,
        help="Path to save closes with Bollinger Bands as CSV",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable info logging",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (every entry and exit)",
    )

    return parser


def resolve_params(parsed_args: argparse.Namespace) -> StrategyParams:
    """
    Resolve strategy parameters from a YAML file and CLI flags.

    Flags override values from the file.
    """
    overrides = {
        "period": parsed_args.period,
        "multiplier": parsed_args.multiplier,
        "sl": parsed_args.sl,
        "tp": parsed_args.tp,
        "usd_balance": parsed_args.usd_balance,
    }
    if parsed_args.params:
        return load_params(parsed_args.params, overrides)
    return StrategyParams.from_dict(overrides)


def write_bands(ticker: Ticker, params: StrategyParams, output_file: str) -> None:
    """Save the ticker's closes and Bollinger Bands to CSV."""
    df = build_band_frame(ticker.closes, params.period, params.multiplier)
    dates = [c.date for c in ticker.candles]
    if any(d is not None for d in dates):
        df.insert(0, "Date", dates)
    df.to_csv(output_file, index=False)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(parsed_args.verbose, parsed_args.debug)

    try:
        params = resolve_params(parsed_args)
        ticker = load_ticker(
            parsed_args.data,
            symbol=parsed_args.symbol,
            exchange=parsed_args.exchange,
        )

        result = run_backtest(ticker, params)

        print(result.summary())

        if parsed_args.output:
            Path(parsed_args.output).write_text(result.to_json(indent=2))
            print(f"\nResult saved to: {parsed_args.output}")

        if parsed_args.trades:
            trades_df = result.trades_to_dataframe()
            if not trades_df.empty:
                trades_df.to_csv(parsed_args.trades, index=False)
                print(f"Trade log saved to: {parsed_args.trades}")
            else:
                print("No trades to save (no trades executed)")

        if parsed_args.bands:
            write_bands(ticker, params, parsed_args.bands)
            print(f"Bands saved to: {parsed_args.bands}")

        return 0

    except (BacktestError, IndicatorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error during backtest")
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
