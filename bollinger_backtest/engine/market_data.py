"""
Market data types and loading.

This module defines the Candle and Ticker inputs of the backtest engine,
validates close prices, and loads candle series from CSV files.
"""

import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from bollinger_backtest.engine.constants import (
    CLOSE_COLUMN,
    DATE_COLUMN,
    DEFAULT_EXCHANGE,
    OPTIONAL_CANDLE_COLUMNS,
)
from bollinger_backtest.engine.exceptions import (
    DataError,
    EmptyDataError,
    FileNotFoundError,
    InvalidCandleError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candle:
    """A single OHLC candle. Only `close` is used by the engine."""

    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None
    date: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> "Candle":
        """
        Create a Candle from a mapping with at least a `close` key.

        Raises:
            InvalidCandleError: If `close` is missing.
        """
        if "close" not in data:
            raise InvalidCandleError(index, None, "missing 'close'")
        return cls(
            close=data["close"],
            open=data.get("open"),
            high=data.get("high"),
            low=data.get("low"),
            volume=data.get("volume"),
            date=data.get("date", data.get("timestamp")),
        )


def validate_close(value: Any, index: int) -> float:
    """
    Validate a single close price.

    Args:
        value: Close price to check.
        index: Position of the candle in the series (for error messages).

    Returns:
        The close as a float.

    Raises:
        InvalidCandleError: If the close is not a finite positive number.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidCandleError(index, value, "must be a number")
    if not math.isfinite(value):
        raise InvalidCandleError(index, value, "must be finite")
    if value <= 0:
        raise InvalidCandleError(index, value, "must be positive")
    return float(value)


def validate_candles(candles: Iterable[Candle]) -> None:
    """
    Validate the close price of every candle.

    Raises:
        InvalidCandleError: On the first unusable close.
    """
    for i, candle in enumerate(candles):
        validate_close(candle.close, i)


@dataclass(frozen=True)
class Ticker:
    """
    A symbol's candle series with its exchange.

    Attributes:
        symbol: Instrument symbol, passed through to the result.
        exchange: Exchange name, passed through to the result.
        candles: Candles in chronological order.
    """

    symbol: str
    exchange: str
    candles: Tuple[Candle, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.symbol, str):
            raise DataError(f"Ticker symbol must be a string, got {type(self.symbol).__name__}")
        if not isinstance(self.exchange, str):
            raise DataError(
                f"Ticker exchange must be a string, got {type(self.exchange).__name__}"
            )
        object.__setattr__(self, "candles", tuple(self.candles))
        validate_candles(self.candles)

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def closes(self) -> List[float]:
        """Close prices in chronological order."""
        return [float(c.close) for c in self.candles]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Ticker":
        """
        Create a Ticker from a `{symbol, exchange, candles}` mapping.

        Candles may be Candle instances or mappings with a `close` key.

        Raises:
            DataError: If the mapping is malformed or a close is invalid.
        """
        if not isinstance(data, Mapping):
            raise DataError(f"Ticker must be a mapping, got {type(data).__name__}")

        missing = [key for key in ("symbol", "exchange", "candles") if key not in data]
        if missing:
            raise DataError(f"Ticker is missing fields: {', '.join(missing)}")

        raw_candles = data["candles"]
        if isinstance(raw_candles, (str, bytes)) or not isinstance(raw_candles, Iterable):
            raise DataError("Ticker candles must be a sequence")

        candles = []
        for i, raw in enumerate(raw_candles):
            if isinstance(raw, Candle):
                candles.append(raw)
            elif isinstance(raw, Mapping):
                candles.append(Candle.from_dict(raw, i))
            else:
                raise InvalidCandleError(i, raw, "candle must be a mapping")

        return cls(symbol=data["symbol"], exchange=data["exchange"], candles=tuple(candles))


def load_candles_csv(file_path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a candle CSV file.

    Column names are stripped of whitespace. Closes are validated in file
    row order, so error indices refer to data rows of the file. Open, High,
    Low and Volume are coerced to numbers, with unparseable values left
    empty. If a Date column is present it is parsed and the rows are
    sorted chronologically.

    Args:
        file_path: Path to the CSV file.

    Returns:
        DataFrame with a numeric Close column.

    Raises:
        FileNotFoundError: If the file does not exist.
        EmptyDataError: If the file has no rows.
        DataError: If the file cannot be parsed or lacks a Close column.
        InvalidCandleError: If a close is missing, non-numeric or not positive.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(str(file_path))

    try:
        df = pd.read_csv(path)
    except pd.errors.EmptyDataError:
        raise EmptyDataError(str(file_path))
    except Exception as e:
        raise DataError(f"Failed to load data from {file_path}: {e}")

    if df.empty:
        raise EmptyDataError(str(file_path))

    df.columns = df.columns.str.strip()

    if CLOSE_COLUMN not in df.columns:
        raise DataError(f"Missing '{CLOSE_COLUMN}' column in {file_path}")

    # Closes are checked in file row order, before any sort
    raw_close = df[CLOSE_COLUMN].copy()
    df[CLOSE_COLUMN] = pd.to_numeric(raw_close, errors="coerce")

    missing = raw_close.isna()
    if missing.any():
        bad_idx = int(missing.to_numpy().argmax())
        raise InvalidCandleError(bad_idx, None, "missing close")

    failures = df[CLOSE_COLUMN].isna()
    if failures.any():
        bad_idx = int(failures.to_numpy().argmax())
        raise InvalidCandleError(bad_idx, raw_close.iloc[bad_idx], "cannot convert to numeric")

    for i, value in enumerate(df[CLOSE_COLUMN].tolist()):
        validate_close(value, i)

    for col in OPTIONAL_CANDLE_COLUMNS:
        if col not in df.columns:
            continue
        numeric = pd.to_numeric(df[col], errors="coerce")
        dropped = int((numeric.isna() & df[col].notna()).sum())
        if dropped:
            logger.warning(f"Ignoring {dropped} non-numeric value(s) in column '{col}'")
        df[col] = numeric

    if DATE_COLUMN in df.columns:
        try:
            df[DATE_COLUMN] = pd.to_datetime(df[DATE_COLUMN])
        except Exception as e:
            raise DataError(f"Failed to parse dates in column '{DATE_COLUMN}': {e}")
        if not df[DATE_COLUMN].is_monotonic_increasing:
            logger.info(f"Sorting {len(df)} rows of {file_path} by {DATE_COLUMN}")
            df = df.sort_values(DATE_COLUMN, kind="mergesort").reset_index(drop=True)

    return df


def candles_from_dataframe(df: pd.DataFrame) -> Tuple[Candle, ...]:
    """
    Convert candle rows to Candle records.

    Args:
        df: DataFrame with a Close column and optional Date/Open/High/Low/Volume.

    Returns:
        Tuple of Candles in row order.
    """
    n_rows = len(df)
    closes = df[CLOSE_COLUMN].tolist()
    dates = df[DATE_COLUMN].tolist() if DATE_COLUMN in df.columns else [None] * n_rows

    extras: Dict[str, List[Optional[float]]] = {}
    for col in OPTIONAL_CANDLE_COLUMNS:
        if col in df.columns:
            values = pd.to_numeric(df[col], errors="coerce").tolist()
            extras[col.lower()] = [None if pd.isna(v) else float(v) for v in values]

    candles = []
    for i in range(n_rows):
        candles.append(
            Candle(
                close=closes[i],
                date=dates[i],
                **{name: values[i] for name, values in extras.items()},
            )
        )
    return tuple(candles)


def load_ticker(
    file_path: Union[str, Path],
    symbol: Optional[str] = None,
    exchange: str = DEFAULT_EXCHANGE,
) -> Ticker:
    """
    Load a Ticker from a candle CSV file.

    Args:
        file_path: Path to the CSV file.
        symbol: Symbol to report. Defaults to the file stem.
        exchange: Exchange to report.

    Returns:
        Validated Ticker.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataError: If the data is malformed or contains an unusable close.
    """
    df = load_candles_csv(file_path)
    candles = candles_from_dataframe(df)
    ticker = Ticker(
        symbol=symbol if symbol is not None else Path(file_path).stem,
        exchange=exchange,
        candles=candles,
    )
    logger.info(f"Loaded {len(ticker)} candles for {ticker.symbol} from {file_path}")
    return ticker
