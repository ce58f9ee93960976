"""
Strategy parameter parsing and validation.

This module resolves the five strategy parameters (period, multiplier,
sl, tp, usd_balance) from mappings or YAML files and checks their
types and shapes before any computation starts.
"""

import math
from dataclasses import asdict, dataclass
from numbers import Integral, Real
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from bollinger_backtest.engine.constants import PARAM_NAMES
from bollinger_backtest.engine.exceptions import (
    FileNotFoundError,
    InvalidParameterError,
    MissingParameterError,
    ParameterError,
)


def _require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameterError(name, value, "must be a number")
    if not math.isfinite(value):
        raise InvalidParameterError(name, value, "must be finite")
    return float(value)


@dataclass(frozen=True)
class StrategyParams:
    """
    Parameters of the Bollinger Band mean-reversion strategy.

    Attributes:
        period: Bollinger Band window length (also the warm-up length).
        multiplier: Standard deviation multiplier for the bands.
        sl: Fractional stop-loss, e.g. 0.02 = 2%.
        tp: Fractional take-profit, e.g. 0.04 = 4%.
        usd_balance: Notional allocated to each trade.
    """

    period: int
    multiplier: float
    sl: float
    tp: float
    usd_balance: float

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """
        Validate parameter types and shapes.

        Range checks on period and multiplier belong to the indicator and
        surface as InvalidIndicatorConfigurationError when the bands are built.
        """
        if isinstance(self.period, bool) or not isinstance(self.period, Integral):
            raise InvalidParameterError("period", self.period, "must be an integer")
        if isinstance(self.multiplier, bool) or not isinstance(self.multiplier, Real):
            raise InvalidParameterError("multiplier", self.multiplier, "must be a number")

        if _require_number("sl", self.sl) < 0:
            raise InvalidParameterError("sl", self.sl, "must be non-negative")
        if _require_number("tp", self.tp) < 0:
            raise InvalidParameterError("tp", self.tp, "must be non-negative")
        if _require_number("usd_balance", self.usd_balance) <= 0:
            raise InvalidParameterError("usd_balance", self.usd_balance, "must be positive")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrategyParams":
        """
        Create StrategyParams from a mapping, ignoring unknown keys.

        Raises:
            MissingParameterError: If any parameter is absent.
            InvalidParameterError: If a parameter has the wrong type or shape.
        """
        if not isinstance(data, Mapping):
            raise ParameterError(
                f"Parameters must be a mapping, got {type(data).__name__}"
            )

        missing = [name for name in PARAM_NAMES if data.get(name) is None]
        if missing:
            raise MissingParameterError(missing)

        return cls(**{name: data[name] for name in PARAM_NAMES})

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    def replace(self, **overrides: Any) -> "StrategyParams":
        """Return a copy with non-None overrides applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return StrategyParams.from_dict(values)


def load_params(
    file_path: Union[str, Path], overrides: Optional[Mapping[str, Any]] = None
) -> StrategyParams:
    """
    Load strategy parameters from a YAML file.

    The file may hold the parameters at top level or under a `strategy` key:

        strategy:
          period: 20
          multiplier: 2.0
          sl: 0.02
          tp: 0.04
          usd_balance: 1000

    Args:
        file_path: Path to the YAML file.
        overrides: Values that replace the file's values key by key.
            None values are ignored.

    Returns:
        Validated StrategyParams.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ParameterError: If the YAML is malformed or parameters are invalid.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(str(file_path))

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParameterError(f"Failed to parse YAML in {file_path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParameterError(f"Parameter file {file_path} must contain a mapping")

    if "strategy" in data:
        data = data["strategy"]
        if not isinstance(data, dict):
            raise ParameterError(f"'strategy' in {file_path} must be a mapping")

    merged = dict(data)
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    return StrategyParams.from_dict(merged)
