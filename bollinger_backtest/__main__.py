"""
CLI entry point for the backtest.

Allows running as: python -m bollinger_backtest
"""

import sys

from bollinger_backtest.engine.runner import main

if __name__ == "__main__":
    sys.exit(main())
