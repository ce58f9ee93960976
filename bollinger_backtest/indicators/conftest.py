"""
Pytest configuration and fixtures for indicator tests.
"""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def sample_closes() -> pd.Series:
    """Create a realistic random-walk close series."""
    np.random.seed(42)
    return pd.Series(100 + np.cumsum(np.random.randn(100) * 0.5))


@pytest.fixture
def flat_closes() -> list:
    """Create a constant close series."""
    return [10.0] * 8
