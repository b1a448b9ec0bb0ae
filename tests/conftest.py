"""Shared fixtures for windowstats tests."""

import numpy as np
import pandas as pd
import pytest

import windowstats as ws


def create_price_path(num_bars: int, seed: int = 42) -> np.ndarray:
    """Create a synthetic geometric random-walk close series."""
    rng = np.random.default_rng(seed)
    returns = rng.normal(0, 0.02, num_bars)
    return 100 * np.exp(np.cumsum(returns))


@pytest.fixture
def prices() -> np.ndarray:
    """500 bars of synthetic closes."""
    return create_price_path(500)


@pytest.fixture
def price_series(prices) -> pd.Series:
    """Synthetic closes on a daily DatetimeIndex."""
    return pd.Series(prices, index=pd.date_range('2025-01-01', periods=len(prices), freq='D'), name='close')


@pytest.fixture
def tied_values() -> np.ndarray:
    """Integer-valued series with many duplicates for rank/median tests."""
    rng = np.random.default_rng(7)
    return rng.integers(0, 10, 300).astype(float)


@pytest.fixture(autouse=True)
def default_settings():
    """Restore process-wide engine settings after each test."""
    previous = ws.get_settings()
    yield
    ws.configure(previous)
