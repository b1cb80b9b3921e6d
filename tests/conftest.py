"""
Shared fixtures: synthetic daily price and metric series.
"""
import numpy as np
import pandas as pd
import pytest


def make_dates(n: int) -> pd.DatetimeIndex:
    return pd.date_range("2020-01-01", periods=n, freq="D", name="date")


def make_price(n: int = 120, seed: int = 7) -> pd.Series:
    """Random-walk BTC price, strictly positive."""
    rng = np.random.default_rng(seed)
    close = 30000 * np.exp(np.cumsum(rng.normal(0, 0.03, n)))
    return pd.Series(close, index=make_dates(n), name="close")


@pytest.fixture
def price():
    return make_price()


@pytest.fixture
def base_metrics(price):
    """Base metrics sharing the price's date index."""
    n = len(price)
    rng = np.random.default_rng(11)
    supply = 19_000_000
    realized_price = price.rolling(60, min_periods=1).mean() * rng.uniform(0.5, 0.7)
    return {
        "close": price,
        "marketcap": price * supply,
        "realized-cap": realized_price * supply,
        "200d-sma": price.rolling(200, min_periods=1).mean(),
        "liveliness": pd.Series(rng.uniform(0.55, 0.65, n), index=price.index),
    }
