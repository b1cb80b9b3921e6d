"""
Z-Score Engine - Rolling standardization of a single metric series.

For each day t the value is compared with the window of days ending at t:

    z[t] = (x[t] - mean(window)) / std(window)

- Only finite values in the window are used
- std is the population std (ddof=0)
- Fewer than 2 usable values -> NaN
- Zero deviation -> 0
- Non-finite x[t] -> NaN
"""

from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import WindowSpec, resolve_window


SeriesLike = Union[pd.Series, np.ndarray, Sequence[float]]


def to_series(values: SeriesLike) -> pd.Series:
    """
    Coerce a metric series to float dtype.

    Non-numeric entries become NaN. A pd.Series keeps its index; anything
    else gets a RangeIndex.
    """
    if isinstance(values, pd.Series):
        return pd.to_numeric(values, errors="coerce").astype(float)
    return pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce").astype(float)


def compute_zscores(series: SeriesLike, window_size: WindowSpec) -> pd.Series:
    """
    Rolling z-score of a metric series.

    Args:
        series: Metric values, one per day
        window_size: Look-back in days, a window name ("4yr"), or
                     None / math.inf for all history to date

    Returns:
        Z-score series with the same length (and index) as the input
    """
    window = resolve_window(window_size)
    values = to_series(series)

    if values.empty:
        return values

    valid = values.where(np.isfinite(values))

    # Windows longer than the history simply use everything seen so far
    if window is None:
        roll = valid.expanding(min_periods=1)
    else:
        roll = valid.rolling(window=window, min_periods=1)

    count = roll.count()
    mean = roll.mean()
    std = roll.std(ddof=0)
    # Equal values can leave a rounding residue in std; treat them as flat
    flat = (roll.max() == roll.min()) | (std == 0)

    z = (valid - mean) / std
    z = z.where(~flat, 0.0)
    z = z.where(count >= 2)
    z = z.where(valid.notna())

    return z


def latest_zscore(series: SeriesLike, window_size: WindowSpec) -> float:
    """
    Z-score of the most recent day.

    Always reads the last element of the full series, never of a window.
    """
    z = compute_zscores(series, window_size)
    if z.empty:
        return float("nan")
    return float(z.iloc[-1])


def window_slice(values: pd.Series, window_size: Optional[int]) -> pd.Series:
    """Trailing window of a series (all of it when unbounded or shorter)."""
    if window_size is None or window_size >= len(values):
        return values
    return values.iloc[-window_size:]
