"""
DCA Allocation Engine - Regular and tuned dollar-cost averaging.

BUDGET CONVENTION:
------------------
- Regular DCA spends budget_per_day on every day of the window.
- Tuned DCA spends the same period total, budget_per_day * window_length,
  split across days by the weighting model:

      spend[t] = budget_per_day * weight[t] * window_length

  With weights summing to 1 both strategies invest exactly the same amount,
  so tuned vs regular compares allocation only, never budget size.

Both functions return BTC bought per day over the trailing window. Days
with a non-positive or missing price buy nothing.
"""

import logging
from typing import Dict, Union

import numpy as np
import pandas as pd

from ..config import WindowSpec, resolve_window
from ..errors import AlignmentError, InvalidParameterError
from .models import WeightingModel, get_model
from .zscore import SeriesLike, to_series, window_slice

logger = logging.getLogger(__name__)


def window_length(price: SeriesLike, window_size: WindowSpec) -> int:
    """Effective DCA window length: min(window_size, len(price))."""
    n = len(price)
    window = resolve_window(window_size)
    return n if window is None else min(window, n)


def _check_budget(budget_per_day: float):
    if not np.isfinite(budget_per_day) or budget_per_day < 0:
        raise InvalidParameterError(f"budget_per_day must be >= 0, got {budget_per_day}")


def _buy(spend: np.ndarray, prices: pd.Series) -> pd.Series:
    """BTC bought per day; invalid price days buy 0."""
    p = prices.to_numpy(dtype=float)
    valid = np.isfinite(p) & (p > 0)
    btc = np.zeros(len(p), dtype=float)
    np.divide(spend, p, out=btc, where=valid)
    return pd.Series(btc, index=prices.index)


def compute_regular_dca(price: SeriesLike, budget_per_day: float,
                        window_size: WindowSpec) -> pd.Series:
    """
    Regular DCA: the same dollar amount every day.

    Args:
        price: Daily BTC price series
        budget_per_day: USD spent per day
        window_size: Look-back in days (or window name / None for all)

    Returns:
        BTC bought per day over the trailing window
    """
    _check_budget(budget_per_day)
    prices = window_slice(to_series(price), resolve_window(window_size))
    spend = np.full(len(prices), float(budget_per_day))
    return _buy(spend, prices)


def _fit_weights(weights: np.ndarray, n: int) -> np.ndarray:
    """
    Resize weights to n days.

    Overlapping prefix is kept, missing days get 0, and the result is
    renormalized to sum to 1 (uniform 1/n if nothing is left).
    """
    fitted = np.zeros(n, dtype=float)
    m = min(len(weights), n)
    fitted[:m] = weights[:m]
    total = fitted.sum()
    if total > 0:
        return fitted / total
    return np.full(n, 1.0 / n) if n else fitted


def compute_tuned_dca(price: SeriesLike, z_scores: SeriesLike, budget_per_day: float,
                      window_size: WindowSpec,
                      model: Union[str, WeightingModel] = WeightingModel.SOFTMAX,
                      temperature: float = 1.0) -> pd.Series:
    """
    Tuned DCA: the regular period budget, reallocated by z-score weights.

    Args:
        price: Daily BTC price series
        z_scores: Z-score series, date-aligned with price
        budget_per_day: USD per day of the equivalent regular DCA
        window_size: Look-back in days (or window name / None for all)
        model: Weighting model applied to the z-score window
        temperature: Model temperature

    Returns:
        BTC bought per day over the trailing window
    """
    _check_budget(budget_per_day)
    window = resolve_window(window_size)
    model = get_model(model)

    prices_full = to_series(price)
    z_full = to_series(z_scores)
    if (isinstance(price, pd.Series) and isinstance(z_scores, pd.Series)
            and len(price) == len(z_scores) and not price.index.equals(z_scores.index)):
        raise AlignmentError("Price and z-score series are not aligned on the same dates")

    prices = window_slice(prices_full, window)
    z = window_slice(z_full, window)
    n = len(prices)

    weights = np.asarray(model(z.to_numpy(), temperature), dtype=float)
    if len(weights) != n:
        logger.debug(f"Weight length {len(weights)} != price window {n}, refitting")
        weights = _fit_weights(weights, n)

    total_budget = float(budget_per_day) * n
    spend = weights * total_budget
    btc = _buy(spend, prices)

    logger.debug(
        f"Tuned DCA ({model.value}, T={temperature}): weight sum={weights.sum():.12f}, "
        f"spent={float((btc * prices).sum()):.6f} of budget {total_budget:.6f}"
    )

    return btc


def compute_all_tuned_dca(price: SeriesLike, z_scores: SeriesLike, budget_per_day: float,
                          window_size: WindowSpec,
                          temperature: float = 1.0) -> Dict[str, pd.Series]:
    """
    Run tuned DCA once per registered weighting model.

    Returns:
        Dict mapping model names to BTC-bought series
    """
    return {
        model.value: compute_tuned_dca(price, z_scores, budget_per_day, window_size,
                                       model=model, temperature=temperature)
        for model in WeightingModel
    }


def total_spent(btc_bought: pd.Series, price: SeriesLike) -> float:
    """
    Dollars spent by a DCA result.

    price may be the full series; only the dates (or trailing positions)
    covered by btc_bought are used.
    """
    if len(btc_bought) == 0:
        return 0.0
    prices = window_slice(to_series(price), len(btc_bought))
    return float(np.nansum(btc_bought.to_numpy() * prices.to_numpy(dtype=float)))
