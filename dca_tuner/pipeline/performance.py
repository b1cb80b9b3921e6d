"""
Performance Calculator - Profit figures for DCA results.

VALUATION CONVENTION:
---------------------
- BTC accumulated over the window is valued at the current price, the last
  element of the FULL price series. A price window can equal the full
  series when history is shorter than the window; the current price is
  still read from the full series, never from the window.
- Invested amount is budget_per_day * effective window length, where the
  effective length is min(dca_window, len(price)). Using the nominal
  window when history is shorter would inflate the invested amount.
"""

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from ..errors import DataUnavailableError


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def current_price(price: pd.Series) -> float:
    """Last price of the full series."""
    if len(price) == 0:
        raise DataUnavailableError("Price series is empty")
    last = float(price.iloc[-1])
    if not math.isfinite(last):
        raise DataUnavailableError(f"Current price is not a number: {last}")
    return last


@dataclass(frozen=True)
class DCAPerformance:
    """Container for the outcome of one DCA run."""
    btc_bought: float
    usd_value: float
    total_investment: float
    profit_pct: int

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "btc_bought": self.btc_bought,
            "usd_value": self.usd_value,
            "total_investment": self.total_investment,
            "profit_pct": self.profit_pct,
        }


class PerformanceCalculator:
    """
    Calculator for DCA performance.

    Computes:
    - BTC accumulated and its USD value at the current price
    - Profit percentage against the invested amount
    - Tuned vs regular outperformance (profit points and BTC %)
    """

    def __init__(self, budget_per_day: float):
        """
        Args:
            budget_per_day: USD per day of regular DCA
        """
        self.budget_per_day = budget_per_day

    def total_investment(self, window_length: int) -> float:
        """Invested amount over an effective window."""
        return self.budget_per_day * window_length

    def profit_pct(self, usd_value: float, total_investment: float) -> int:
        """Whole-percent profit; 0 when nothing was invested."""
        if total_investment <= 0:
            return 0
        return round_half_up((usd_value - total_investment) / total_investment * 100)

    def evaluate(self, btc_bought: pd.Series, price: pd.Series) -> DCAPerformance:
        """
        Evaluate one DCA result.

        Args:
            btc_bought: BTC bought per day over the DCA window
            price: Full, untruncated price series

        Returns:
            DCAPerformance for the run
        """
        btc = float(np.nansum(btc_bought.to_numpy(dtype=float)))
        usd = btc * current_price(price)
        invested = self.total_investment(len(btc_bought))
        return DCAPerformance(
            btc_bought=btc,
            usd_value=usd,
            total_investment=invested,
            profit_pct=self.profit_pct(usd, invested),
        )

    @staticmethod
    def btc_outperformance_pct(tuned_btc: float, regular_btc: float) -> int:
        """Extra BTC of tuned over regular DCA in whole percent; 0 when regular bought none."""
        if regular_btc <= 0:
            return 0
        return round_half_up((tuned_btc - regular_btc) / regular_btc * 100)

    @staticmethod
    def outperformance_pct(tuned: DCAPerformance, regular: DCAPerformance) -> int:
        """Profit points of tuned over regular DCA."""
        return tuned.profit_pct - regular.profit_pct
