"""
Ranking - Runs every metric through the tuned DCA pipeline and ranks them.

For each metric (base + derived) and each weighting model:
1. Rolling z-score of the metric over the z-score window
2. Model weights over the DCA window
3. Tuned DCA vs regular DCA against the shared price series
4. Profit and outperformance at the current price

Metrics without usable data are skipped; they never fail the whole pass.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from ..config import EngineSettings, WindowSpec, resolve_window
from ..errors import AlignmentError, DataUnavailableError, InvalidParameterError
from .catalog import PRICE_METRIC
from .dca import compute_regular_dca, compute_tuned_dca
from .derived_metrics import MetricUniverse
from .models import WeightingModel, get_model
from .performance import DCAPerformance, PerformanceCalculator, current_price
from .zscore import SeriesLike, compute_zscores, to_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingResult:
    """One (metric, model) row of the ranking."""
    metric: str
    model: str
    profit_pct: int
    btc_bought: float
    regular_profit_pct: int
    regular_btc_bought: float
    outperformance_pct: int
    btc_outperformance_pct: int

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "metric": self.metric,
            "model": self.model,
            "profit_pct": self.profit_pct,
            "btc_bought": self.btc_bought,
            "regular_profit_pct": self.regular_profit_pct,
            "regular_btc_bought": self.regular_btc_bought,
            "outperformance_pct": self.outperformance_pct,
            "btc_outperformance_pct": self.btc_outperformance_pct,
        }


def _metric_series(name: str, data: Optional[SeriesLike], price: SeriesLike,
                   price_series: pd.Series) -> pd.Series:
    """Validated metric series, positionally aligned with the price series."""
    if data is None or len(data) == 0:
        raise DataUnavailableError(f"Metric {name!r} has no data")

    series = to_series(data)
    if len(series) != len(price_series):
        raise AlignmentError(
            f"Metric {name!r} has {len(series)} values, price has {len(price_series)}"
        )
    if (isinstance(data, pd.Series) and isinstance(price, pd.Series)
            and not data.index.equals(price.index)):
        raise AlignmentError(f"Metric {name!r} dates do not match the price dates")

    return series.set_axis(price_series.index)


def rank_metrics(all_metrics: Mapping[str, SeriesLike],
                 price: SeriesLike,
                 dca_window: WindowSpec,
                 zscore_window: WindowSpec,
                 budget_per_day: float,
                 temperature: float = 1.0,
                 models: Iterable[Union[str, WeightingModel]] = (WeightingModel.SOFTMAX,)) -> List[RankingResult]:
    """
    Rank metrics by tuned DCA profit.

    Args:
        all_metrics: Mapping of metric name to series (base + derived)
        price: Full daily BTC price series, aligned with every metric
        dca_window: DCA look-back (days, window name, or None for all)
        zscore_window: Z-score look-back (days, window name, or None for all)
        budget_per_day: USD per day of regular DCA
        temperature: Weighting model temperature
        models: Weighting models to evaluate

    Returns:
        RankingResult list, best profit first (ties keep input order)
    """
    # Parameter errors surface before any metric is evaluated
    resolve_window(dca_window)
    resolve_window(zscore_window)
    if not math.isfinite(temperature) or temperature <= 0:
        raise InvalidParameterError(f"Temperature must be positive, got {temperature}")
    model_list = [get_model(m) for m in models]

    price_series = to_series(price)
    if price_series.empty:
        raise DataUnavailableError("Price series is empty")

    calculator = PerformanceCalculator(budget_per_day)
    now_price = current_price(price_series)

    regular = compute_regular_dca(price_series, budget_per_day, dca_window)
    regular_perf = calculator.evaluate(regular, price_series)

    results: List[RankingResult] = []
    skipped = 0

    for name, data in all_metrics.items():
        try:
            series = _metric_series(name, data, price, price_series)
        except DataUnavailableError as e:
            logger.debug(f"Skipping {name}: {e}")
            skipped += 1
            continue
        except AlignmentError as e:
            logger.warning(f"Skipping {name}: {e}")
            skipped += 1
            continue

        z = compute_zscores(series, zscore_window)

        for model in model_list:
            tuned = compute_tuned_dca(price_series, z, budget_per_day, dca_window,
                                      model=model, temperature=temperature)
            tuned_perf = calculator.evaluate(tuned, price_series)
            results.append(_build_result(name, model, tuned_perf, regular_perf, calculator))

    logger.debug(
        f"Ranked {len(results)} metric/model pairs, skipped {skipped} metrics "
        f"(current price {now_price:.2f})"
    )

    return sorted(results, key=lambda r: r.profit_pct, reverse=True)


def _build_result(name: str, model: WeightingModel, tuned: DCAPerformance,
                  regular: DCAPerformance, calculator: PerformanceCalculator) -> RankingResult:
    return RankingResult(
        metric=name,
        model=model.label,
        profit_pct=tuned.profit_pct,
        btc_bought=tuned.btc_bought,
        regular_profit_pct=regular.profit_pct,
        regular_btc_bought=regular.btc_bought,
        outperformance_pct=calculator.outperformance_pct(tuned, regular),
        btc_outperformance_pct=calculator.btc_outperformance_pct(tuned.btc_bought, regular.btc_bought),
    )


class MetricRanker:
    """
    Ranker bound to one EngineSettings value.

    The settings are passed in, never read from shared state, so rankers
    with different settings can run side by side.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def rank(self, metrics: Mapping[str, SeriesLike],
             price: Optional[SeriesLike] = None) -> List[RankingResult]:
        """
        Rank base metrics plus every derived metric.

        Args:
            metrics: Mapping of base metric name to series
            price: Price series (default: the "close" metric)

        Returns:
            RankingResult list, best first
        """
        if price is None:
            price = metrics.get(PRICE_METRIC)
            if price is None:
                raise DataUnavailableError(f"No {PRICE_METRIC!r} metric to use as price")

        universe = MetricUniverse(metrics)
        s = self.settings
        return rank_metrics(
            universe,
            price,
            dca_window=s.dca_window,
            zscore_window=s.zscore_window,
            budget_per_day=s.budget_per_day,
            temperature=s.temperature,
            models=s.models,
        )

    def best(self, metrics: Mapping[str, SeriesLike],
             price: Optional[SeriesLike] = None) -> Optional[RankingResult]:
        """Top (metric, model) pair, or None if nothing could be ranked."""
        ranking = self.rank(metrics, price)
        return ranking[0] if ranking else None
