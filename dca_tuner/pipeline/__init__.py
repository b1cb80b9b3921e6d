"""
Pipeline module for the DCA tuner.

Class- and function-based pipeline:
- MetricDataPipeline: Metric fetching and date alignment
- compute_zscores: Rolling z-score of a metric series
- softmax / WeightingModel: Z-scores -> allocation weights
- compute_regular_dca / compute_tuned_dca: Daily BTC purchases
- DerivedMetric / compute_derived_metrics: Composite metrics (ratios)
- PerformanceCalculator: Profit at the current price
- rank_metrics / MetricRanker: Metric leaderboard
"""

from .catalog import METRICS_LIST, PRICE_METRIC
from .zscore import compute_zscores, latest_zscore
from .models import WeightingModel, get_model, softmax
from .dca import (
    compute_regular_dca,
    compute_tuned_dca,
    compute_all_tuned_dca,
    window_length,
    total_spent
)
from .derived_metrics import (
    DerivedMetric,
    RatioMetric,
    DERIVED_METRICS,
    MetricUniverse,
    compute_derived_metrics
)
from .performance import DCAPerformance, PerformanceCalculator
from .ranking import MetricRanker, RankingResult, rank_metrics
from .data_pipeline import MetricDataPipeline


__all__ = [
    # Data
    "MetricDataPipeline",
    "METRICS_LIST",
    "PRICE_METRIC",

    # Z-scores & weighting
    "compute_zscores",
    "latest_zscore",
    "softmax",
    "WeightingModel",
    "get_model",

    # DCA
    "compute_regular_dca",
    "compute_tuned_dca",
    "compute_all_tuned_dca",
    "window_length",
    "total_spent",

    # Derived metrics
    "DerivedMetric",
    "RatioMetric",
    "DERIVED_METRICS",
    "MetricUniverse",
    "compute_derived_metrics",

    # Performance & ranking
    "DCAPerformance",
    "PerformanceCalculator",
    "RankingResult",
    "MetricRanker",
    "rank_metrics",
]
