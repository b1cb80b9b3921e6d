"""
DCA Tuner - Main Entry Point

Example usage of the pipeline architecture:
1. MetricDataPipeline: Fetch and align metric series
2. Derived metrics: MVRV Ratio, Mayer Multiple
3. MetricRanker: z-score -> softmax weights -> tuned DCA vs regular DCA
4. Leaderboard: metrics ranked by tuned DCA profit

Usage:
    python main.py [settings.yaml]
"""

import logging
import sys
from typing import List, Optional

from dca_tuner.config import EngineSettings, load_settings
from dca_tuner.pipeline import (
    MetricDataPipeline,
    MetricRanker,
    RankingResult,
    compute_derived_metrics,
    PRICE_METRIC
)


def print_leaderboard(results: List[RankingResult]):
    """Print the ranking as a table."""
    print(f"{'#':>3}  {'Metric':<55} {'Model':<8} {'Tuned':>7} {'DCA':>7} {'Out':>6} {'BTC':>9} {'BTC out':>8}")
    for rank, r in enumerate(results, start=1):
        print(f"{rank:>3}  {r.metric:<55} {r.model:<8} {r.profit_pct:>6}% {r.regular_profit_pct:>6}% "
              f"{r.outperformance_pct:>5}% {r.btc_bought:>9.3f} {r.btc_outperformance_pct:>7}%")


def main(settings_path: Optional[str] = None, pipeline: Optional[MetricDataPipeline] = None):
    """Run the full pipeline."""
    settings = load_settings(settings_path) if settings_path else EngineSettings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # ==========================================================================
    # 1. DATA EXTRACTION & ALIGNMENT
    # ==========================================================================
    print("=" * 60)
    print("Step 1: Data Extraction & Alignment")
    print("=" * 60)

    if pipeline is None:
        pipeline = MetricDataPipeline(api_base=settings.api_base, timeout=settings.timeout)

    pipeline.fetch()
    metrics = pipeline.preprocess()

    if not metrics or PRICE_METRIC not in metrics:
        raise RuntimeError("No price data fetched. Check the API base URL.")

    dates = pipeline.get_dates()
    print(f"Fetched {len(metrics)} metrics")
    if dates:
        print(f"Date range: {dates[0]} to {dates[-1]}")

    # ==========================================================================
    # 2. DERIVED METRICS
    # ==========================================================================
    print("\n" + "=" * 60)
    print("Step 2: Derived Metrics")
    print("=" * 60)

    derived = compute_derived_metrics(metrics)
    for name, series in derived.items():
        status = f"{len(series)} values" if len(series) else "unavailable"
        print(f"  - {name}: {status}")

    # ==========================================================================
    # 3. RANKING
    # ==========================================================================
    print("\n" + "=" * 60)
    print("Step 3: Ranking")
    print("=" * 60)
    print(f"DCA window: {settings.dca_window}, z-score window: {settings.zscore_window}, "
          f"budget: ${settings.budget_per_day:.2f}/day, temperature: {settings.temperature}")

    ranker = MetricRanker(settings)
    results = ranker.rank(metrics)

    print_leaderboard(results)

    if results:
        best = results[0]
        print(f"\nBest: {best.metric} ({best.model}) {best.profit_pct}% "
              f"vs {best.regular_profit_pct}% regular DCA")

    print("\n" + "=" * 60)
    print("Pipeline Complete!")
    print("=" * 60)

    return results


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
