"""
Metric catalog - base metric identifiers served by the metric API.
"""

PRICE_METRIC = "close"

METRICS_LIST = [
    "close",
    "realized-price",
    "200d-sma",
    "true-market-mean",
    "vaulted-price",
    "marketcap",
    "realized-cap",
    "adjusted-spent-output-profit-ratio",
    "sell-side-risk-ratio",
    "liveliness",
    "short-term-holders-supply",
    "short-term-holders-utxo-count",
    "short-term-holders-realized-cap",
    "short-term-holders-realized-price-ratio",
    "short-term-holders-realized-profit",
    "short-term-holders-negative-realized-loss",
    "short-term-holders-adjusted-spent-output-profit-ratio",
    "short-term-holders-unrealized-profit",
    "short-term-holders-negative-unrealized-loss",
    "short-term-holders-coinblocks-destroyed",
]
