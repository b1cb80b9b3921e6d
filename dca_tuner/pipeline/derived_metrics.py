"""
Derived Metrics - Composite metrics computed from base metric series.

Each derived metric is a strategy object with a name and a pure compute()
over the full base-metric mapping. DERIVED_METRICS is the registered set.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Dict, Iterator, Optional, Tuple

import numpy as np
import pandas as pd

from .zscore import SeriesLike, to_series

logger = logging.getLogger(__name__)


def _empty() -> pd.Series:
    return pd.Series([], dtype=float)


class DerivedMetric(ABC):
    """
    Abstract base class for derived metrics.

    compute() returns a series of the same length as its inputs, or an
    empty series when the inputs are missing or misaligned.
    """

    def __init__(self, name: str, inputs: Tuple[str, ...]):
        self.name = name
        self.inputs = inputs

    def _gather(self, metrics: Mapping) -> Optional[list]:
        """Input series as floats, or None if any is missing or lengths differ."""
        series = []
        for key in self.inputs:
            values = metrics.get(key)
            if values is None or len(values) == 0:
                logger.debug(f"{self.name}: missing input {key!r}")
                return None
            series.append(to_series(values))

        if len({len(s) for s in series}) > 1:
            logger.debug(f"{self.name}: inputs {self.inputs} have different lengths")
            return None
        return series

    @abstractmethod
    def compute(self, metrics: Mapping) -> pd.Series:
        """
        Compute the derived series.

        Args:
            metrics: Mapping of metric name to series

        Returns:
            Derived series (empty if unavailable)
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, inputs={self.inputs})"


class RatioMetric(DerivedMetric):
    """
    Ratio of two base metrics.

    Signal = numerator / denominator, NaN where either side is missing or
    the denominator is zero.
    """

    def __init__(self, name: str, numerator: str, denominator: str):
        super().__init__(name=name, inputs=(numerator, denominator))
        self.numerator = numerator
        self.denominator = denominator

    def compute(self, metrics: Mapping) -> pd.Series:
        series = self._gather(metrics)
        if series is None:
            return _empty()

        num, den = series
        index = num.index
        num_values = num.to_numpy()
        den_values = den.to_numpy()

        ratio = np.full(len(num_values), np.nan)
        ok = np.isfinite(num_values) & np.isfinite(den_values) & (den_values != 0)
        np.divide(num_values, den_values, out=ratio, where=ok)
        return pd.Series(ratio, index=index)


DERIVED_METRICS: Tuple[DerivedMetric, ...] = (
    RatioMetric("MVRV Ratio", numerator="marketcap", denominator="realized-cap"),
    RatioMetric("Mayer Multiple", numerator="close", denominator="200d-sma"),
)


def compute_derived_metric(metric: DerivedMetric, metrics: Mapping) -> pd.Series:
    """Compute one derived metric; a failing formula yields an empty series."""
    try:
        return metric.compute(metrics)
    except Exception:
        logger.warning(f"Derived metric {metric.name!r} failed", exc_info=True)
        return _empty()


def compute_derived_metrics(metrics: Mapping,
                            definitions: Tuple[DerivedMetric, ...] = DERIVED_METRICS) -> Dict[str, pd.Series]:
    """
    Compute every registered derived metric.

    Args:
        metrics: Mapping of base metric name to series
        definitions: Derived metric definitions (default: DERIVED_METRICS)

    Returns:
        Dict mapping derived metric names to series; unavailable metrics
        map to an empty series
    """
    return {metric.name: compute_derived_metric(metric, metrics) for metric in definitions}


class MetricUniverse(Mapping):
    """
    Read-only view of base plus derived metrics.

    Derived series are computed on first access and kept for the lifetime
    of the object, i.e. one aggregation pass. Base metrics take precedence
    over a derived metric of the same name.
    """

    def __init__(self, base: Mapping,
                 definitions: Tuple[DerivedMetric, ...] = DERIVED_METRICS):
        self._base = dict(base)
        self._definitions = {d.name: d for d in definitions if d.name not in self._base}
        self._cache: Dict[str, pd.Series] = {}

    def __getitem__(self, name: str) -> SeriesLike:
        if name in self._base:
            return self._base[name]
        if name in self._cache:
            return self._cache[name]
        if name in self._definitions:
            self._cache[name] = compute_derived_metric(self._definitions[name], self._base)
            return self._cache[name]
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        yield from self._base
        yield from self._definitions

    def __len__(self) -> int:
        return len(self._base) + len(self._definitions)

    @property
    def derived_names(self) -> list:
        return list(self._definitions)

    def computed(self) -> list:
        """Names of derived metrics computed so far."""
        return list(self._cache)
