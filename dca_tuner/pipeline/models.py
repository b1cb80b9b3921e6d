"""
Weighting Models - Turn a window of z-scores into allocation weights.

Each model maps z-scores to non-negative weights that sum to 1. Tuned DCA
spends the period budget in proportion to these weights.

The set of models is closed: add a member to WeightingModel to register
a new one.
"""

import math
from enum import Enum
from typing import Union

import numpy as np
import pandas as pd

from ..errors import InvalidParameterError
from .zscore import SeriesLike


Weights = Union[pd.Series, np.ndarray]


def softmax(z_scores: SeriesLike, temperature: float = 1.0) -> Weights:
    """
    Temperature-scaled softmax.

    weight[i] = exp(z[i] / T) / sum_j exp(z[j] / T)

    Lower temperature concentrates the budget on the highest z-score days;
    a large temperature approaches uniform allocation.

    Args:
        z_scores: Z-score window. Non-finite entries count as 0.
        temperature: Softmax temperature, must be > 0

    Returns:
        Weights with the same length as the input. A pd.Series input
        returns a pd.Series with the same index.
    """
    if not math.isfinite(temperature) or temperature <= 0:
        raise InvalidParameterError(f"Temperature must be positive, got {temperature}")

    index = z_scores.index if isinstance(z_scores, pd.Series) else None
    z = pd.to_numeric(pd.Series(np.asarray(z_scores, dtype=object)), errors="coerce").to_numpy(dtype=float)

    if z.size == 0:
        weights = np.array([], dtype=float)
    else:
        scaled = np.where(np.isfinite(z), z / temperature, 0.0)
        scaled = np.nan_to_num(scaled)
        exp_scores = np.exp(scaled - scaled.max())
        total = exp_scores.sum()
        weights = exp_scores / total if total > 0 else np.zeros_like(exp_scores)

    if index is not None:
        return pd.Series(weights, index=index)
    return weights


# Model name -> weighting function
_MODEL_FUNCTIONS = {
    "softmax": softmax,
}


class WeightingModel(str, Enum):
    """Registered weighting models, callable as model(z_scores, temperature)."""
    SOFTMAX = "softmax"

    def __call__(self, z_scores: SeriesLike, temperature: float = 1.0) -> Weights:
        return _MODEL_FUNCTIONS[self.value](z_scores, temperature)

    @property
    def label(self) -> str:
        """Display name used in rankings."""
        return self.value.replace("_", " ").title()


def get_model(name: Union[str, WeightingModel]) -> WeightingModel:
    """Look up a weighting model by name."""
    try:
        return WeightingModel(name)
    except ValueError:
        raise InvalidParameterError(
            f"Unknown weighting model: {name!r}. "
            f"Available: {[m.value for m in WeightingModel]}"
        ) from None
