"""
Engine settings.

Settings are an immutable value passed into each pipeline call. Nothing in
the engine reads global state; changing the temperature or a window means
building a new EngineSettings (see ``with_overrides``).

Usage:
    from dca_tuner.config import EngineSettings, load_settings

    settings = load_settings("settings.yaml")
    settings = settings.with_overrides(temperature=0.5)
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

from .errors import InvalidParameterError


# Named look-back windows in days; None means all history.
WINDOWS: dict[str, Optional[int]] = {
    "2yr": 730,
    "4yr": 1460,
    "8yr": 2920,
    "all": None,
}

DEFAULT_API_BASE = "https://bitcoinresearchkit.org"

WindowSpec = Union[str, int, float, None]


def resolve_window(value: WindowSpec) -> Optional[int]:
    """
    Convert a window specification to a number of days.

    Args:
        value: Window name ("2yr", "4yr", "8yr", "all"), a positive int,
               or None / math.inf for unbounded

    Returns:
        Number of days, or None for an unbounded window
    """
    if value is None:
        return None
    if isinstance(value, str):
        if value not in WINDOWS:
            raise InvalidParameterError(
                f"Unknown window: {value!r}. Available: {list(WINDOWS)}"
            )
        return WINDOWS[value]
    if isinstance(value, bool):
        raise InvalidParameterError(f"Invalid window size: {value!r}")
    if isinstance(value, float):
        if math.isinf(value) and value > 0:
            return None
        if not value.is_integer():
            raise InvalidParameterError(f"Window size must be a whole number of days: {value}")
        value = int(value)
    if not isinstance(value, numbers.Integral) or value < 1:
        raise InvalidParameterError(f"Window size must be >= 1, got {value!r}")
    return int(value)


def _real(settings: "EngineSettings", name: str) -> float:
    """Read a numeric field as float; strings and bools are rejected."""
    value = getattr(settings, name)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    value = float(value)
    object.__setattr__(settings, name, value)
    return value


@dataclass(frozen=True)
class EngineSettings:
    """
    Parameters for one ranking pass.

    dca_window: DCA look-back (window name or days)
    zscore_window: z-score look-back (window name or days)
    budget_per_day: USD spent per day by regular DCA
    temperature: softmax temperature (lower = more aggressive reallocation)
    models: weighting model names to rank
    api_base: metric API base URL
    timeout: HTTP timeout in seconds
    log_level: logging level name used by the entry point
    """
    dca_window: WindowSpec = "4yr"
    zscore_window: WindowSpec = "4yr"
    budget_per_day: float = 10.0
    temperature: float = 1.0
    models: tuple[str, ...] = ("softmax",)
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self):
        from .pipeline.models import get_model

        resolve_window(self.dca_window)
        resolve_window(self.zscore_window)
        budget = _real(self, "budget_per_day")
        if not math.isfinite(budget) or budget < 0:
            raise InvalidParameterError(f"budget_per_day must be >= 0, got {budget}")
        temperature = _real(self, "temperature")
        if not math.isfinite(temperature) or temperature <= 0:
            raise InvalidParameterError(f"temperature must be > 0, got {temperature}")
        timeout = _real(self, "timeout")
        if not timeout > 0:
            raise InvalidParameterError(f"timeout must be > 0, got {timeout}")

        # YAML yields a scalar for a single model and lists for several
        models = self.models
        if isinstance(models, str):
            models = (models,)
        elif not isinstance(models, (list, tuple)):
            raise InvalidParameterError(f"models must be a list of model names, got {models!r}")
        if not models:
            raise InvalidParameterError("At least one weighting model is required")
        for name in models:
            get_model(name)
        object.__setattr__(self, "models", tuple(models))

    @property
    def dca_days(self) -> Optional[int]:
        """DCA window in days (None = all history)."""
        return resolve_window(self.dca_window)

    @property
    def zscore_days(self) -> Optional[int]:
        """Z-score window in days (None = all history)."""
        return resolve_window(self.zscore_window)

    def with_overrides(self, **changes) -> "EngineSettings":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_settings(path: Union[str, Path]) -> EngineSettings:
    """
    Load settings from a YAML file.

    Missing keys take their defaults. Unknown keys are rejected.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise InvalidParameterError(f"Settings file {path} must contain a mapping")

    known = {f.name for f in fields(EngineSettings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidParameterError(f"Unknown settings in {path}: {unknown}")

    return EngineSettings(**raw)
