"""
DCA Tuner - Source Module

All pipeline classes and functions are available from dca_tuner.pipeline:

    from dca_tuner.pipeline import (
        MetricDataPipeline,
        compute_zscores,
        softmax,
        compute_regular_dca,
        compute_tuned_dca,
        compute_derived_metrics,
        MetricRanker,
        rank_metrics
    )

Settings live in dca_tuner.config, errors in dca_tuner.errors.
"""

from .config import EngineSettings, load_settings, resolve_window, WINDOWS
from .errors import (
    DCATunerError,
    InvalidParameterError,
    DataUnavailableError,
    AlignmentError,
    MetricSourceError
)
from .pipeline import *
