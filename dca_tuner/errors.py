"""
Errors raised by the DCA tuner.

- InvalidParameterError: bad caller input (temperature, window, budget)
- DataUnavailableError: a metric has no usable data
- AlignmentError: series that should share a date axis do not
- MetricSourceError: the metric API failed or returned a bad payload
"""


class DCATunerError(Exception):
    """Base class for all pipeline errors."""


class InvalidParameterError(DCATunerError, ValueError):
    """A parameter is outside its valid domain."""


class DataUnavailableError(DCATunerError):
    """A metric is empty or missing."""


class AlignmentError(DCATunerError):
    """Series differ in length or date labels."""


class MetricSourceError(DCATunerError):
    """The metric source returned an error or an unexpected payload."""
