"""
Exception types raised by the resampling toolkit.

Caller mistakes (bad proportions, empty data, shape problems) derive from
ValueError and fail fast. FitError is what fitting functions raise when a
model cannot be estimated on a given subset; the driver records it as a
failed repetition instead of letting it escape.
"""

from __future__ import annotations


class OverfitError(Exception):
    """Base class for all toolkit errors."""


class InvalidProportions(OverfitError, ValueError):
    """Partition fractions are negative, empty, or sum to more than 1."""


class EmptyDataset(OverfitError, ValueError):
    """An operation was invoked on a dataset with zero rows."""


class DimensionMismatch(OverfitError, ValueError):
    """Arrays or predictions do not line up with the dataset rows."""


class FitError(OverfitError, RuntimeError):
    """A model could not be fitted to the supplied data."""
