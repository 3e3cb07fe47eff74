"""
Contracts between the resampling core and user-supplied models.

The core never looks inside a fitted model. It only needs a callable that
fits one to a DataSet, and a `predict` method on the result.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import numpy as np

from overfit.data.dataset import DataSet
from overfit.errors import DimensionMismatch


@runtime_checkable
class FittedModel(Protocol):
    """Anything that maps input values to one prediction per value."""

    def predict(self, x: np.ndarray) -> np.ndarray:
        ...


FitFunction = Callable[[DataSet], FittedModel]


def as_column(x: np.ndarray) -> np.ndarray:
    """Reshape 1-D input to the (n_samples, 1) matrix scikit-learn expects."""
    x = np.asarray(x, dtype=float)
    if x.ndim == 2 and x.shape[1] == 1:
        return x
    if x.ndim != 1:
        raise DimensionMismatch(f"Expected 1-D input values, got shape {x.shape}")
    return x.reshape(-1, 1)
