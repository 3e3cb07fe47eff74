"""
Ordinary least-squares straight line.

The correctly specified model for the linear generating process; serves as
the baseline the flexible spline fits are compared against.
"""

from __future__ import annotations

import numpy as np
from sklearn.linear_model import LinearRegression

from overfit.data.dataset import DataSet
from overfit.errors import FitError
from overfit.models.base import as_column


class LinearModel:
    """Least-squares line y = b0 + b1 * x."""

    def __init__(self) -> None:
        self._model: LinearRegression | None = None

    def fit(self, data: DataSet) -> LinearModel:
        """Fit on a dataset.

        Args:
            data: Training observations.

        Returns:
            self, so `LinearModel().fit` can be used as a fit function.

        Raises:
            FitError: If the data holds fewer than two distinct x values,
                which leaves the slope undetermined.
        """
        if np.unique(data.x).size < 2:
            raise FitError("Need at least two distinct x values to fit a line")
        self._model = LinearRegression()
        self._model.fit(as_column(data.x), data.y)
        return self

    @property
    def coefficients(self) -> tuple[float, float]:
        """(intercept, slope) of the fitted line."""
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return float(self._model.intercept_), float(self._model.coef_[0])

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Predict the response at each x.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.predict(as_column(x))
