"""
Regression spline with a tunable number of degrees of freedom.

Wraps scikit-learn's SplineTransformer followed by least squares. The
degrees of freedom equal the number of B-spline basis functions, so raising
df makes the curve more flexible; df equal to the number of distinct x
values interpolates the training data.
"""

from __future__ import annotations

import numpy as np
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import SplineTransformer

from overfit.data.dataset import DataSet
from overfit.errors import FitError
from overfit.models.base import as_column


class SplineModel:
    """B-spline least-squares fit.

    Knots sit at quantiles of the distinct training x values, with
    n_knots = df - degree + 1. Outside the training range the curve is
    extended linearly.

    Fitting fails with FitError when:
    - df < degree + 1 (fewer than two knots), or
    - df exceeds the number of distinct x values, which is common for
      bootstrap resamples because they repeat rows.
    """

    def __init__(self, df: int = 5, degree: int = 3) -> None:
        if degree < 1:
            raise ValueError(f"degree must be >= 1, got {degree}")
        self.df = df
        self.degree = degree
        self._model: Pipeline | None = None

    @property
    def n_knots(self) -> int:
        return self.df - self.degree + 1

    def _knots(self, x: np.ndarray) -> np.ndarray:
        x_unique = np.unique(x)
        if self.n_knots < 2:
            raise FitError(
                f"df={self.df} is too small for a degree-{self.degree} spline "
                f"(need df >= {self.degree + 1})"
            )
        if self.df > x_unique.size:
            raise FitError(
                f"df={self.df} exceeds the {x_unique.size} distinct x values available"
            )
        knots = np.quantile(x_unique, np.linspace(0.0, 1.0, self.n_knots))
        if np.unique(knots).size < self.n_knots:
            raise FitError("Spline knots collapsed onto repeated x values")
        return knots

    def fit(self, data: DataSet) -> SplineModel:
        """Fit the spline on a dataset.

        Args:
            data: Training observations.

        Returns:
            self, so `SplineModel(df).fit` can be used as a fit function.

        Raises:
            FitError: See class docstring.
        """
        knots = self._knots(data.x)
        # B-splines form a partition of unity, so no separate intercept
        self._model = make_pipeline(
            SplineTransformer(
                knots=knots.reshape(-1, 1),
                degree=self.degree,
                extrapolation="linear",
            ),
            LinearRegression(fit_intercept=False),
        )
        self._model.fit(as_column(data.x), data.y)
        return self

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Evaluate the fitted curve at each x.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.predict(as_column(x))
