"""
Build fit functions from model configuration.
"""

from __future__ import annotations

from functools import partial

from overfit.config import ModelConfig
from overfit.data.dataset import DataSet
from overfit.models.base import FitFunction
from overfit.models.linear import LinearModel
from overfit.models.spline import SplineModel


def _fit_linear(data: DataSet) -> LinearModel:
    return LinearModel().fit(data)


def _fit_spline(data: DataSet, df: int, degree: int) -> SplineModel:
    return SplineModel(df=df, degree=degree).fit(data)


def make_fit_fn(cfg: ModelConfig) -> FitFunction:
    """Return a `DataSet -> model` callable for the configured model.

    The callable is a module-level function or partial, so it pickles and
    can be shipped to joblib worker processes.
    """
    if cfg.kind == "linear":
        return _fit_linear
    if cfg.kind == "spline":
        return partial(_fit_spline, df=cfg.df, degree=cfg.degree)
    raise ValueError(f"Unknown model kind: {cfg.kind}. Supported: ['linear', 'spline']")
