"""Model implementations fitted inside repeated experiments."""

from overfit.config import ModelConfig
from overfit.models.base import FitFunction, FittedModel
from overfit.models.ensemble import BaggedModel
from overfit.models.factory import make_fit_fn
from overfit.models.linear import LinearModel
from overfit.models.spline import SplineModel

__all__ = [
    "BaggedModel",
    "FitFunction",
    "FittedModel",
    "LinearModel",
    "ModelConfig",
    "SplineModel",
    "make_fit_fn",
]
