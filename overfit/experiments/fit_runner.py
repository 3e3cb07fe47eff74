"""
Fault-tolerant model fitting.

run_fit calls a user-supplied fit function once and turns any exception it
raises into a Failure outcome, so one bad resample cannot abort a batch of
repetitions.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from overfit.data.dataset import DataSet
from overfit.models.base import FitFunction, FittedModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitOutcome:
    """Result of one fit attempt: exactly one of `model` / `error` is set.

    Attributes:
        model: The fitted model on success.
        error: Description of the failure.
        error_type: Exception class name on failure.
    """

    model: Optional[FittedModel] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.model is None) == (self.error is None):
            raise ValueError("FitOutcome needs exactly one of model or error")

    @classmethod
    def success(cls, model: FittedModel) -> FitOutcome:
        return cls(model=model)

    @classmethod
    def failure(cls, exc: BaseException) -> FitOutcome:
        return cls(error=str(exc) or type(exc).__name__, error_type=type(exc).__name__)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> FittedModel:
        """Return the model, or raise RuntimeError for a failed outcome."""
        if self.model is None:
            raise RuntimeError(f"Fit failed: {self.error}")
        return self.model


def run_fit(fit_fn: FitFunction, dataset: DataSet) -> FitOutcome:
    """Fit once and capture the result.

    Args:
        fit_fn: Callable mapping a DataSet to a fitted model.
        dataset: Data to fit on.

    Returns:
        FitOutcome.success(model) if fit_fn returned, otherwise
        FitOutcome.failure(exc). Exception subclasses never escape;
        KeyboardInterrupt and SystemExit do.
    """
    try:
        model = fit_fn(dataset)
    except Exception as exc:
        logger.debug("Fit failed on %d rows: %s: %s", len(dataset), type(exc).__name__, exc)
        return FitOutcome.failure(exc)
    if model is None:
        return FitOutcome(error="Fit function returned None", error_type="NoneType")
    return FitOutcome.success(model)


def safe_fit(fit_fn: FitFunction) -> Callable[[DataSet], FitOutcome]:
    """Wrap a fit function so it returns a FitOutcome instead of raising."""

    @functools.wraps(fit_fn)
    def wrapper(dataset: DataSet) -> FitOutcome:
        return run_fit(fit_fn, dataset)

    return wrapper
