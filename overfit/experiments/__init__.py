"""
Experiment runners for repeated resampling.

This module provides:
- fit_runner: fault-tolerant single fits (FitOutcome)
- driver: cross-validation and bootstrap drivers
- overfitting: training vs. fresh-data error across spline df
"""

from overfit.experiments.driver import (
    BootstrapResult,
    CrossValidationResult,
    compare_models,
    full_data_rmse,
    run_bootstrap,
    run_cross_validation,
)
from overfit.experiments.fit_runner import FitOutcome, run_fit, safe_fit
from overfit.experiments.overfitting import overfitting_curve

__all__ = [
    "BootstrapResult",
    "CrossValidationResult",
    "FitOutcome",
    "compare_models",
    "full_data_rmse",
    "overfitting_curve",
    "run_bootstrap",
    "run_cross_validation",
    "run_fit",
    "safe_fit",
]
