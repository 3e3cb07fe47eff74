"""Evaluation module for regression error metrics."""

from overfit.evaluation.metrics import compute_metrics, compute_rmse, rmse, summarize

__all__ = [
    "compute_metrics",
    "compute_rmse",
    "rmse",
    "summarize",
]
