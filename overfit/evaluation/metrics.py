"""
Prediction-error metrics for fitted regression models.

Implements:
- RMSE: root-mean-square error, the headline out-of-sample metric
- MAE: mean absolute error
- R2: coefficient of determination
"""

from __future__ import annotations

from typing import Dict, List

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from overfit.data.dataset import DataSet
from overfit.errors import DimensionMismatch, EmptyDataset
from overfit.models.base import FittedModel


def _check_pair(y_true: np.ndarray, y_pred: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.size == 0:
        raise EmptyDataset("Cannot compute an error metric on zero rows")
    if y_pred.ndim != 1 or y_pred.shape != y_true.shape:
        raise DimensionMismatch(
            f"Expected one prediction per row {y_true.shape}, got shape {y_pred.shape}"
        )
    return y_true, y_pred


def predict_rows(model: FittedModel, dataset: DataSet) -> np.ndarray:
    """Predict every row of a dataset.

    Raises:
        DimensionMismatch: If the model rejects the inputs or returns
            anything other than one prediction per row.
    """
    try:
        y_pred = model.predict(dataset.x)
    except (ValueError, IndexError, KeyError) as exc:
        raise DimensionMismatch(f"Model could not predict dataset rows: {exc}") from exc
    y_pred = np.asarray(y_pred, dtype=float)
    # scikit-learn regressors may return a (n, 1) column
    if y_pred.ndim == 2 and y_pred.shape[1] == 1:
        y_pred = y_pred.ravel()
    return _check_pair(dataset.y, y_pred)[1]


def compute_rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Compute root-mean-square error.

    Args:
        y_true: Observed responses.
        y_pred: Predicted responses, same shape.

    Returns:
        sqrt(mean((y_pred - y_true)^2)), always >= 0.
    """
    y_true, y_pred = _check_pair(y_true, y_pred)
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def rmse(model: FittedModel, dataset: DataSet) -> float:
    """RMSE of a fitted model's predictions against a dataset.

    Raises:
        EmptyDataset: If the dataset has no rows.
        DimensionMismatch: See predict_rows.
    """
    if len(dataset) == 0:
        raise EmptyDataset("Cannot evaluate a model on an empty dataset")
    return compute_rmse(dataset.y, predict_rows(model, dataset))


def compute_metrics(
    model: FittedModel,
    dataset: DataSet,
    metrics: List[str],
) -> Dict[str, float]:
    """Compute multiple evaluation metrics.

    Args:
        model: Fitted model with a predict method.
        dataset: Observations to evaluate against.
        metrics: List of metric names to compute.
            Supported: "rmse", "mae", "r2".

    Returns:
        Dictionary mapping metric name to value.
    """
    if len(dataset) == 0:
        raise EmptyDataset("Cannot evaluate a model on an empty dataset")
    y_true = dataset.y
    y_pred = predict_rows(model, dataset)

    results = {}

    metric_funcs = {
        "rmse": lambda: compute_rmse(y_true, y_pred),
        "mae": lambda: float(mean_absolute_error(y_true, y_pred)),
        "r2": lambda: float(r2_score(y_true, y_pred)),
    }

    for metric in metrics:
        metric_lower = metric.lower()
        if metric_lower in metric_funcs:
            results[metric_lower] = metric_funcs[metric_lower]()
        else:
            raise ValueError(f"Unknown metric: {metric}. Supported: {list(metric_funcs.keys())}")

    return results


def summarize(values: np.ndarray) -> Dict[str, float]:
    """Mean, spread and range of finite values; NaN entries count as failures."""
    values = np.asarray(values, dtype=float)
    ok = values[np.isfinite(values)]
    n_failed = int(values.size - ok.size)
    if ok.size == 0:
        return {"mean": float("nan"), "std": float("nan"), "min": float("nan"),
                "max": float("nan"), "n": 0, "n_failed": n_failed}
    return {
        "mean": float(ok.mean()),
        "std": float(ok.std(ddof=1)) if ok.size > 1 else 0.0,
        "min": float(ok.min()),
        "max": float(ok.max()),
        "n": int(ok.size),
        "n_failed": n_failed,
    }
