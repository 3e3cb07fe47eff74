"""
Overfitting curve: training vs. fresh-data error across model flexibility.

For each spline df, fit on one simulated dataset, then measure RMSE on the
training rows and on datasets resimulated at the same x. Training error
keeps falling as df grows while fresh-data error turns back up.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from overfit.data.dataset import DataSet
from overfit.data.splitters import spawn_generators
from overfit.evaluation.metrics import rmse
from overfit.experiments.fit_runner import run_fit
from overfit.io.synthetic_generator import SyntheticGenerator
from overfit.models.spline import SplineModel


def train_test_rmse(
    model,
    train: DataSet,
    test_sets: List[DataSet],
) -> tuple[float, float]:
    """RMSE on the training data and mean RMSE over the test sets."""
    train_err = rmse(model, train)
    test_err = float(np.mean([rmse(model, t) for t in test_sets]))
    return train_err, test_err


def overfitting_curve(
    generator: SyntheticGenerator,
    dfs: Iterable[int],
    n_samples: Optional[int] = None,
    n_test_sets: int = 10,
    degree: int = 3,
    random_seed: Optional[int] = 42,
    show_progress: bool = False,
) -> pd.DataFrame:
    """Sweep spline degrees of freedom on one simulated dataset.

    Args:
        generator: Data-generating process.
        dfs: Spline degrees of freedom to try.
        n_samples: Training set size. Defaults to the generator's config.
        n_test_sets: Fresh datasets (same x, new noise) per evaluation.
        degree: Spline polynomial degree.
        random_seed: Seed for the training and test draws.
        show_progress: Whether to show progress bar.

    Returns:
        DataFrame with columns df, train_rmse, test_rmse, error. Failed fits
        have NaN errors and the failure text in `error`.
    """
    train_rng, *test_rngs = spawn_generators(random_seed, n_test_sets + 1)
    train = generator.generate(n_samples, rng=train_rng)
    test_sets = [generator.resimulate(train, rng) for rng in test_rngs]

    dfs = list(dfs)
    iterator = dfs
    if show_progress:
        from tqdm import tqdm
        iterator = tqdm(dfs, desc="Spline df")

    records = []
    for df in iterator:
        outcome = run_fit(lambda d, df=df: SplineModel(df=df, degree=degree).fit(d), train)
        if outcome.ok:
            train_err, test_err = train_test_rmse(outcome.model, train, test_sets)
            records.append({"df": df, "train_rmse": train_err, "test_rmse": test_err, "error": None})
        else:
            records.append({"df": df, "train_rmse": np.nan, "test_rmse": np.nan, "error": outcome.error})

    return pd.DataFrame.from_records(records, columns=["df", "train_rmse", "test_rmse", "error"])
