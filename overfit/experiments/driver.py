"""
Repeated-experiment drivers.

Two modes share one repetition engine:
- Cross-validation: partition -> fit on "train" -> RMSE on "test".
  Failed repetitions keep their slot with rmse=None so failure rates can
  be reported.
- Bootstrap / variability: draw from a DataSource -> fit. Failed fits are
  dropped and counted.

Every repetition gets its own generator spawned from one top-level seed,
so results are identical for a fixed seed whatever n_jobs is. Input
mistakes are raised before any repetition runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from overfit.data.dataset import DataSet
from overfit.data.sources import BootstrapSource, DataSource
from overfit.data.splitters import block_sizes, partition, spawn_generators
from overfit.errors import EmptyDataset, InvalidProportions
from overfit.evaluation.metrics import rmse, summarize
from overfit.experiments.fit_runner import FitOutcome, run_fit
from overfit.models.base import FitFunction, FittedModel
from overfit.models.ensemble import BaggedModel

logger = logging.getLogger(__name__)

TRAIN_LABEL = "train"
TEST_LABEL = "test"


@dataclass
class CVRow:
    """One cross-validation repetition.

    `rmse` is None when the fit or the evaluation failed; `error` then
    holds the reason.
    """

    repetition: int
    rmse: Optional[float]
    n_train: int
    n_test: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.rmse is not None


@dataclass
class CrossValidationResult:
    """Per-repetition test RMSE values, in repetition order."""

    rows: List[CVRow]
    repetitions: int
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def rmse_values(self) -> np.ndarray:
        """Test RMSE per completed repetition, NaN where it failed."""
        return np.array(
            [row.rmse if row.ok else np.nan for row in self.rows], dtype=float
        )

    @property
    def n_failed(self) -> int:
        return sum(1 for row in self.rows if not row.ok)

    @property
    def failure_rate(self) -> float:
        """Fraction of completed repetitions whose fit or evaluation failed."""
        if not self.rows:
            return 0.0
        return self.n_failed / len(self.rows)

    def summary(self) -> Dict[str, float]:
        """Mean, std, min, max of the successful RMSE values, plus counts."""
        stats = summarize(self.rmse_values())
        stats["failure_rate"] = self.failure_rate
        return stats

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "repetition": row.repetition,
                    "rmse": row.rmse,
                    "n_train": row.n_train,
                    "n_test": row.n_test,
                    "error": row.error,
                }
                for row in self.rows
            ],
            columns=["repetition", "rmse", "n_train", "n_test", "error"],
        )


@dataclass
class BootstrapRow:
    """One successful variability repetition."""

    repetition: int
    outcome: FitOutcome
    n_rows: int

    @property
    def model(self) -> FittedModel:
        return self.outcome.unwrap()


@dataclass
class BootstrapResult:
    """Successful fits in repetition order; failed repetitions are dropped.

    Attributes:
        rows: One BootstrapRow per successful repetition.
        repetitions: Number of repetitions requested.
        failures: (repetition, error) for each dropped repetition.
        cancelled: True if should_stop ended the run early.
    """

    rows: List[BootstrapRow]
    repetitions: int
    failures: List[Tuple[int, str]] = field(default_factory=list)
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    @property
    def n_failed(self) -> int:
        return len(self.failures)

    def models(self) -> List[FittedModel]:
        return [row.model for row in self.rows]

    def predictions(self, x_grid: np.ndarray) -> pd.DataFrame:
        """Long-format predictions of every fit on a grid of x values.

        Columns: repetition, x, prediction. Suited to overlaying the
        fitted curves to show their spread.
        """
        x_grid = np.asarray(x_grid, dtype=float)
        frames = [
            pd.DataFrame({
                "repetition": row.repetition,
                "x": x_grid,
                "prediction": np.asarray(row.model.predict(x_grid), dtype=float),
            })
            for row in self.rows
        ]
        if not frames:
            return pd.DataFrame(columns=["repetition", "x", "prediction"])
        return pd.concat(frames, ignore_index=True)

    def prediction_spread(self, x_grid: np.ndarray) -> pd.DataFrame:
        """Pointwise mean and standard deviation of the fitted curves."""
        preds = self.predictions(x_grid)
        return (
            preds.groupby("x")["prediction"]
            .agg(["mean", "std"])
            .reset_index()
        )

    def bag(self) -> BaggedModel:
        """Ensemble averaging every successful fit."""
        return BaggedModel(self.models())


def _run_repetitions(
    task: Callable[[int, np.random.Generator], object],
    repetitions: int,
    random_seed: Optional[int],
    n_jobs: int,
    backend: Optional[str],
    show_progress: bool,
    should_stop: Optional[Callable[[], bool]],
    desc: str,
) -> Tuple[list, bool]:
    """Run `task(r, rng)` for r in 0..repetitions-1.

    Returns results in repetition order and whether the run was cancelled.
    should_stop is checked before each repetition is dispatched.
    """
    generators = spawn_generators(random_seed, repetitions)
    state = {"cancelled": False}

    def jobs():
        for r, gen in enumerate(generators):
            if should_stop is not None and should_stop():
                state["cancelled"] = True
                return
            yield r, gen

    iterator = jobs()
    if show_progress:
        from tqdm import tqdm
        iterator = tqdm(iterator, total=repetitions, desc=desc)

    if n_jobs == 1:
        results = [task(r, gen) for r, gen in iterator]
    else:
        results = Parallel(n_jobs=n_jobs, backend=backend)(
            delayed(task)(r, gen) for r, gen in iterator
        )

    return list(results), state["cancelled"]


def _check_repetitions(repetitions: int) -> None:
    if repetitions < 1:
        raise ValueError(f"repetitions must be >= 1, got {repetitions}")


def _cv_repetition(
    r: int,
    rng: np.random.Generator,
    dataset: DataSet,
    fit_fn: FitFunction,
    proportions: Mapping[str, float],
) -> CVRow:
    parts = partition(dataset, proportions, rng)
    train, test = parts[TRAIN_LABEL], parts[TEST_LABEL]

    outcome = run_fit(fit_fn, train)
    if not outcome.ok:
        return CVRow(r, None, len(train), len(test), error=outcome.error)

    try:
        value = rmse(outcome.model, test)
    except Exception as exc:
        logger.debug("Evaluation failed in repetition %d: %s: %s", r, type(exc).__name__, exc)
        return CVRow(r, None, len(train), len(test), error=str(exc))
    return CVRow(r, value, len(train), len(test))


def run_cross_validation(
    dataset: DataSet,
    fit_fn: FitFunction,
    proportions: Mapping[str, float],
    repetitions: int = 1,
    random_seed: Optional[int] = None,
    n_jobs: int = 1,
    backend: Optional[str] = None,
    show_progress: bool = False,
    should_stop: Optional[Callable[[], bool]] = None,
) -> CrossValidationResult:
    """Estimate out-of-sample RMSE by repeated random train/test splits.

    Args:
        dataset: Observations to split.
        fit_fn: Callable fitting a model to a DataSet.
        proportions: Label -> fraction; must include "train" and "test".
            Extra labels are drawn but unused.
        repetitions: Number of independent splits.
        random_seed: Top-level seed. None uses fresh OS entropy.
        n_jobs: joblib worker count; 1 runs in-process, -1 uses all CPUs.
        backend: joblib backend name (default loky).
        show_progress: Whether to show progress bar.
        should_stop: Polled before each repetition; returning True stops
            the run and marks the result cancelled.

    Returns:
        CrossValidationResult with one row per completed repetition.

    Raises:
        EmptyDataset: If the dataset is empty or the test or train
            label would receive no rows.
        InvalidProportions: If fractions are malformed or a required
            label is missing.
    """
    _check_repetitions(repetitions)
    if len(dataset) == 0:
        raise EmptyDataset("Cannot cross-validate an empty dataset")

    sizes = block_sizes(len(dataset), proportions)
    for label in (TRAIN_LABEL, TEST_LABEL):
        if label not in sizes:
            raise InvalidProportions(f"proportions must include a '{label}' label")
        if sizes[label] == 0:
            raise EmptyDataset(
                f"'{label}' would receive no rows out of {len(dataset)}"
            )

    task = partial(
        _cv_repetition,
        dataset=dataset,
        fit_fn=fit_fn,
        proportions=dict(proportions),
    )
    rows, cancelled = _run_repetitions(
        task, repetitions, random_seed, n_jobs, backend,
        show_progress, should_stop, desc="CV repetitions",
    )
    return CrossValidationResult(rows=rows, repetitions=repetitions, cancelled=cancelled)


def _bootstrap_repetition(
    r: int,
    rng: np.random.Generator,
    source: DataSource,
    fit_fn: FitFunction,
) -> Tuple[int, FitOutcome, int]:
    data = source.draw(rng)
    return r, run_fit(fit_fn, data), len(data)


def run_bootstrap(
    data: Union[DataSet, DataSource],
    fit_fn: FitFunction,
    repetitions: int = 1,
    random_seed: Optional[int] = None,
    n_jobs: int = 1,
    backend: Optional[str] = None,
    show_progress: bool = False,
    should_stop: Optional[Callable[[], bool]] = None,
) -> BootstrapResult:
    """Fit the model to many resampled datasets.

    Args:
        data: A DataSet (resampled with replacement) or any DataSource,
            e.g. ResimulationSource to redraw y at fixed x.
        fit_fn: Callable fitting a model to a DataSet.
        repetitions: Number of draws.
        random_seed: Top-level seed. None uses fresh OS entropy.
        n_jobs: joblib worker count; 1 runs in-process.
        backend: joblib backend name (default loky).
        show_progress: Whether to show progress bar.
        should_stop: Polled before each repetition; see run_cross_validation.

    Returns:
        BootstrapResult holding only the successful fits.
    """
    _check_repetitions(repetitions)
    source = data if isinstance(data, DataSource) else BootstrapSource(data)
    if len(source) == 0:
        raise EmptyDataset("Cannot resample an empty dataset")

    task = partial(_bootstrap_repetition, source=source, fit_fn=fit_fn)
    results, cancelled = _run_repetitions(
        task, repetitions, random_seed, n_jobs, backend,
        show_progress, should_stop, desc="Bootstrap repetitions",
    )

    rows: List[BootstrapRow] = []
    failures: List[Tuple[int, str]] = []
    for r, outcome, n_rows in results:
        if outcome.ok:
            rows.append(BootstrapRow(repetition=r, outcome=outcome, n_rows=n_rows))
        else:
            failures.append((r, outcome.error))

    return BootstrapResult(
        rows=rows, repetitions=repetitions, failures=failures, cancelled=cancelled
    )


def full_data_rmse(dataset: DataSet, fit_fn: FitFunction) -> float:
    """Training RMSE of a single fit on every row.

    The in-sample reference that cross-validated RMSE is compared against.
    Fit errors propagate: there is only one fit to report.
    """
    return rmse(fit_fn(dataset), dataset)


def compare_models(
    dataset: DataSet,
    fit_fns: Mapping[str, FitFunction],
    proportions: Mapping[str, float],
    repetitions: int = 1,
    random_seed: Optional[int] = None,
    n_jobs: int = 1,
) -> pd.DataFrame:
    """Cross-validate several models on identical splits.

    Each model reuses the same top-level seed, so repetition r uses the
    same train/test partition for every model. Without a seed, one is
    drawn from OS entropy and shared by all models.

    Returns:
        DataFrame with one row per model: name, full-data RMSE and the
        cross-validation summary columns. The full-data RMSE is NaN when
        the fit or its evaluation fails.
    """
    if random_seed is None:
        random_seed = int(np.random.SeedSequence().entropy)

    records = []
    for name, fit_fn in fit_fns.items():
        result = run_cross_validation(
            dataset, fit_fn, proportions,
            repetitions=repetitions, random_seed=random_seed, n_jobs=n_jobs,
        )
        outcome = run_fit(fit_fn, dataset)
        train = float("nan")
        if outcome.ok:
            try:
                train = rmse(outcome.model, dataset)
            except Exception as exc:
                logger.debug("Full-data evaluation of %s failed: %s", name, exc)
        records.append({"model": name, "train_rmse": train, **result.summary()})
    return pd.DataFrame.from_records(records)
