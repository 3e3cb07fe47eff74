import numpy as np
import pytest

from overfit.config import ModelConfig
from overfit.data.dataset import DataSet
from overfit.data.sources import BootstrapSource, ResimulationSource
from overfit.errors import EmptyDataset, FitError, InvalidProportions
from overfit.evaluation.metrics import rmse
from overfit.experiments.driver import (
    compare_models,
    full_data_rmse,
    run_bootstrap,
    run_cross_validation,
)
from overfit.models.factory import make_fit_fn
from overfit.models.spline import SplineModel

CV_SPLIT = {"train": 0.9, "test": 0.1}


def _always_fails(data):
    raise FitError("model cannot be estimated")


def test_cv_returns_one_row_per_repetition(linear_data, fit_linear):
    result = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=25, random_seed=1)
    assert len(result) == 25
    assert [row.repetition for row in result] == list(range(25))
    assert all(row.n_train == 18 and row.n_test == 2 for row in result)
    assert not result.cancelled


def test_cv_linear_model_error_close_to_noise_sd(linear_data, fit_linear):
    sd = 0.25
    result = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=100, random_seed=42)
    mean_rmse = np.nanmean(result.rmse_values())
    assert sd / 3 < mean_rmse < 3 * sd
    assert result.failure_rate == 0.0


def test_cv_is_bit_identical_for_fixed_seed(linear_data, fit_linear):
    a = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=30, random_seed=9)
    b = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=30, random_seed=9)
    c = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=30, random_seed=10)
    assert np.array_equal(a.rmse_values(), b.rmse_values(), equal_nan=True)
    assert not np.array_equal(a.rmse_values(), c.rmse_values(), equal_nan=True)


def test_cv_parallel_matches_sequential(linear_data, fit_linear):
    seq = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=20, random_seed=5)
    par = run_cross_validation(
        linear_data, fit_linear, CV_SPLIT, repetitions=20, random_seed=5,
        n_jobs=2, backend="threading",
    )
    assert np.array_equal(seq.rmse_values(), par.rmse_values(), equal_nan=True)


def test_cv_process_pool_matches_sequential(linear_data):
    fit_fn = make_fit_fn(ModelConfig(kind="linear"))
    seq = run_cross_validation(linear_data, fit_fn, CV_SPLIT, repetitions=8, random_seed=5)
    par = run_cross_validation(linear_data, fit_fn, CV_SPLIT, repetitions=8, random_seed=5, n_jobs=2)
    assert np.array_equal(seq.rmse_values(), par.rmse_values(), equal_nan=True)


def test_cv_failures_keep_their_slots(linear_data):
    result = run_cross_validation(linear_data, _always_fails, CV_SPLIT, repetitions=10, random_seed=0)
    assert len(result) == 10
    assert result.n_failed == 10
    assert result.failure_rate == 1.0
    assert np.isnan(result.rmse_values()).all()
    assert all(row.error == "model cannot be estimated" for row in result)
    summary = result.summary()
    assert summary["n"] == 0 and summary["n_failed"] == 10


def test_cv_records_evaluation_mismatch_as_failure(linear_data):
    class Broken:
        def predict(self, x):
            return np.zeros(len(x) + 1)

    result = run_cross_validation(linear_data, lambda d: Broken(), CV_SPLIT, repetitions=3, random_seed=0)
    assert result.n_failed == 3
    assert "one prediction per row" in result.rows[0].error


def test_cv_records_any_prediction_error_as_failure(linear_data):
    class Unusable:
        def predict(self, x):
            raise TypeError("model cannot handle these inputs")

    result = run_cross_validation(linear_data, lambda d: Unusable(), CV_SPLIT, repetitions=5, random_seed=0)
    assert len(result) == 5
    assert result.n_failed == 5
    assert all(row.rmse is None for row in result)
    assert all(row.error == "model cannot handle these inputs" for row in result)


def test_cv_validates_before_running(linear_data):
    calls = []

    def counting(data):
        calls.append(1)
        raise AssertionError("should not be called")

    with pytest.raises(InvalidProportions):
        run_cross_validation(linear_data, counting, {"train": 0.8, "test": 0.4}, repetitions=5)
    with pytest.raises(InvalidProportions):
        run_cross_validation(linear_data, counting, {"train": 0.8, "holdout": 0.2}, repetitions=5)
    with pytest.raises(EmptyDataset):
        small = DataSet(x=[0.0, 1.0, 2.0], y=[0.0, 1.0, 2.0])
        run_cross_validation(small, counting, CV_SPLIT, repetitions=5)
    with pytest.raises(ValueError):
        run_cross_validation(linear_data, counting, CV_SPLIT, repetitions=0)
    assert calls == []


def test_cv_cancellation_between_repetitions(linear_data, fit_linear):
    polls = iter([False, False, False, True, True])
    result = run_cross_validation(
        linear_data, fit_linear, CV_SPLIT, repetitions=50, random_seed=0,
        should_stop=lambda: next(polls),
    )
    assert result.cancelled
    assert len(result) == 3


def test_cv_frame(linear_data, fit_linear):
    df = run_cross_validation(linear_data, fit_linear, CV_SPLIT, repetitions=4, random_seed=0).to_frame()
    assert list(df.columns) == ["repetition", "rmse", "n_train", "n_test", "error"]
    assert len(df) == 4


def test_overflexible_spline_overfits(generator, linear_data):
    fit_fn = make_fit_fn(ModelConfig(kind="spline", df=len(linear_data), degree=1))
    train_rmse = full_data_rmse(linear_data, fit_fn)
    fresh = generator.resimulate(linear_data)
    test_rmse = rmse(fit_fn(linear_data), fresh)
    assert train_rmse < 1e-8
    assert test_rmse > 2 * train_rmse
    assert test_rmse > 0.1


def test_bootstrap_tolerates_occasional_failures(linear_data):
    sentinels = linear_data.x[:3]

    def fragile_fit(data):
        if not np.isin(sentinels, data.x).any():
            raise FitError("degenerate resample")
        return SplineModel(df=2, degree=1).fit(data)

    result = run_bootstrap(linear_data, fragile_fit, repetitions=100, random_seed=42)
    assert 80 <= len(result) <= 100
    assert len(result) + result.n_failed == 100
    assert all(row.outcome.ok for row in result)
    assert all(err == "degenerate resample" for _, err in result.failures)


def test_bootstrap_all_failures_yield_empty_result(linear_data):
    result = run_bootstrap(linear_data, _always_fails, repetitions=12, random_seed=0)
    assert len(result) == 0
    assert result.n_failed == 12
    assert result.models() == []
    assert result.predictions(np.linspace(0, 1, 5)).empty


def test_bootstrap_high_df_spline_drops_failed_resamples(linear_data):
    fit_fn = make_fit_fn(ModelConfig(kind="spline", df=17, degree=1))
    result = run_bootstrap(linear_data, fit_fn, repetitions=30, random_seed=3)
    assert result.n_failed > 0
    assert len(result) + result.n_failed == 30
    assert [r for r, _ in result.failures] == sorted(r for r, _ in result.failures)


def test_bootstrap_is_reproducible(linear_data, fit_linear):
    grid = np.linspace(0, 1, 7)
    a = run_bootstrap(linear_data, fit_linear, repetitions=10, random_seed=8).predictions(grid)
    b = run_bootstrap(
        BootstrapSource(linear_data), fit_linear, repetitions=10, random_seed=8,
        n_jobs=2, backend="threading",
    ).predictions(grid)
    assert a.equals(b)


def test_resimulation_source_variability_and_bagging(generator, linear_data, fit_linear):
    source = ResimulationSource(generator, linear_data)
    result = run_bootstrap(source, fit_linear, repetitions=40, random_seed=0)
    assert len(result) == 40
    assert all(row.n_rows == len(linear_data) for row in result)

    grid = np.linspace(0, 1, 11)
    preds = result.predictions(grid)
    assert list(preds.columns) == ["repetition", "x", "prediction"]
    assert len(preds) == 40 * 11

    spread = result.prediction_spread(grid)
    assert (spread["std"] > 0).all()

    bagged = result.bag()
    assert len(bagged) == 40
    assert np.max(np.abs(bagged.predict(grid) - generator.true_mean(grid))) < 0.3


def test_bootstrap_rejects_zero_repetitions(linear_data, fit_linear):
    with pytest.raises(ValueError):
        run_bootstrap(linear_data, fit_linear, repetitions=0)


def test_compare_models_uses_same_splits(linear_data):
    table = compare_models(
        linear_data,
        {
            "linear": make_fit_fn(ModelConfig(kind="linear")),
            "spline_df20": make_fit_fn(ModelConfig(kind="spline", df=20, degree=1)),
        },
        CV_SPLIT,
        repetitions=20,
        random_seed=0,
    )
    assert table["model"].tolist() == ["linear", "spline_df20"]
    rows = table.set_index("model")
    assert rows.loc["spline_df20", "train_rmse"] < rows.loc["linear", "train_rmse"]


def test_compare_models_shares_splits_without_seed(linear_data, fit_linear):
    table = compare_models(linear_data, {"a": fit_linear, "b": fit_linear}, CV_SPLIT, repetitions=20)
    rows = table.set_index("model")
    summary_columns = ["mean", "std", "min", "max", "n", "n_failed"]
    assert rows.loc["a", summary_columns].tolist() == rows.loc["b", summary_columns].tolist(), (
        "models must be scored on the same splits"
    )


def test_compare_models_full_data_evaluation_failure_gives_nan(linear_data, fit_linear):
    class Broken:
        def predict(self, x):
            return np.zeros(len(x) + 1)

    table = compare_models(
        linear_data,
        {"linear": fit_linear, "broken": lambda d: Broken()},
        CV_SPLIT,
        repetitions=4,
        random_seed=0,
    )
    rows = table.set_index("model")
    assert np.isnan(rows.loc["broken", "train_rmse"])
    assert rows.loc["broken", "n_failed"] == 4
    assert np.isfinite(rows.loc["linear", "train_rmse"])
