import numpy as np
import pytest

from overfit.data.dataset import DataSet
from overfit.data.splitters import (
    block_sizes,
    bootstrap_indices,
    bootstrap_sample,
    create_bootstrap_samples,
    partition,
    spawn_generators,
    train_test_split,
)
from overfit.errors import EmptyDataset, InvalidProportions


def _data(n):
    x = np.arange(n, dtype=float)
    return DataSet(x=x, y=x)


def test_seventy_thirty_on_hundred_rows_is_exact(hundred_rows, seed):
    parts = partition(hundred_rows, {"train": 0.7, "test": 0.3}, rng=seed)
    assert parts.sizes() == {"train": 70, "test": 30}
    assert len(parts["train"]) == 70
    assert len(parts["test"]) == 30


@pytest.mark.parametrize("n", [1, 2, 3, 7, 10, 19, 20, 33, 101])
@pytest.mark.parametrize(
    "proportions",
    [
        {"train": 0.9, "test": 0.1},
        {"train": 0.5, "test": 0.5},
        {"a": 1 / 3, "b": 1 / 3, "c": 1 / 3},
        {"train": 0.6, "val": 0.2, "test": 0.2},
    ],
)
def test_partition_is_disjoint_and_covers_every_row(n, proportions, seed):
    parts = partition(_data(n), proportions, rng=seed)
    all_idx = np.concatenate(list(parts.indices.values()))
    assert len(all_idx) == n, "Blocks must cover every row when fractions sum to 1"
    assert len(np.unique(all_idx)) == n, "Blocks must not share rows"


def test_subsets_hold_the_indexed_rows(seed):
    data = _data(20)
    parts = partition(data, {"train": 0.75, "test": 0.25}, rng=seed)
    for label in parts.labels:
        assert np.array_equal(parts[label].x, data.x[parts.indices[label]])


def test_remainder_goes_to_first_declared_label():
    # floor(0.5 * 7) = 3 for both labels; the leftover row goes to the first
    assert block_sizes(7, {"test": 0.5, "train": 0.5}) == {"test": 4, "train": 3}
    assert block_sizes(10, {"a": 1 / 3, "b": 1 / 3, "c": 1 / 3}) == {"a": 4, "b": 3, "c": 3}


def test_partial_proportions_leave_rows_unassigned(seed):
    parts = partition(_data(10), {"train": 0.5, "test": 0.2}, rng=seed)
    assert parts.sizes() == {"train": 5, "test": 2}


def test_label_with_no_rows_raises_on_access(seed):
    parts = partition(_data(1), {"train": 0.5, "test": 0.5}, rng=seed)
    assert parts.sizes() == {"train": 1, "test": 0}
    assert "test" in parts
    with pytest.raises(EmptyDataset):
        parts["test"]


@pytest.mark.parametrize(
    "proportions",
    [
        {"train": 0.8, "test": 0.3},
        {"train": -0.1, "test": 0.5},
        {"train": float("nan")},
        {},
    ],
)
def test_invalid_proportions(proportions):
    with pytest.raises(InvalidProportions):
        partition(_data(10), proportions, rng=0)


def test_partition_reproducible_with_seed():
    a = partition(_data(50), {"train": 0.8, "test": 0.2}, rng=3)
    b = partition(_data(50), {"train": 0.8, "test": 0.2}, rng=3)
    c = partition(_data(50), {"train": 0.8, "test": 0.2}, rng=4)
    assert np.array_equal(a.indices["test"], b.indices["test"])
    assert not np.array_equal(a.indices["test"], c.indices["test"])


def test_train_test_split_labels(seed):
    parts = train_test_split(_data(20), train_fraction=0.9, rng=seed)
    assert parts.sizes() == {"train": 18, "test": 2}


@pytest.mark.parametrize("n", [1, 2, 5, 20, 200])
def test_bootstrap_same_size_and_valid_indices(n, seed):
    sample = bootstrap_sample(_data(n), rng=seed)
    assert len(sample.dataset) == n
    assert sample.indices.min() >= 0
    assert sample.indices.max() <= n - 1
    assert np.array_equal(sample.dataset.x, _data(n).x[sample.indices])


def test_bootstrap_omits_about_one_over_e_of_rows():
    n, trials = 500, 200
    rng = np.random.default_rng(123)
    omitted = [
        1.0 - np.unique(bootstrap_indices(n, rng)).size / n for _ in range(trials)
    ]
    assert abs(np.mean(omitted) - np.exp(-1)) < 0.01


def test_bootstrap_of_empty_raises():
    with pytest.raises(EmptyDataset):
        bootstrap_indices(0)


def test_create_bootstrap_samples_reproducible():
    a = create_bootstrap_samples(_data(30), n_bootstraps=5, random_seed=7)
    b = create_bootstrap_samples(_data(30), n_bootstraps=5, random_seed=7)
    assert len(a) == 5
    for sa, sb in zip(a, b):
        assert np.array_equal(sa.indices, sb.indices)
    assert not np.array_equal(a[0].indices, a[1].indices)


def test_spawned_generators_are_independent_and_stable():
    first = [g.integers(0, 1_000_000) for g in spawn_generators(11, 4)]
    second = [g.integers(0, 1_000_000) for g in spawn_generators(11, 4)]
    assert first == second
    assert len(set(first)) == 4
