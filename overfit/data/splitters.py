"""
Splitting utilities for repeated experiments.

Implements:
- Random partition of a dataset into named, disjoint subsets
- Bootstrap sampling (same size, with replacement)
- Per-repetition random generators spawned from one top-level seed

Remainder policy: block sizes are floor(fraction * n). When the fractions
sum to 1, the rows lost to flooring go to the first-declared label so the
blocks cover every row. When they sum to less than 1, leftover rows are
left out of every label.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union

import numpy as np

from overfit.data.dataset import DataSet
from overfit.errors import EmptyDataset, InvalidProportions

PROPORTION_TOLERANCE = 1e-9

RandomState = Union[None, int, np.random.Generator]


def as_generator(rng: RandomState = None) -> np.random.Generator:
    """Return `rng` if it is a Generator, else a new Generator seeded from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def spawn_generators(random_seed: Optional[int], n: int) -> List[np.random.Generator]:
    """Create `n` independent generators from one top-level seed.

    Child streams come from SeedSequence.spawn, so repetition r always gets
    the same stream for a given seed no matter which worker runs it.
    A seed of None draws fresh entropy from the OS.
    """
    children = np.random.SeedSequence(random_seed).spawn(n)
    return [np.random.default_rng(child) for child in children]


@dataclass(frozen=True)
class Partition:
    """Labelled, pairwise-disjoint subsets of a dataset.

    Attributes:
        subsets: Label -> DataSet of the selected rows. Labels that
            received no rows are absent here; indexing them raises EmptyDataset.
        indices: Label -> row indices into the source dataset.
    """

    subsets: Dict[str, DataSet]
    indices: Dict[str, np.ndarray]

    def __getitem__(self, label: str) -> DataSet:
        if label in self.indices and label not in self.subsets:
            raise EmptyDataset(f"Label '{label}' received no rows")
        return self.subsets[label]

    def __contains__(self, label: str) -> bool:
        return label in self.indices

    @property
    def labels(self) -> List[str]:
        return list(self.indices)

    def sizes(self) -> Dict[str, int]:
        """Number of rows per label."""
        return {label: len(idx) for label, idx in self.indices.items()}


@dataclass(frozen=True)
class BootstrapSample:
    """A same-size resample drawn with replacement."""

    dataset: DataSet
    indices: np.ndarray

    @property
    def n_unique(self) -> int:
        """Number of distinct source rows in the sample."""
        return int(np.unique(self.indices).size)


def validate_proportions(proportions: Mapping[str, float]) -> Dict[str, float]:
    """Check partition fractions and return them as an ordered dict.

    Raises:
        InvalidProportions: If empty, any fraction is negative or not finite,
            or the fractions sum to more than 1.
    """
    if not proportions:
        raise InvalidProportions("At least one label is required")

    checked = {}
    for label, fraction in proportions.items():
        fraction = float(fraction)
        if not np.isfinite(fraction) or fraction < 0:
            raise InvalidProportions(
                f"Fraction for '{label}' must be a non-negative number, got {fraction}"
            )
        checked[label] = fraction

    total = sum(checked.values())
    if total > 1.0 + PROPORTION_TOLERANCE:
        raise InvalidProportions(f"Fractions must sum to at most 1.0, got {total}")
    return checked


def block_sizes(n: int, proportions: Mapping[str, float]) -> Dict[str, int]:
    """Integer subset sizes for `n` rows under the remainder policy."""
    fractions = validate_proportions(proportions)
    sizes = {label: int(np.floor(f * n + PROPORTION_TOLERANCE)) for label, f in fractions.items()}

    # Full coverage requested: flooring losses go to the first-declared label
    if np.isclose(sum(fractions.values()), 1.0, rtol=0.0, atol=PROPORTION_TOLERANCE):
        first = next(iter(sizes))
        sizes[first] += n - sum(sizes.values())
    return sizes


def partition(
    dataset: DataSet,
    proportions: Mapping[str, float],
    rng: RandomState = None,
) -> Partition:
    """Randomly split a dataset into disjoint labelled subsets.

    A uniform random permutation of the row indices is cut into contiguous
    blocks, one per label in declaration order.

    Args:
        dataset: Source dataset (n >= 1).
        proportions: Label -> fraction of rows, e.g. {"train": 0.7, "test": 0.3}.
        rng: Generator or seed. None uses fresh OS entropy.

    Returns:
        Partition mapping each label to its subset.

    Raises:
        InvalidProportions: See validate_proportions.
        EmptyDataset: If the dataset has no rows.
    """
    n = len(dataset)
    if n == 0:
        raise EmptyDataset("Cannot partition an empty dataset")

    sizes = block_sizes(n, proportions)
    perm = as_generator(rng).permutation(n)

    subsets: Dict[str, DataSet] = {}
    indices: Dict[str, np.ndarray] = {}
    start = 0
    for label, size in sizes.items():
        idx = np.sort(perm[start:start + size])
        start += size
        indices[label] = idx
        if size > 0:
            subsets[label] = dataset.take(idx)

    return Partition(subsets=subsets, indices=indices)


def train_test_split(
    dataset: DataSet,
    train_fraction: float = 0.9,
    rng: RandomState = None,
) -> Partition:
    """Partition into "train" and "test" covering every row."""
    return partition(
        dataset, {"train": train_fraction, "test": 1.0 - train_fraction}, rng=rng
    )


def bootstrap_indices(n: int, rng: RandomState = None) -> np.ndarray:
    """Draw `n` row indices uniformly from [0, n-1] with replacement."""
    if n <= 0:
        raise EmptyDataset("Cannot bootstrap an empty dataset")
    return as_generator(rng).integers(0, n, size=n)


def bootstrap_sample(dataset: DataSet, rng: RandomState = None) -> BootstrapSample:
    """Draw a bootstrap resample of the same size as `dataset`."""
    idx = bootstrap_indices(len(dataset), rng)
    return BootstrapSample(dataset=dataset.take(idx), indices=idx)


def create_bootstrap_samples(
    dataset: DataSet,
    n_bootstraps: int = 25,
    random_seed: Optional[int] = 42,
) -> List[BootstrapSample]:
    """Create several bootstrap samples of a dataset.

    Args:
        dataset: Source dataset.
        n_bootstraps: Number of bootstrap samples (default 25).
        random_seed: Random seed for reproducibility.

    Returns:
        List of BootstrapSample, one per draw.
    """
    return [
        bootstrap_sample(dataset, gen)
        for gen in spawn_generators(random_seed, n_bootstraps)
    ]
