"""
Datasets and resampling primitives.

This module provides:
- DataSet / Observation: immutable paired observations
- Partition helpers: random disjoint splits by proportion
- Bootstrap helpers: same-size resamples with replacement
- DataSource: per-repetition draws (bootstrap or resimulation)
"""

from overfit.data.dataset import DataSet, Observation
from overfit.data.sources import BootstrapSource, DataSource, ResimulationSource
from overfit.data.splitters import (
    BootstrapSample,
    Partition,
    bootstrap_indices,
    bootstrap_sample,
    create_bootstrap_samples,
    partition,
    spawn_generators,
    train_test_split,
)

__all__ = [
    "DataSet",
    "Observation",
    "DataSource",
    "BootstrapSource",
    "ResimulationSource",
    "BootstrapSample",
    "Partition",
    "bootstrap_indices",
    "bootstrap_sample",
    "create_bootstrap_samples",
    "partition",
    "spawn_generators",
    "train_test_split",
]
