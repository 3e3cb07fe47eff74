"""
Per-repetition data sources for variability experiments.

Defines the contract the bootstrap driver draws from, so the same loop can
resample observed rows or resimulate from a known process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from overfit.data.dataset import DataSet
from overfit.data.splitters import bootstrap_sample

if TYPE_CHECKING:
    from overfit.io.synthetic_generator import SyntheticGenerator


class DataSource(ABC):
    """Abstract base class for repetition data sources.

    A source turns a random generator into one dataset. It must not keep
    mutable state between draws: the driver may call it from several
    workers at once, each with its own generator.
    """

    @abstractmethod
    def draw(self, rng: np.random.Generator) -> DataSet:
        """Return the dataset for one repetition.

        Args:
            rng: Generator dedicated to this repetition.

        Returns:
            DataSet to fit.
        """
        pass

    @property
    @abstractmethod
    def reference(self) -> DataSet:
        """The dataset the draws are derived from."""
        pass

    def __len__(self) -> int:
        """Number of rows in each draw."""
        return len(self.reference)


class BootstrapSource(DataSource):
    """Resample the observed rows with replacement."""

    def __init__(self, dataset: DataSet):
        self.dataset = dataset

    @property
    def reference(self) -> DataSet:
        return self.dataset

    def draw(self, rng: np.random.Generator) -> DataSet:
        return bootstrap_sample(self.dataset, rng).dataset


class ResimulationSource(DataSource):
    """Keep x fixed and redraw y from the generating process."""

    def __init__(self, generator: SyntheticGenerator, dataset: DataSet):
        self.generator = generator
        self.dataset = dataset

    @property
    def reference(self) -> DataSet:
        return self.dataset

    def draw(self, rng: np.random.Generator) -> DataSet:
        return self.generator.resimulate(self.dataset, rng)
