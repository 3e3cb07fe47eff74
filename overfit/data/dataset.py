"""
Immutable paired-observation dataset.

A DataSet holds n >= 1 (x, y) pairs as two read-only numpy arrays. Every
derived structure (partitions, bootstrap samples, resimulated responses)
is a fresh DataSet built from it; the source is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np
import pandas as pd

from overfit.errors import DimensionMismatch, EmptyDataset


class Observation(NamedTuple):
    """A single (x, y) pair."""

    x: float
    y: float


def _as_readonly(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise DimensionMismatch(f"{name} must be 1-D, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class DataSet:
    """Ordered sequence of observations.

    Attributes:
        x: Input values, shape (n,).
        y: Response values, shape (n,).
    """

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self) -> None:
        """Copy inputs into read-only float arrays and validate shape."""
        x = _as_readonly(self.x, "x")
        y = _as_readonly(self.y, "y")
        if len(x) != len(y):
            raise DimensionMismatch(
                f"x and y length mismatch: {len(x)} vs {len(y)}"
            )
        if len(x) == 0:
            raise EmptyDataset("DataSet requires at least one observation")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def from_observations(cls, observations) -> DataSet:
        """Build from an iterable of Observation (or (x, y) tuples)."""
        pairs = [tuple(o) for o in observations]
        if not pairs:
            raise EmptyDataset("DataSet requires at least one observation")
        x, y = zip(*pairs)
        return cls(x=np.asarray(x), y=np.asarray(y))

    @classmethod
    def from_frame(cls, df: pd.DataFrame, x_col: str = "x", y_col: str = "y") -> DataSet:
        """Build from two columns of a DataFrame."""
        missing = [c for c in (x_col, y_col) if c not in df.columns]
        if missing:
            raise DimensionMismatch(f"DataFrame is missing columns {missing}")
        return cls(x=df[x_col].to_numpy(), y=df[y_col].to_numpy())

    def to_frame(self) -> pd.DataFrame:
        """Return a DataFrame with columns x and y."""
        return pd.DataFrame({"x": self.x, "y": self.y})

    def __len__(self) -> int:
        return len(self.x)

    def __iter__(self) -> Iterator[Observation]:
        for xi, yi in zip(self.x, self.y):
            yield Observation(float(xi), float(yi))

    def __getitem__(self, i: int) -> Observation:
        return Observation(float(self.x[i]), float(self.y[i]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataSet):
            return NotImplemented
        return np.array_equal(self.x, other.x) and np.array_equal(self.y, other.y)

    @property
    def n(self) -> int:
        """Number of observations."""
        return len(self.x)

    def take(self, indices: np.ndarray) -> DataSet:
        """Return a new DataSet with the rows at `indices` (duplicates allowed).

        Raises:
            EmptyDataset: If `indices` is empty.
            IndexError: If any index is outside [0, n-1].
        """
        idx = np.asarray(indices, dtype=int)
        if idx.size == 0:
            raise EmptyDataset("Cannot take an empty set of rows")
        if idx.min() < 0 or idx.max() >= self.n:
            raise IndexError(f"Row indices must lie in [0, {self.n - 1}]")
        return DataSet(x=self.x[idx], y=self.y[idx])

    def with_y(self, y: np.ndarray) -> DataSet:
        """Return a new DataSet with the same x and a replacement response."""
        return DataSet(x=self.x, y=y)
