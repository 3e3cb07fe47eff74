"""
Bagging: average the predictions of models fitted to bootstrap resamples.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from overfit.models.base import FittedModel


class BaggedModel:
    """Ensemble whose prediction is the mean of its members' predictions."""

    def __init__(self, members: Sequence[FittedModel]):
        if len(members) == 0:
            raise ValueError("BaggedModel needs at least one member")
        self.members = list(members)

    def __len__(self) -> int:
        return len(self.members)

    def member_predictions(self, x: np.ndarray) -> np.ndarray:
        """Predictions of every member, shape (n_members, n_points)."""
        return np.vstack([np.asarray(m.predict(x), dtype=float) for m in self.members])

    def predict(self, x: np.ndarray) -> np.ndarray:
        return self.member_predictions(x).mean(axis=0)
