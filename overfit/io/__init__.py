"""Synthetic data generation."""

from overfit.config import SyntheticDataConfig
from overfit.io.synthetic_generator import SyntheticGenerator

__all__ = [
    "SyntheticDataConfig",
    "SyntheticGenerator",
]
