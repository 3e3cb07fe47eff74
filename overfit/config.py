"""
Configuration management using pydantic.

All config classes use pydantic for validation and YAML loading.
Config files are stored in configs/ directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from overfit.data.splitters import validate_proportions


# Base path for config files
CONFIGS_DIR = Path(__file__).parent.parent / "configs"


def load_yaml(path: Path | str) -> dict[str, Any]:
    """Load a YAML file and return as dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


class SyntheticDataConfig(BaseModel):
    """Configuration for the linear data-generating process.

    y = intercept + slope * x + N(0, noise_sd^2), x ~ U(x_min, x_max).
    Defaults reproduce the 20-point example.
    """

    random_seed: Optional[int] = 42
    n_samples: int = Field(default=20, ge=1)
    intercept: float = 1.0
    slope: float = 2.0
    noise_sd: float = Field(default=0.25, ge=0.0)
    x_min: float = 0.0
    x_max: float = 1.0

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> SyntheticDataConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/synthetic_data.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "synthetic_data.yaml"
        return cls(**load_yaml(path))


class ModelConfig(BaseModel):
    """Configuration for the model fitted in every repetition.

    kind="linear" ignores df and degree. For kind="spline", df is the
    number of basis functions (model degrees of freedom).
    """

    kind: Literal["linear", "spline"] = "spline"
    df: int = Field(default=5, ge=2)
    degree: int = Field(default=3, ge=1)

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> ModelConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/model.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "model.yaml"
        return cls(**load_yaml(path))


class CrossValidationConfig(BaseModel):
    """Configuration for repeated random train/test splitting."""

    proportions: Dict[str, float] = Field(
        default_factory=lambda: {"train": 0.9, "test": 0.1}
    )
    repetitions: int = Field(default=100, ge=1)
    random_seed: Optional[int] = 42
    n_jobs: int = 1

    @field_validator("proportions")
    @classmethod
    def _check_proportions(cls, v: Dict[str, float]) -> Dict[str, float]:
        validate_proportions(v)
        for label in ("train", "test"):
            if label not in v:
                raise ValueError(f"proportions must include a '{label}' label")
        return v

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> CrossValidationConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/cross_validation.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "cross_validation.yaml"
        return cls(**load_yaml(path))


class BootstrapConfig(BaseModel):
    """Configuration for bootstrap / resimulation variability runs.

    source="bootstrap" resamples the observed rows; source="resimulate"
    redraws y at the observed x from the known generating process.
    """

    repetitions: int = Field(default=100, ge=1)
    source: Literal["bootstrap", "resimulate"] = "bootstrap"
    random_seed: Optional[int] = 42
    n_jobs: int = 1

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> BootstrapConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/bootstrap.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "bootstrap.yaml"
        return cls(**load_yaml(path))


class ExperimentConfig(BaseModel):
    """Bundle of the configs a script needs, loadable from one YAML file.

    Each section is optional in the file; missing sections use defaults.
    """

    name: str = "experiment"
    synthetic_data: SyntheticDataConfig = Field(default_factory=SyntheticDataConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    cross_validation: CrossValidationConfig = Field(default_factory=CrossValidationConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    output_dir: str = "experiments"

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> ExperimentConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/experiment.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "experiment.yaml"
        return cls(**load_yaml(path))
