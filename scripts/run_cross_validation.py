#!/usr/bin/env python
"""
Repeated train/test cross-validation on simulated data.

Simulates one dataset from the linear generating process, then estimates
the out-of-sample RMSE of the configured model (and of a straight line for
reference) over many random train/test splits.

Usage:
    python scripts/run_cross_validation.py
    python scripts/run_cross_validation.py --repetitions 500 --df 10
    python scripts/run_cross_validation.py --config configs/experiment.yaml --n-jobs -1

Results are saved to experiments/cv_{timestamp}/.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from overfit.config import ExperimentConfig
from overfit.experiments.driver import full_data_rmse, run_cross_validation
from overfit.io.synthetic_generator import SyntheticGenerator
from overfit.models.factory import make_fit_fn


def main():
    parser = argparse.ArgumentParser(
        description="Repeated random train/test cross-validation"
    )
    parser.add_argument("--config", type=str, help="Path to config YAML file")
    parser.add_argument("--repetitions", type=int, help="Number of splits (overrides config)")
    parser.add_argument("--df", type=int, help="Spline degrees of freedom (overrides config)")
    parser.add_argument("--seed", type=int, help="Top-level random seed (overrides config)")
    parser.add_argument("--n-jobs", type=int, help="Parallel workers (overrides config)")
    parser.add_argument("--name", type=str, default="", help="Experiment name suffix")
    args = parser.parse_args()

    cfg = ExperimentConfig.from_yaml(args.config)
    cv_cfg = cfg.cross_validation
    model_cfg = cfg.model
    if args.repetitions is not None:
        cv_cfg = cv_cfg.model_copy(update={"repetitions": args.repetitions})
    if args.seed is not None:
        cv_cfg = cv_cfg.model_copy(update={"random_seed": args.seed})
    if args.n_jobs is not None:
        cv_cfg = cv_cfg.model_copy(update={"n_jobs": args.n_jobs})
    if args.df is not None:
        model_cfg = model_cfg.model_copy(update={"df": args.df})

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    exp_name = f"cv_{timestamp}"
    if args.name:
        exp_name += f"_{args.name}"
    exp_dir = PROJECT_ROOT / cfg.output_dir / exp_name
    exp_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 70)
    print("Repeated train/test cross-validation")
    print("=" * 70)
    print(f"  Config: {args.config or 'configs/experiment.yaml'}")
    print(f"  Output: {exp_dir}")
    print(f"  Model: {model_cfg.kind} (df={model_cfg.df}, degree={model_cfg.degree})")
    print(f"  Proportions: {cv_cfg.proportions}")
    print(f"  Repetitions: {cv_cfg.repetitions}")
    print("=" * 70)

    with open(exp_dir / "config.yaml", "w") as f:
        yaml.dump(cfg.model_dump(), f, default_flow_style=False)

    dataset = SyntheticGenerator(cfg.synthetic_data).generate()
    dataset.to_frame().to_csv(exp_dir / "data.csv", index=False)

    fits = {
        model_cfg.kind: make_fit_fn(model_cfg),
        "linear_reference": make_fit_fn(model_cfg.model_copy(update={"kind": "linear"})),
    }

    summaries = {}
    for name, fit_fn in fits.items():
        result = run_cross_validation(
            dataset,
            fit_fn,
            cv_cfg.proportions,
            repetitions=cv_cfg.repetitions,
            random_seed=cv_cfg.random_seed,
            n_jobs=cv_cfg.n_jobs,
            show_progress=True,
        )
        result.to_frame().to_csv(exp_dir / f"repetitions_{name}.csv", index=False)
        summaries[name] = {
            "train_rmse": full_data_rmse(dataset, fit_fn),
            **result.summary(),
        }

    with open(exp_dir / "summary.json", "w") as f:
        json.dump(summaries, f, indent=2)

    print("\n" + "=" * 70)
    print("RESULTS SUMMARY")
    print("=" * 70)
    print(f"{'Model':<20} {'Train RMSE':>12} {'CV RMSE':>18} {'Failed':>8}")
    print("-" * 62)
    for name, s in summaries.items():
        print(
            f"{name:<20} {s['train_rmse']:>12.4f} "
            f"{s['mean']:.4f}+/-{s['std']:.4f}  {s['n_failed']:>8d}"
        )
    print("=" * 70)
    print(f"\nResults saved to: {exp_dir}")


if __name__ == "__main__":
    main()
