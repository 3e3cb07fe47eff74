#!/usr/bin/env python
"""
Training vs. fresh-data RMSE as spline flexibility grows.

Usage:
    python scripts/run_overfitting_curve.py
    python scripts/run_overfitting_curve.py --max-df 20 --n-test-sets 50

Results are saved to experiments/overfitting_{timestamp}/.
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from overfit.config import ExperimentConfig
from overfit.experiments.overfitting import overfitting_curve
from overfit.io.synthetic_generator import SyntheticGenerator


def main():
    parser = argparse.ArgumentParser(
        description="Overfitting curve over spline degrees of freedom"
    )
    parser.add_argument("--config", type=str, help="Path to config YAML file")
    parser.add_argument("--min-df", type=int, default=2, help="Smallest df to try")
    parser.add_argument("--max-df", type=int, help="Largest df (default: n_samples)")
    parser.add_argument("--degree", type=int, default=1, help="Spline polynomial degree")
    parser.add_argument("--n-test-sets", type=int, default=20, help="Fresh datasets per df")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--name", type=str, default="", help="Experiment name suffix")
    args = parser.parse_args()

    cfg = ExperimentConfig.from_yaml(args.config)
    max_df = args.max_df if args.max_df is not None else cfg.synthetic_data.n_samples

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    exp_name = f"overfitting_{timestamp}"
    if args.name:
        exp_name += f"_{args.name}"
    exp_dir = PROJECT_ROOT / cfg.output_dir / exp_name
    exp_dir.mkdir(parents=True, exist_ok=True)

    curve = overfitting_curve(
        SyntheticGenerator(cfg.synthetic_data),
        dfs=range(args.min_df, max_df + 1),
        n_test_sets=args.n_test_sets,
        degree=args.degree,
        random_seed=args.seed,
        show_progress=True,
    )
    curve.to_csv(exp_dir / "curve.csv", index=False)

    print("\n" + "=" * 70)
    print("OVERFITTING CURVE")
    print("=" * 70)
    print(f"{'df':>4} {'Train RMSE':>12} {'Fresh RMSE':>12}")
    print("-" * 30)
    for row in curve.itertuples():
        if row.error is None:
            print(f"{row.df:>4d} {row.train_rmse:>12.4f} {row.test_rmse:>12.4f}")
        else:
            print(f"{row.df:>4d} {'failed':>12} ({row.error})")
    print("=" * 70)
    print(f"\nResults saved to: {exp_dir}")


if __name__ == "__main__":
    main()
