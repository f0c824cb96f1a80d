#!/usr/bin/env python3
"""
run.py

Entry-point for the e-bike optimal climbing speed study.

Usage:
  ebike-energy                      # packaged params.yaml, prints a summary
  ebike-energy -o out.json          # also save results to out.json
  ebike-energy --plot-dir figures   # one PNG per sweep
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import load_efficiency_curve, load_params
from .energy_model import optimal_speed
from .errors import EnergyModelError
from .sweeps import run_study

log = logging.getLogger("ebike_energy")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="E-bike optimal climbing speed model")
    p.add_argument("-c", "--config", type=Path, default=None,
                   help="YAML parameter file (default: packaged params.yaml)")
    p.add_argument("-t", "--table", type=Path, default=None,
                   help="Efficiency lookup table, overrides the parameter file")
    p.add_argument("-o", "--output", type=Path, default=None,
                   help="Write sweep results to JSON file")
    p.add_argument("--plot-dir", type=Path, default=None,
                   help="Save one figure per sweep into this folder")
    p.add_argument("--show", action="store_true", help="Display the figures")
    p.add_argument("--only", action="append", default=None, metavar="SWEEP",
                   help="Run only this sweep (repeatable)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def init_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def print_summary(name, result):
    print(f"\n=== {result.title or name} ===")
    for r in result.results:
        print(f"{r.scenario.label:<18} v_opt={r.optimum.speed:6.2f} km/h"
              f"  E/E0={r.optimum.normalized_energy:.4f}  eta={r.optimum.efficiency:.3f}")
    print("=" * 47)


def main(argv=None) -> int:
    args = parse_args(argv)
    init_logging(args.verbose)

    try:
        params = load_params(args.config)
        if args.table is not None:
            params.efficiency.table = str(args.table)
        curve = load_efficiency_curve(params)

        base = params.scenario.to_scenario(label="base")
        best = optimal_speed(base, params.grid.build(), curve)
        results = run_study(params, curve, only=args.only)
    except (EnergyModelError, ValidationError, FileNotFoundError) as e:
        log.error("%s", e)
        return 1

    print(f"Base scenario: optimal speed {best.speed:.2f} km/h, E/E0={best.normalized_energy:.4f}")
    for name, result in results.items():
        print_summary(name, result)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump({name: r.to_dict() for name, r in results.items()}, f, indent=2)
        log.info("Results written to %s", args.output)

    if args.plot_dir or args.show:
        import matplotlib.pyplot as plt
        from .plotting import plot_sweep, save_sweeps

        if args.plot_dir:
            save_sweeps(results, args.plot_dir)
        if args.show:
            for result in results.values():
                plot_sweep(result)
            plt.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
