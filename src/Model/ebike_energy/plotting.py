import logging
from pathlib import Path
from typing import Dict, List, Union

import matplotlib.pyplot as plt

from .sweeps import SweepResult

log = logging.getLogger(__name__)


def plot_sweep(result: SweepResult, ax=None):
    """Speed vs. normalized energy, one curve per scenario, minimum marked."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 5))

    for r in result.results:
        line, = ax.plot(result.speeds, r.energies, label=r.scenario.label)
        ax.plot(r.optimum.speed, r.optimum.normalized_energy, "o", color=line.get_color())
        ax.annotate(f"{r.optimum.speed:.1f} km/h",
                    (r.optimum.speed, r.optimum.normalized_energy),
                    textcoords="offset points", xytext=(0, -14),
                    ha="center", fontsize=8, color=line.get_color())

    # the curves blow up near zero speed, keep the interesting part
    finite_max = max((float(r.energies[r.energies < 10].max(initial=1.0)) for r in result.results),
                     default=1.0)
    ax.set_ylim(0.9, max(finite_max, 1.5))
    ax.set_xlabel("Speed (km/h)")
    ax.set_ylabel("Normalized energy E / E0")
    ax.set_title(result.title or result.name)
    ax.grid(True)
    ax.legend()
    return ax


def save_sweeps(results: Dict[str, SweepResult], directory: Union[str, Path]) -> List[Path]:
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for name, result in results.items():
        fig, ax = plt.subplots(figsize=(8, 5))
        plot_sweep(result, ax)
        fig.tight_layout()
        path = out_dir / f"{name}.png"
        fig.savefig(path, dpi=120)
        plt.close(fig)
        log.info("Figure written to %s", path)
        paths.append(path)
    return paths
