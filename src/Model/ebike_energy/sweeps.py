"""
Scenario sweeps: vary one parameter of a base scenario and find the
optimal climbing speed for every value.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .config import Params, SCENARIO_FIELDS
from .efficiency import EfficiencyCurve
from .energy_model import (
    OptimalPoint,
    ScenarioParameters,
    find_optimal_speed,
    scenario_energy,
)
from .errors import InvalidParameter

log = logging.getLogger(__name__)

FRICTION_VALUES = (0.0, 0.3, 0.6, 1.2)
SLOPE_VALUES = (0.02, 0.05, 0.1, 0.15)
RESISTANCE_VALUES = (0.1, 1.0, 5.0, 10.0)


@dataclass
class ScenarioResult:
    scenario: ScenarioParameters
    energies: np.ndarray
    optimum: OptimalPoint


@dataclass
class SweepResult:
    name: str
    parameter: str
    speeds: np.ndarray
    results: List[ScenarioResult] = field(default_factory=list)
    title: Optional[str] = None

    @property
    def values(self) -> List[float]:
        return [getattr(r.scenario, self.parameter) for r in self.results]

    @property
    def optimal_speeds(self) -> List[float]:
        return [r.optimum.speed for r in self.results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameter": self.parameter,
            "title": self.title,
            "speeds": self.speeds.tolist(),
            "scenarios": [
                {
                    "scenario": r.scenario.to_dict(),
                    "normalized_energy": r.energies.tolist(),
                    "optimum": r.optimum.to_dict(),
                }
                for r in self.results
            ],
        }


def _label(parameter: str, value: float) -> str:
    if parameter == "slope":
        return f"slope {value * 100:g} %"
    if parameter == "resistance":
        return f"R = {value:g} Ohm"
    if parameter == "drag_coeff":
        return f"cwxA = {value:g}"
    return f"{parameter} = {value:g}"


def sweep(
    base: ScenarioParameters,
    parameter: str,
    values: Iterable[float],
    speeds: Sequence[float],
    curve: EfficiencyCurve,
    name: Optional[str] = None,
    title: Optional[str] = None,
) -> SweepResult:
    """Evaluate base with parameter set to each of values in turn."""
    if parameter not in SCENARIO_FIELDS:
        raise InvalidParameter(f"cannot sweep over '{parameter}', expected one of {SCENARIO_FIELDS}")

    v = np.asarray(speeds, dtype=float)
    eta = curve(v)
    out = SweepResult(name=name or parameter, parameter=parameter, speeds=v, title=title)

    for value in values:
        scenario = base.replace(**{parameter: value, "label": _label(parameter, value)})
        energies = scenario_energy(scenario, v, curve)
        optimum = find_optimal_speed(v, energies, eta)
        out.results.append(ScenarioResult(scenario, energies, optimum))
        log.debug("%s: %s -> v_opt=%.2f km/h", out.name, scenario.label, optimum.speed)

    return out


def friction_sweep(base, speeds, curve, values=FRICTION_VALUES) -> SweepResult:
    return sweep(base, "drag_coeff", values, speeds, curve,
                 name="friction", title="Influence of air friction")


def slope_sweep(base, speeds, curve, values=SLOPE_VALUES) -> SweepResult:
    return sweep(base, "slope", values, speeds, curve,
                 name="slope", title="Influence of slope")


def resistance_sweep(base, speeds, curve, values=RESISTANCE_VALUES) -> SweepResult:
    return sweep(base, "resistance", values, speeds, curve,
                 name="resistance", title="Influence of circuit resistance")


def run_study(
    params: Params,
    curve: EfficiencyCurve,
    only: Optional[Iterable[str]] = None,
) -> Dict[str, SweepResult]:
    """Run every sweep of the parameter file (or the ones named in only)."""
    selected = list(only) if only else list(params.sweeps)
    unknown = [name for name in selected if name not in params.sweeps]
    if unknown:
        raise InvalidParameter(f"unknown sweep(s) {unknown}, available: {list(params.sweeps)}")

    base = params.scenario.to_scenario(label="base")
    speeds = params.grid.build()

    results: Dict[str, SweepResult] = {}
    for name in selected:
        cfg = params.sweeps[name]
        results[name] = sweep(base, cfg.parameter, cfg.values, speeds, curve,
                              name=name, title=cfg.title)
    return results
