"""
ebike_energy: Optimal climbing speed of an electrically assisted bicycle.
"""

__version__ = "1.0.0"

from .errors import EnergyModelError, InvalidParameter, OutOfDomain, EmptyInput
from .efficiency import EfficiencyCurve, read_table
from .energy_model import (
    ScenarioParameters,
    SpeedSample,
    OptimalPoint,
    EnergyBreakdown,
    normalized_energy,
    scenario_energy,
    energy_breakdown,
    evaluate,
    find_optimal_speed,
    optimal_speed,
    speed_grid,
)
from .config import Params, load_params, load_efficiency_curve
from .sweeps import SweepResult, sweep, friction_sweep, slope_sweep, resistance_sweep, run_study

__all__ = [
    "EnergyModelError",
    "InvalidParameter",
    "OutOfDomain",
    "EmptyInput",
    "EfficiencyCurve",
    "read_table",
    "ScenarioParameters",
    "SpeedSample",
    "OptimalPoint",
    "EnergyBreakdown",
    "normalized_energy",
    "scenario_energy",
    "energy_breakdown",
    "evaluate",
    "find_optimal_speed",
    "optimal_speed",
    "speed_grid",
    "Params",
    "load_params",
    "load_efficiency_curve",
    "SweepResult",
    "sweep",
    "friction_sweep",
    "slope_sweep",
    "resistance_sweep",
    "run_study",
]
