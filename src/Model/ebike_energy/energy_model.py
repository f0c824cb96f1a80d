"""
Normalized energy of an e-bike climbing at constant speed.

For every speed of a grid the energy drawn from the battery per metre is
divided by the loss-free climbing energy per metre (m * g * sin(alpha)).
A value of 1.0 is an ideal drivetrain, anything above is lost to air
drag, motor inefficiency and Joule heating in the circuit.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .efficiency import EfficiencyCurve
from .errors import EmptyInput, InvalidParameter

log = logging.getLogger(__name__)

GRAVITY = 9.81          # [m/s^2]
KMH_PER_MS = 3.6
AIR_CORRECTION = 0.8    # empirical turbulence correction on the drag term


@dataclass(frozen=True)
class ScenarioParameters:
    """Scalar constants of one evaluation."""
    mass: float              # [kg] rider + bike
    slope: float             # rise / run, 0.05 = 5 %
    drag_coeff: float        # cw*A-like coefficient, 0 = no air friction
    battery_voltage: float   # [V]
    resistance: float        # [Ohm] circuit resistance
    label: Optional[str] = None

    def __post_init__(self):
        _check_scalars(self.slope, self.mass, self.drag_coeff,
                       self.battery_voltage, self.resistance)

    def replace(self, **changes) -> "ScenarioParameters":
        return dataclasses.replace(self, **changes)

    @property
    def climbing_force(self) -> float:
        """Gravitational force along the road [N]."""
        return self.mass * GRAVITY * math.sin(math.atan(self.slope))

    def to_dict(self) -> Dict[str, object]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class SpeedSample:
    speed: float              # [km/h]
    efficiency: float
    normalized_energy: float


@dataclass(frozen=True)
class OptimalPoint:
    """Grid point with the lowest normalized energy."""
    index: int
    speed: float              # [km/h]
    normalized_energy: float
    efficiency: float = float("nan")

    def to_dict(self) -> Dict[str, float]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class EnergyBreakdown:
    """
    Energy per metre [J/m, i.e. N] split by cause, one value per grid speed.

    aero + gravity + motor_loss is the mechanical demand divided by the
    motor efficiency, joule is the resistive loss in the circuit.
    """
    speeds: np.ndarray
    efficiency: np.ndarray
    aero: np.ndarray
    gravity: np.ndarray
    motor_loss: np.ndarray
    joule: np.ndarray
    current: np.ndarray       # [A]

    @property
    def total(self) -> np.ndarray:
        return self.aero + self.gravity + self.motor_loss + self.joule

    @property
    def normalized(self) -> np.ndarray:
        return self.total / self.gravity


def _check_scalars(slope, mass, drag_coeff, battery_voltage, resistance):
    values = {
        "slope": slope,
        "mass": mass,
        "drag_coeff": drag_coeff,
        "battery_voltage": battery_voltage,
        "resistance": resistance,
    }
    for name, value in values.items():
        if (isinstance(value, (bool, np.bool_))
                or not isinstance(value, (int, float, np.number))
                or not math.isfinite(value)):
            raise InvalidParameter(f"{name} must be a finite number, got {value!r}")

    if slope <= 0:
        # normalization divides by m*g*sin(atan(slope)), undefined on a flat road
        raise InvalidParameter(f"slope must be > 0, got {slope}")
    if mass <= 0:
        raise InvalidParameter(f"mass must be > 0, got {mass}")
    if battery_voltage <= 0:
        raise InvalidParameter(f"battery_voltage must be > 0, got {battery_voltage}")
    if resistance <= 0:
        raise InvalidParameter(f"resistance must be > 0, got {resistance}")
    if drag_coeff < 0:
        raise InvalidParameter(f"drag_coeff must be >= 0, got {drag_coeff}")


def _check_grid(speed_grid) -> np.ndarray:
    v = np.asarray(speed_grid, dtype=float)
    if v.ndim != 1:
        raise InvalidParameter(f"speed grid must be one-dimensional, got shape {v.shape}")
    if v.size == 0:
        raise EmptyInput("speed grid is empty")
    if not np.all(np.isfinite(v)) or np.any(v <= 0):
        raise InvalidParameter("speed grid values must be finite and > 0 km/h")
    if np.any(np.diff(v) <= 0):
        raise InvalidParameter("speed grid must be strictly increasing")
    return v


def _breakdown(slope, mass, v, efficiency_curve, drag_coeff, battery_voltage, resistance):
    u = v / KMH_PER_MS                                  # [m/s]

    f_air = 0.5 * AIR_CORRECTION * drag_coeff * u ** 2
    f_g = mass * GRAVITY * math.sin(math.atan(slope))
    eta = efficiency_curve(v)

    e_d = (f_air + f_g) / eta
    current = e_d * u / battery_voltage
    p_el = resistance * current ** 2
    # Joule power divided by the speed in km/h, not m/s
    joule = p_el / v

    return EnergyBreakdown(
        speeds=v,
        efficiency=eta,
        aero=f_air,
        gravity=np.full_like(v, f_g),
        motor_loss=e_d - f_air - f_g,
        joule=joule,
        current=current,
    )


def normalized_energy(
    slope: float,
    mass: float,
    speed_grid: Sequence[float],
    efficiency_curve: EfficiencyCurve,
    drag_coeff: float,
    battery_voltage: float,
    resistance: float,
) -> np.ndarray:
    """
    Normalized energy for every speed of the grid.

    Args:
        slope: road rise over run, > 0.
        mass: total moving mass [kg].
        speed_grid: strictly increasing speeds [km/h], inside the curve range.
        efficiency_curve: motor efficiency lookup.
        drag_coeff: aerodynamic coefficient, >= 0.
        battery_voltage: [V].
        resistance: circuit resistance [Ohm].

    Returns:
        np.ndarray of the same length as speed_grid, same order.

    Raises:
        InvalidParameter, EmptyInput, OutOfDomain
    """
    _check_scalars(slope, mass, drag_coeff, battery_voltage, resistance)
    v = _check_grid(speed_grid)
    parts = _breakdown(slope, mass, v, efficiency_curve, drag_coeff, battery_voltage, resistance)

    e_d = parts.aero + parts.gravity + parts.motor_loss
    return (e_d + parts.joule) / parts.gravity


def energy_breakdown(
    scenario: ScenarioParameters,
    speed_grid: Sequence[float],
    efficiency_curve: EfficiencyCurve,
) -> EnergyBreakdown:
    v = _check_grid(speed_grid)
    return _breakdown(scenario.slope, scenario.mass, v, efficiency_curve,
                      scenario.drag_coeff, scenario.battery_voltage, scenario.resistance)


def scenario_energy(
    scenario: ScenarioParameters,
    speed_grid: Sequence[float],
    efficiency_curve: EfficiencyCurve,
) -> np.ndarray:
    """normalized_energy with the scalars taken from a ScenarioParameters."""
    return normalized_energy(
        scenario.slope,
        scenario.mass,
        speed_grid,
        efficiency_curve,
        scenario.drag_coeff,
        scenario.battery_voltage,
        scenario.resistance,
    )


def evaluate(
    scenario: ScenarioParameters,
    speed_grid: Sequence[float],
    efficiency_curve: EfficiencyCurve,
) -> List[SpeedSample]:
    energies = scenario_energy(scenario, speed_grid, efficiency_curve)
    v = np.asarray(speed_grid, dtype=float)
    eta = efficiency_curve(v)
    return [SpeedSample(float(s), float(e), float(n)) for s, e, n in zip(v, eta, energies)]


def find_optimal_speed(
    speed_grid: Sequence[float],
    normalized_energies: Sequence[float],
    efficiencies: Optional[Sequence[float]] = None,
) -> OptimalPoint:
    """
    Grid entry with the minimum normalized energy.

    Ties go to the first occurrence, i.e. the lowest speed of an increasing
    grid.
    """
    v = np.asarray(speed_grid, dtype=float).ravel()
    e = np.asarray(normalized_energies, dtype=float).ravel()

    if v.size == 0:
        raise EmptyInput("speed grid is empty")
    if e.size != v.size:
        raise InvalidParameter(
            f"speed grid has {v.size} entries but {e.size} energy values were given"
        )
    if np.any(np.isnan(e)):
        raise InvalidParameter("normalized energies contain NaN")

    idx = int(np.argmin(e))
    eta = float("nan")
    if efficiencies is not None:
        etas = np.asarray(efficiencies, dtype=float).ravel()
        if etas.size != v.size:
            raise InvalidParameter(
                f"speed grid has {v.size} entries but {etas.size} efficiencies were given"
            )
        eta = float(etas[idx])

    return OptimalPoint(index=idx, speed=float(v[idx]), normalized_energy=float(e[idx]), efficiency=eta)


def optimal_speed(
    scenario: ScenarioParameters,
    speed_grid: Sequence[float],
    efficiency_curve: EfficiencyCurve,
) -> OptimalPoint:
    energies = scenario_energy(scenario, speed_grid, efficiency_curve)
    point = find_optimal_speed(speed_grid, energies, efficiency_curve(np.asarray(speed_grid, dtype=float)))
    log.debug("optimum for %s: %.2f km/h, E/E0=%.4f",
              scenario.label or scenario, point.speed, point.normalized_energy)
    return point


def speed_grid(v_min: float = 0.1, v_max: float = 48.0, points: int = 100) -> np.ndarray:
    """Evenly spaced speed grid [km/h]; zero speed is excluded."""
    if (isinstance(points, bool) or not math.isfinite(points)
            or int(points) != points or points < 1):
        raise InvalidParameter(f"points must be a positive integer, got {points}")
    if not (math.isfinite(v_min) and math.isfinite(v_max)) or v_min <= 0:
        raise InvalidParameter(f"v_min must be finite and > 0 km/h, got {v_min}")
    if v_max < v_min or (v_max == v_min and points != 1):
        raise InvalidParameter(f"v_max ({v_max}) must be larger than v_min ({v_min})")
    return np.linspace(v_min, v_max, int(points))
