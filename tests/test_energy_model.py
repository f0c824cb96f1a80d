import math

import numpy as np
import pytest

from ebike_energy.efficiency import EfficiencyCurve
from ebike_energy.energy_model import (
    GRAVITY,
    ScenarioParameters,
    energy_breakdown,
    evaluate,
    find_optimal_speed,
    normalized_energy,
    optimal_speed,
    scenario_energy,
    speed_grid,
)
from ebike_energy.errors import EmptyInput, InvalidParameter, OutOfDomain


def test_single_speed_by_hand(curve):
    v = 20.0
    u = v / 3.6
    f_air = 0.5 * 0.8 * 0.6 * u ** 2
    f_g = 110.0 * GRAVITY * math.sin(math.atan(0.05))
    e_d = (f_air + f_g) / 0.825
    current = e_d * u / 50.0
    expected = (e_d + 1.0 * current ** 2 / v) / f_g

    result = normalized_energy(0.05, 110.0, [v], curve, 0.6, 50.0, 1.0)
    assert result.shape == (1,)
    assert result[0] == pytest.approx(expected)


def test_reference_scenario_optimum_near_20_kmh(base, grid, curve):
    energies = scenario_energy(base, grid, curve)
    assert energies.shape == grid.shape

    best = find_optimal_speed(grid, energies)
    assert 17.0 <= best.speed <= 23.0
    assert best.normalized_energy == energies.min()
    assert best.normalized_energy > 1.0


def test_higher_resistance_lowers_optimum(base, grid, curve):
    low = optimal_speed(base, grid, curve)
    high = optimal_speed(base.replace(resistance=10.0), grid, curve)
    assert high.speed < low.speed


def test_ideal_system_is_inverse_efficiency(base, grid, curve):
    ideal = base.replace(drag_coeff=0.0, resistance=1e-9)
    energies = scenario_energy(ideal, grid, curve)
    np.testing.assert_allclose(energies, 1.0 / curve(grid), rtol=1e-6)

    best = optimal_speed(ideal, grid, curve)
    peak_speed, _ = curve.peak()
    assert abs(best.speed - peak_speed) <= grid[1] - grid[0]
    assert best.normalized_energy == pytest.approx(1.0 / curve(grid).max(), rel=1e-6)


def test_ideal_system_reaches_one_with_perfect_motor(base):
    curve = EfficiencyCurve([1.0, 10.0, 20.0, 30.0], [0.5, 0.8, 1.0, 0.7])
    grid = speed_grid(1.0, 30.0, 59)
    best = optimal_speed(base.replace(drag_coeff=0.0, resistance=1e-9), grid, curve)
    assert best.speed == pytest.approx(20.0)
    assert best.normalized_energy == pytest.approx(1.0, abs=1e-6)


def test_more_drag_never_raises_optimum(base, grid, curve):
    speeds = [
        optimal_speed(base.replace(drag_coeff=c), grid, curve).speed
        for c in (0.0, 0.3, 0.6, 1.2, 2.4)
    ]
    assert all(a >= b for a, b in zip(speeds, speeds[1:]))
    assert speeds[-1] < speeds[0]


def test_steeper_slope_never_lowers_optimum_at_low_resistance(base, grid, curve):
    lossless = base.replace(resistance=1e-9)
    speeds = [
        optimal_speed(lossless.replace(slope=s), grid, curve).speed
        for s in (0.02, 0.05, 0.1, 0.15, 0.3)
    ]
    assert all(a <= b for a, b in zip(speeds, speeds[1:]))
    assert speeds[-1] > speeds[0]


def test_slope_trend_breaks_down_at_high_resistance(base, grid, curve):
    # Joule loss over the climbing force grows with the slope and pulls the optimum down
    lossy = base.replace(resistance=10.0)
    moderate = optimal_speed(lossy.replace(slope=0.05), grid, curve).speed
    steep = optimal_speed(lossy.replace(slope=0.1), grid, curve).speed
    assert steep < moderate


def test_slope_zero_is_invalid(grid, curve):
    with pytest.raises(InvalidParameter):
        normalized_energy(0.0, 110.0, grid, curve, 0.6, 50.0, 1.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(slope=-0.05),
        dict(mass=0.0),
        dict(battery_voltage=0.0),
        dict(resistance=-1.0),
        dict(drag_coeff=-0.1),
        dict(mass=float("nan")),
        dict(mass=True),
        dict(resistance=np.bool_(True)),
    ],
)
def test_invalid_scalars(kwargs, grid, curve):
    args = dict(slope=0.05, mass=110.0, drag_coeff=0.6, battery_voltage=50.0, resistance=1.0)
    args.update(kwargs)
    with pytest.raises(InvalidParameter):
        normalized_energy(args["slope"], args["mass"], grid, curve,
                          args["drag_coeff"], args["battery_voltage"], args["resistance"])
    with pytest.raises(InvalidParameter):
        ScenarioParameters(**args)


def test_zero_drag_is_allowed(base, grid, curve):
    energies = scenario_energy(base.replace(drag_coeff=0.0), grid, curve)
    assert np.all(energies < scenario_energy(base, grid, curve))


def test_speed_outside_curve_is_out_of_domain(base, curve):
    with pytest.raises(OutOfDomain):
        scenario_energy(base, [10.0, 20.0, 60.0], curve)


@pytest.mark.parametrize(
    "grid, error",
    [
        ([], EmptyInput),
        ([0.0, 10.0], InvalidParameter),
        ([10.0, 5.0], InvalidParameter),
        ([[10.0, 20.0]], InvalidParameter),
    ],
)
def test_bad_grids(base, curve, grid, error):
    with pytest.raises(error):
        scenario_energy(base, grid, curve)


def test_find_optimal_speed_single_point():
    best = find_optimal_speed([12.5], [1.7])
    assert best.index == 0
    assert best.speed == 12.5
    assert best.normalized_energy == 1.7


def test_find_optimal_speed_ties_pick_lowest_speed():
    best = find_optimal_speed([5.0, 10.0, 15.0, 20.0], [2.0, 1.5, 1.5, 1.8], [0.5, 0.6, 0.7, 0.8])
    assert best.index == 1
    assert best.speed == 10.0
    assert best.efficiency == 0.6


def test_find_optimal_speed_errors():
    with pytest.raises(EmptyInput):
        find_optimal_speed([], [])
    with pytest.raises(InvalidParameter):
        find_optimal_speed([1.0, 2.0], [1.0])
    with pytest.raises(InvalidParameter):
        find_optimal_speed([1.0, 2.0], [float("nan"), 1.0])
    with pytest.raises(InvalidParameter):
        find_optimal_speed([1.0, 2.0, 3.0], [3.0, 2.0, 1.0], [0.5])


def test_breakdown_matches_normalized_energy(base, grid, curve):
    parts = energy_breakdown(base, grid, curve)
    np.testing.assert_allclose(parts.normalized, scenario_energy(base, grid, curve))
    np.testing.assert_allclose(parts.gravity, base.climbing_force)
    assert np.all(parts.aero >= 0)
    assert np.all(parts.motor_loss > 0)
    assert np.all(parts.joule > 0)
    # current rises with speed on the same hill
    assert parts.current[-1] > parts.current[50]


def test_evaluate_keeps_grid_order(base, grid, curve):
    samples = evaluate(base, grid, curve)
    assert [s.speed for s in samples] == pytest.approx(list(grid))
    assert samples[0].efficiency == pytest.approx(float(curve(grid[0])))


def test_scenario_replace_validates(base):
    assert base.replace(slope=0.1).slope == 0.1
    assert base.slope == 0.05
    with pytest.raises(InvalidParameter):
        base.replace(slope=0.0)


def test_speed_grid():
    grid = speed_grid()
    assert grid.size == 100
    assert grid[0] == pytest.approx(0.1)
    assert grid[-1] == pytest.approx(48.0)
    assert speed_grid(5.0, 5.0, 1).tolist() == [5.0]

    with pytest.raises(InvalidParameter):
        speed_grid(0.0, 48.0, 100)
    with pytest.raises(InvalidParameter):
        speed_grid(0.1, 48.0, 0)
    with pytest.raises(InvalidParameter):
        speed_grid(0.1, 48.0, float("nan"))
    with pytest.raises(InvalidParameter):
        speed_grid(20.0, 10.0, 10)
