import matplotlib

matplotlib.use("Agg")

import pytest

from ebike_energy.config import load_efficiency_curve, load_params
from ebike_energy.energy_model import ScenarioParameters, speed_grid



@pytest.fixture
def params():
    return load_params()


@pytest.fixture
def curve(params):
    return load_efficiency_curve(params)


@pytest.fixture
def grid():
    return speed_grid(0.1, 48.0, 100)


@pytest.fixture
def base():
    return ScenarioParameters(
        mass=110.0,
        slope=0.05,
        drag_coeff=0.6,
        battery_voltage=50.0,
        resistance=1.0,
        label="base",
    )
