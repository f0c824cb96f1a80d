import shutil
from pathlib import Path

import pytest
from pydantic import ValidationError

from ebike_energy.config import DEFAULT_PARAMS, load_efficiency_curve, load_params

BASE_YAML = """
scenario:
  mass: 90
  slope: 0.08
  drag_coeff: 0.4
  battery_voltage: 36
  resistance: 0.5
efficiency:
  table: tables/eff.csv
"""


def test_default_params():
    params = load_params()
    assert params.scenario.mass == 110.0
    assert params.scenario.slope == 0.05
    assert params.grid.points == 100
    assert set(params.sweeps) == {"friction", "slope", "resistance"}
    assert params.sweeps["friction"].parameter == "drag_coeff"

    table = Path(params.efficiency.table)
    assert table.is_absolute()
    assert table.exists()


def test_relative_table_resolved_against_yaml(tmp_path):
    (tmp_path / "tables").mkdir()
    shutil.copy(DEFAULT_PARAMS.parent / "data" / "motor_efficiency.csv", tmp_path / "tables" / "eff.csv")
    path = tmp_path / "params.yaml"
    path.write_text(BASE_YAML)

    params = load_params(path)
    assert params.efficiency.table == str((tmp_path / "tables" / "eff.csv").resolve())
    assert params.grid.v_max == 48.0
    assert params.sweeps == {}

    scenario = params.scenario.to_scenario(label="mine")
    assert scenario.label == "mine"
    assert scenario.battery_voltage == 36

    assert len(load_efficiency_curve(params)) == 26


def test_missing_scenario_is_rejected(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("grid:\n  points: 10\n")
    with pytest.raises(ValidationError):
        load_params(path)


def test_unknown_sweep_parameter_is_rejected(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(BASE_YAML + "sweeps:\n  wind:\n    parameter: wind_speed\n    values: [1, 2]\n")
    with pytest.raises(ValidationError):
        load_params(path)


def test_empty_sweep_values_are_rejected(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(BASE_YAML + "sweeps:\n  mass:\n    parameter: mass\n    values: []\n")
    with pytest.raises(ValidationError):
        load_params(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_params(tmp_path / "nope.yaml")
