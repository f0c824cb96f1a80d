import dataclasses
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .efficiency import EfficiencyCurve
from .energy_model import ScenarioParameters, speed_grid

DEFAULT_PARAMS = Path(__file__).parent / "params.yaml"

SCENARIO_FIELDS = tuple(
    f.name for f in dataclasses.fields(ScenarioParameters) if f.name != "label"
)


class ScenarioConfig(BaseModel):
    mass: float
    slope: float
    drag_coeff: float
    battery_voltage: float
    resistance: float

    def to_scenario(self, label: Optional[str] = None) -> ScenarioParameters:
        return ScenarioParameters(label=label, **self.model_dump())


class GridConfig(BaseModel):
    v_min: float = 0.1
    v_max: float = 48.0
    points: int = 100

    def build(self):
        return speed_grid(self.v_min, self.v_max, self.points)


class EfficiencyConfig(BaseModel):
    table: str = "data/motor_efficiency.csv"
    variable: Optional[str] = None   # matrix name inside a .mat file
    percent: bool = True


class SweepConfig(BaseModel):
    parameter: str
    values: List[float] = Field(..., min_length=1)
    title: Optional[str] = None

    @field_validator("parameter")
    @classmethod
    def _known_parameter(cls, value: str) -> str:
        if value not in SCENARIO_FIELDS:
            raise ValueError(f"unknown scenario parameter '{value}', expected one of {SCENARIO_FIELDS}")
        return value


class Params(BaseModel):
    scenario: ScenarioConfig
    grid: GridConfig = Field(default_factory=GridConfig)
    efficiency: EfficiencyConfig = Field(default_factory=EfficiencyConfig)
    sweeps: Dict[str, SweepConfig] = Field(default_factory=dict)


def load_params(path: Union[str, Path, None] = None) -> Params:
    """
    Load model parameters from a YAML file and return a Params object.

    Args:
        path: Path to the YAML parameter file (default: the params.yaml
            shipped with the package).

    Returns:
        Params: Parsed parameters as a Pydantic model. A relative
        efficiency table path is resolved against the YAML file's folder.
    """
    yaml_path = Path(path) if path is not None else DEFAULT_PARAMS
    data = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}
    params = Params.model_validate(data)

    table = Path(params.efficiency.table)
    if not table.is_absolute():
        params.efficiency.table = str((yaml_path.parent / table).resolve())
    return params


def load_efficiency_curve(params: Params) -> EfficiencyCurve:
    cfg = params.efficiency
    return EfficiencyCurve.from_table(cfg.table, percent=cfg.percent, variable=cfg.variable)
