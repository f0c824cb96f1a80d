"""
Motor efficiency curve.

The curve is an empirical lookup table (speed in km/h, efficiency) sampled
from a motor simulator. Column 0 holds the speed, column 1 the efficiency,
usually in percent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import scipy.io

from .errors import EmptyInput, InvalidParameter, OutOfDomain

log = logging.getLogger(__name__)

TEXT_SUFFIXES = (".csv", ".txt", ".dat")


def _is_numeric_row(line: str, delimiter: Optional[str]) -> bool:
    try:
        [float(tok) for tok in line.strip().split(delimiter)]
    except ValueError:
        return False
    return True


def _read_text_table(path: Path) -> np.ndarray:
    delimiter = "," if path.suffix.lower() == ".csv" else None
    with open(path, "r", encoding="utf-8") as fh:
        lines = [ln for ln in fh if ln.strip() and not ln.lstrip().startswith("#")]

    # one optional header row
    if lines and not _is_numeric_row(lines[0], delimiter):
        lines = lines[1:]
    if not lines:
        raise EmptyInput(f"efficiency table {path} has no data rows")

    try:
        return np.loadtxt(lines, delimiter=delimiter, ndmin=2)
    except ValueError as e:
        raise InvalidParameter(f"cannot parse efficiency table {path}: {e}") from e


def _read_mat_table(path: Path, variable: Optional[str]) -> np.ndarray:
    contents = scipy.io.loadmat(str(path))
    if variable is not None:
        if variable not in contents:
            raise InvalidParameter(f"variable '{variable}' not found in {path}")
        candidates = [contents[variable]]
    else:
        candidates = [
            value for key, value in contents.items()
            if not key.startswith("__") and isinstance(value, np.ndarray)
        ]

    for value in candidates:
        if value.ndim != 2 or not np.issubdtype(value.dtype, np.number):
            continue
        # row-oriented tables are stored 2 x N by some exporters
        if value.shape[1] < 2 <= value.shape[0]:
            value = value.T
        if value.shape[1] >= 2:
            return np.asarray(value, dtype=float)

    raise EmptyInput(f"no 2-D numeric matrix with two columns found in {path}")


def read_table(path: Union[str, Path], variable: Optional[str] = None) -> np.ndarray:
    """
    Read an efficiency lookup table into an (N, >=2) float array.

    Args:
        path: .csv/.txt/.dat text table or MATLAB .mat file.
        variable: name of the matrix inside a .mat file (default: first
            2-D numeric matrix found).
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".mat":
        table = _read_mat_table(path, variable)
    elif suffix in TEXT_SUFFIXES:
        table = _read_text_table(path)
    else:
        raise InvalidParameter(f"unsupported efficiency table format '{suffix}' ({path})")

    if table.shape[1] < 2:
        raise InvalidParameter(f"efficiency table {path} needs two columns, got {table.shape[1]}")
    return table


class EfficiencyCurve:
    """
    Linear interpolation over (speed, efficiency) samples.

    Speeds are in km/h and strictly increasing, efficiencies are fractions
    in (0, 1]. Queries outside the sampled speed range raise OutOfDomain,
    the curve is never extrapolated.
    """

    def __init__(self, speeds: Sequence[float], efficiencies: Sequence[float]):
        speeds = np.array(speeds, dtype=float).ravel()
        efficiencies = np.array(efficiencies, dtype=float).ravel()

        if speeds.size == 0 or efficiencies.size == 0:
            raise EmptyInput("efficiency curve has no samples")
        if speeds.size != efficiencies.size:
            raise InvalidParameter(
                f"efficiency curve has {speeds.size} speeds but {efficiencies.size} efficiencies"
            )
        if speeds.size < 2:
            raise InvalidParameter("efficiency curve needs at least two samples to interpolate")
        if not np.all(np.isfinite(speeds)) or not np.all(np.diff(speeds) > 0):
            raise InvalidParameter("efficiency curve speeds must be finite and strictly increasing")
        if not np.all((efficiencies > 0) & (efficiencies <= 1)):
            raise InvalidParameter("efficiency values must lie in (0, 1]")

        speeds.setflags(write=False)
        efficiencies.setflags(write=False)
        self.speeds = speeds
        self.efficiencies = efficiencies

    @classmethod
    def from_array(cls, table, percent: bool = True) -> "EfficiencyCurve":
        table = np.asarray(table, dtype=float)
        if table.ndim != 2 or table.shape[1] < 2:
            raise InvalidParameter("efficiency table must be a 2-D array with two columns")
        efficiency = table[:, 1] / 100.0 if percent else table[:, 1]
        return cls(table[:, 0], efficiency)

    @classmethod
    def from_table(
        cls,
        path: Union[str, Path],
        percent: bool = True,
        variable: Optional[str] = None,
    ) -> "EfficiencyCurve":
        """Load the curve from a lookup table file (see read_table)."""
        curve = cls.from_array(read_table(path, variable), percent=percent)
        log.debug("loaded efficiency curve from %s: %d samples, %g..%g km/h",
                  path, len(curve), curve.speed_min, curve.speed_max)
        return curve

    @property
    def speed_min(self) -> float:
        return float(self.speeds[0])

    @property
    def speed_max(self) -> float:
        return float(self.speeds[-1])

    def __len__(self) -> int:
        return int(self.speeds.size)

    def __repr__(self) -> str:
        return f"EfficiencyCurve({len(self)} samples, {self.speed_min:g}..{self.speed_max:g} km/h)"

    def peak(self) -> Tuple[float, float]:
        """Speed and value of the maximum efficiency sample (first one on ties)."""
        idx = int(np.argmax(self.efficiencies))
        return float(self.speeds[idx]), float(self.efficiencies[idx])

    def __call__(self, speeds):
        v = np.asarray(speeds, dtype=float)
        outside = (v < self.speeds[0]) | (v > self.speeds[-1]) | ~np.isfinite(v)
        if np.any(outside):
            raise OutOfDomain(np.atleast_1d(v[outside]), self.speed_min, self.speed_max)
        return np.interp(v, self.speeds, self.efficiencies)
