"""
Exceptions raised by the energy model.

All of them derive from ValueError so callers that only care about "bad
input" can catch that.
"""


class EnergyModelError(ValueError):
    """Base class for every error raised by ebike_energy."""


class InvalidParameter(EnergyModelError):
    """A scalar parameter or grid value is outside its allowed range."""


class OutOfDomain(EnergyModelError):
    """A speed lies outside the range sampled by the efficiency curve."""

    def __init__(self, speeds, speed_min: float, speed_max: float):
        self.speeds = list(speeds)
        self.speed_min = speed_min
        self.speed_max = speed_max
        shown = ", ".join(f"{v:g}" for v in self.speeds[:5])
        if len(self.speeds) > 5:
            shown += ", ..."
        super().__init__(
            f"speed(s) [{shown}] km/h outside efficiency curve range "
            f"[{speed_min:g}, {speed_max:g}] km/h"
        )


class EmptyInput(EnergyModelError):
    """An input sequence that must not be empty is empty."""
