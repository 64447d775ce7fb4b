"""Energy and priority enumerations."""

from enum import Enum, IntEnum


class EnergyLevel(IntEnum):
    """Cost of a record, 0 (restful) to 4 (intense)."""
    RESTFUL = 0
    LIGHT = 1
    MODERATE = 2
    HIGH = 3
    INTENSE = 4

    @property
    def label(self) -> str:
        return self.name.title()

    @property
    def description(self) -> str:
        return _ENERGY_DESCRIPTIONS[self]


_ENERGY_DESCRIPTIONS = {
    EnergyLevel.RESTFUL: "Low effort, recovery activities",
    EnergyLevel.LIGHT: "Easy tasks, minimal focus required",
    EnergyLevel.MODERATE: "Regular effort, standard tasks",
    EnergyLevel.HIGH: "Demanding, requires full attention",
    EnergyLevel.INTENSE: "Maximum effort, peak performance",
}


class Priority(str, Enum):
    """Todo priority. List grouping order is high, medium, low, none."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class EnergyRequest(str, Enum):
    """The user's current energy, as picked in Calm Mode."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EffortTier(str, Enum):
    """Coarse cost classification of a todo. Computed, never stored."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
