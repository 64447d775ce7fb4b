"""Energy and priority classification for focalplan.

Implements the fixed priority ranking and the effort tiers used by Calm Mode.
Each todo has exactly one effort tier at any moment; tiers are computed, never
stored. This module is deterministic - same inputs always produce same outputs.
"""

from datetime import date
from typing import Iterable

from focalplan.errors import ValidationError, parse_enum
from focalplan.models.constants import LOW_ENERGY_MAX, MEDIUM_ENERGY_MAX, SHORT_TASK_SECONDS
from focalplan.models.energy import EffortTier, EnergyLevel, EnergyRequest, Priority
from focalplan.models.task import TaskCompletionRecord, TaskRecord
from focalplan.models.todo import TodoRecord
from focalplan.recurrence.instances import instances_for_date


# Priority rank (lower sorts first)
PRIORITY_RANKS = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
    Priority.NONE: 3,
}

# Tiers visible at each requested energy
_ALLOWED_TIERS = {
    EnergyRequest.LOW: {EffortTier.LOW},
    EnergyRequest.MEDIUM: {EffortTier.LOW, EffortTier.MEDIUM},
    EnergyRequest.HIGH: {EffortTier.LOW, EffortTier.MEDIUM, EffortTier.HIGH},
}


def priority_rank(priority: Priority) -> int:
    """Rank of a priority: high=0, medium=1, low=2, none=3."""
    return PRIORITY_RANKS[parse_enum(Priority, priority, "priority")]


def effort_tier(todo: TodoRecord) -> EffortTier:
    """Assign an effort tier to a todo.

    Low when the todo is short (estimated at 15 minutes or less), light
    (energy <= 1) or unimportant (low/no priority). Otherwise medium when
    energy <= 2 or priority is not high. Otherwise high.

    A todo with no duration estimate does not count as short.
    """
    is_short = (
        todo.estimated_duration_seconds is not None
        and todo.estimated_duration_seconds <= SHORT_TASK_SECONDS
    )
    if is_short or todo.energy_level <= LOW_ENERGY_MAX or todo.priority in (Priority.LOW, Priority.NONE):
        return EffortTier.LOW
    if todo.energy_level <= MEDIUM_ENERGY_MAX or todo.priority != Priority.HIGH:
        return EffortTier.MEDIUM
    return EffortTier.HIGH


def tier_allowed(tier: EffortTier, energy: EnergyRequest) -> bool:
    allowed = _ALLOWED_TIERS[parse_enum(EnergyRequest, energy, "energy")]
    return parse_enum(EffortTier, tier, "tier") in allowed


def daily_energy_load(
    tasks: Iterable[TaskRecord],
    day: date,
    completion_records: Iterable[TaskCompletionRecord] = (),
) -> int:
    """Energy a day's schedule requires.

    The sum of energy_level over every task occurrence on `day`, recurring
    expansions included. Completed occurrences still count: the load describes
    the plan for the day, not what is left of it.
    """
    return sum(i.energy_level for i in instances_for_date(tasks, day, completion_records))


def energy_gauge(load: int, capacity: int) -> int:
    """Map an energy load onto a 0-100 gauge, capped at 100."""
    if capacity <= 0:
        raise ValidationError("capacity", f"must be > 0, got {capacity}")
    if load < 0:
        raise ValidationError("load", f"must be >= 0, got {load}")
    return min(100, round(load * 100 / capacity))


def energy_label(level: int) -> str:
    """Get human-readable name for an energy level.

    Raises:
        ValidationError: if level is outside 0-4
    """
    try:
        return EnergyLevel(level).label
    except ValueError:
        raise ValidationError("energy_level", f"must be 0-4, got {level!r}") from None
