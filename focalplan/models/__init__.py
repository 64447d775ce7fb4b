"""Data models for focalplan."""

from focalplan.models.energy import EffortTier, EnergyLevel, EnergyRequest, Priority
from focalplan.models.task import ReminderOption, Subtask, TaskCompletionRecord, TaskRecord
from focalplan.models.temporal import EVERYDAY, WEEKDAYS, WEEKENDS, RecurrenceRule, Weekday
from focalplan.models.todo import TodoRecord, TodoReminderOption

__all__ = [
    "EffortTier",
    "EnergyLevel",
    "EnergyRequest",
    "Priority",
    "ReminderOption",
    "Subtask",
    "TaskCompletionRecord",
    "TaskRecord",
    "TodoRecord",
    "TodoReminderOption",
    "RecurrenceRule",
    "Weekday",
    "WEEKDAYS",
    "WEEKENDS",
    "EVERYDAY",
]
