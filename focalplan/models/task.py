"""Task (calendar-bound) data model for focalplan."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field, field_validator

from focalplan.models.constants import (
    DEFAULT_ENERGY_LEVEL,
    DEFAULT_TASK_COLOR,
    DEFAULT_TASK_DURATION_SECONDS,
    DEFAULT_TASK_ICON,
)
from focalplan.models.temporal import RecurrenceRule, validate_repeat_days


class ReminderOption(str, Enum):
    """Reminder offset before a task starts."""
    NONE = "none"
    FIVE_MIN = "5_min"
    FIFTEEN_MIN = "15_min"
    THIRTY_MIN = "30_min"
    ONE_HOUR = "1_hour"

    @property
    def offset(self) -> Optional[timedelta]:
        return _TASK_REMINDER_OFFSETS[self]


_TASK_REMINDER_OFFSETS = {
    ReminderOption.NONE: None,
    ReminderOption.FIVE_MIN: timedelta(minutes=5),
    ReminderOption.FIFTEEN_MIN: timedelta(minutes=15),
    ReminderOption.THIRTY_MIN: timedelta(minutes=30),
    ReminderOption.ONE_HOUR: timedelta(hours=1),
}


class Subtask(BaseModel):
    """A checklist item owned by exactly one task or todo."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique subtask identifier")
    title: str = Field(..., description="Subtask title")
    is_completed: bool = Field(False, description="Whether the subtask is done")
    order_index: int = Field(0, ge=0, description="Explicit position within the parent")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")


class TaskRecord(BaseModel):
    """A scheduled, calendar-bound item."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique task identifier (UUID v4)")
    title: str = Field(..., min_length=1, description="Task title")
    icon: str = Field(DEFAULT_TASK_ICON, description="Emoji icon")
    color_name: str = Field(DEFAULT_TASK_COLOR, description="Color tag")
    start_time: datetime = Field(..., description="Start instant")
    duration_seconds: int = Field(DEFAULT_TASK_DURATION_SECONDS, ge=0, description="Duration; 0 is an instant event")
    recurrence: RecurrenceRule = Field(RecurrenceRule.NONE, description="Recurrence rule")
    repeat_days: List[int] = Field(default_factory=list, description="Weekdays (0=Sunday) for custom recurrence")
    reminder: ReminderOption = Field(ReminderOption.NONE, description="Reminder offset")
    energy_level: int = Field(DEFAULT_ENERGY_LEVEL, ge=0, le=4, description="Energy cost 0-4")
    notes: Optional[str] = Field(None, description="Free-form notes")
    is_completed: bool = Field(False, description="Completion flag (non-recurring tasks)")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    subtasks: List[Subtask] = Field(default_factory=list, description="Ordered subtasks")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("repeat_days")
    @classmethod
    def _validate_repeat_days(cls, v):
        return validate_repeat_days(v)

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(seconds=self.duration_seconds)

    @property
    def anchor_date(self) -> date:
        return self.start_time.date()

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != RecurrenceRule.NONE

    @property
    def completed_subtasks_count(self) -> int:
        return sum(1 for s in self.subtasks if s.is_completed)

    @property
    def subtasks_progress(self) -> float:
        if not self.subtasks:
            return 0.0
        return self.completed_subtasks_count / len(self.subtasks)


class TaskCompletionRecord(BaseModel):
    """Completion of one occurrence of a recurring task."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique record identifier")
    task_id: str = Field(..., description="Source task id")
    completed_date: date = Field(..., description="Day of the completed occurrence")
    completed_at: datetime = Field(..., description="When the occurrence was marked complete")
