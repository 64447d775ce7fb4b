"""Todo (unscheduled, priority/due-date bound) data model for focalplan."""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field, field_validator

from focalplan.models.constants import DEFAULT_ENERGY_LEVEL, DEFAULT_TASK_ICON, DEFAULT_TODO_COLOR
from focalplan.models.energy import Priority
from focalplan.models.task import Subtask
from focalplan.models.temporal import RecurrenceRule, validate_repeat_days


class TodoReminderOption(str, Enum):
    """Reminder offset before a todo is due."""
    NONE = "none"
    AT_TIME = "at_time"
    FIVE_MIN = "5_min"
    FIFTEEN_MIN = "15_min"
    THIRTY_MIN = "30_min"
    ONE_HOUR = "1_hour"
    ONE_DAY = "1_day"

    @property
    def offset(self) -> Optional[timedelta]:
        return _TODO_REMINDER_OFFSETS[self]


_TODO_REMINDER_OFFSETS = {
    TodoReminderOption.NONE: None,
    TodoReminderOption.AT_TIME: timedelta(0),
    TodoReminderOption.FIVE_MIN: timedelta(minutes=5),
    TodoReminderOption.FIFTEEN_MIN: timedelta(minutes=15),
    TodoReminderOption.THIRTY_MIN: timedelta(minutes=30),
    TodoReminderOption.ONE_HOUR: timedelta(hours=1),
    TodoReminderOption.ONE_DAY: timedelta(days=1),
}


class TodoRecord(BaseModel):
    """An unscheduled item ordered by priority and due date."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique todo identifier (UUID v4)")
    title: str = Field(..., min_length=1, description="Todo title")
    icon: str = Field(DEFAULT_TASK_ICON, description="Emoji icon")
    color_name: str = Field(DEFAULT_TODO_COLOR, description="Color tag")
    priority: Priority = Field(Priority.MEDIUM, description="Priority tier")
    category: Optional[str] = Field(None, description="Optional taxonomy tag")
    due_date: Optional[date] = Field(None, description="Due day")
    due_time: Optional[time] = Field(None, description="Due time of day (only meaningful with due_date)")
    estimated_duration_seconds: Optional[int] = Field(None, ge=0, description="Estimated duration")
    energy_level: int = Field(DEFAULT_ENERGY_LEVEL, ge=0, le=4, description="Energy cost 0-4")
    recurrence: RecurrenceRule = Field(RecurrenceRule.NONE, description="Recurrence rule")
    repeat_days: List[int] = Field(default_factory=list, description="Weekdays (0=Sunday) for custom recurrence")
    reminder: TodoReminderOption = Field(TodoReminderOption.NONE, description="Reminder offset")
    notes: Optional[str] = Field(None, description="Free-form notes")
    subtasks: List[Subtask] = Field(default_factory=list, description="Ordered subtasks")
    is_completed: bool = Field(False, description="Completion flag")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    is_archived: bool = Field(False, description="Archived todos leave active views but are kept")
    order_index: int = Field(0, ge=0, description="Position within its priority group")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("repeat_days")
    @classmethod
    def _validate_repeat_days(cls, v):
        return validate_repeat_days(v)

    @property
    def anchor_date(self) -> date:
        return self.due_date or self.created_at.date()

    @property
    def has_due_time(self) -> bool:
        return self.due_date is not None and self.due_time is not None

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
