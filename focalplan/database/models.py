"""SQLAlchemy database models for focalplan."""

from datetime import datetime
from typing import List, Type, TypeVar, Union
import uuid
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Time, JSON, ForeignKey, UniqueConstraint

from focalplan.database.database import Base
from focalplan.models.energy import Priority
from focalplan.models.task import ReminderOption, Subtask, TaskCompletionRecord, TaskRecord
from focalplan.models.temporal import RecurrenceRule
from focalplan.models.todo import TodoRecord, TodoReminderOption

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string)."""
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def _subtasks_to_json(subtasks: List[Subtask]) -> list:
    return [s.model_dump(mode="json") for s in subtasks]


def _subtasks_from_json(raw) -> List[Subtask]:
    return [Subtask.model_validate(s) for s in (raw or [])]


class TaskDB(Base):
    """Database model for TaskRecord."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    title = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    color_name = Column(String, nullable=False)
    notes = Column(String, nullable=True)

    # Scheduling fields
    start_time = Column(DateTime, nullable=False, index=True)
    duration_seconds = Column(Integer, nullable=False, default=3600)
    energy_level = Column(Integer, nullable=False, default=2)

    # Recurrence (repeat_days stored as JSON array of weekday indices)
    recurrence = Column(String, nullable=False, default=RecurrenceRule.NONE.value)
    repeat_days = Column(JSON, nullable=False, default=list)
    reminder = Column(String, nullable=False, default=ReminderOption.NONE.value)

    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    # Subtasks (stored as JSON array)
    subtasks = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_pydantic(self) -> TaskRecord:
        """Convert database model to Pydantic model."""
        return TaskRecord(
            id=self.id,
            title=self.title,
            icon=self.icon,
            color_name=self.color_name,
            notes=self.notes,
            start_time=self.start_time,
            duration_seconds=self.duration_seconds,
            energy_level=self.energy_level,
            recurrence=value_to_enum(self.recurrence, RecurrenceRule, RecurrenceRule.NONE),
            repeat_days=self.repeat_days or [],
            reminder=value_to_enum(self.reminder, ReminderOption, ReminderOption.NONE),
            is_completed=self.is_completed,
            completed_at=self.completed_at,
            subtasks=_subtasks_from_json(self.subtasks),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task: TaskRecord) -> "TaskDB":
        """Create database model from Pydantic model."""
        row = cls(id=task.id, created_at=task.created_at)
        row.apply(task)
        return row

    def apply(self, task: TaskRecord) -> None:
        """Copy every mutable field from `task` onto this row."""
        self.title = task.title
        self.icon = task.icon
        self.color_name = task.color_name
        self.notes = task.notes
        self.start_time = task.start_time
        self.duration_seconds = task.duration_seconds
        self.energy_level = task.energy_level
        self.recurrence = enum_to_value(task.recurrence)
        self.repeat_days = list(task.repeat_days)
        self.reminder = enum_to_value(task.reminder)
        self.is_completed = task.is_completed
        self.completed_at = task.completed_at
        self.subtasks = _subtasks_to_json(task.subtasks)
        self.updated_at = task.updated_at


class TaskCompletionDB(Base):
    """Completion of one occurrence of a recurring task."""

    __tablename__ = "task_completions"
    __table_args__ = (
        # At most one completion per task occurrence
        UniqueConstraint("task_id", "completed_date", name="uq_task_completion_day"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    completed_date = Column(Date, nullable=False)
    completed_at = Column(DateTime, nullable=False)

    def to_pydantic(self) -> TaskCompletionRecord:
        return TaskCompletionRecord(
            id=self.id,
            task_id=self.task_id,
            completed_date=self.completed_date,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_pydantic(cls, record: TaskCompletionRecord) -> "TaskCompletionDB":
        return cls(
            id=record.id,
            task_id=record.task_id,
            completed_date=record.completed_date,
            completed_at=record.completed_at,
        )


class TodoDB(Base):
    """Database model for TodoRecord."""

    __tablename__ = "todos"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    title = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    color_name = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    category = Column(String, nullable=True)

    # Classification fields
    priority = Column(String, nullable=False, default=Priority.MEDIUM.value, index=True)
    energy_level = Column(Integer, nullable=False, default=2)
    estimated_duration_seconds = Column(Integer, nullable=True)

    # Due date/time
    due_date = Column(Date, nullable=True, index=True)
    due_time = Column(Time, nullable=True)

    recurrence = Column(String, nullable=False, default=RecurrenceRule.NONE.value)
    repeat_days = Column(JSON, nullable=False, default=list)
    reminder = Column(String, nullable=False, default=TodoReminderOption.NONE.value)

    subtasks = Column(JSON, nullable=False, default=list)

    # Flags
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_pydantic(self) -> TodoRecord:
        """Convert database model to Pydantic model."""
        return TodoRecord(
            id=self.id,
            title=self.title,
            icon=self.icon,
            color_name=self.color_name,
            notes=self.notes,
            category=self.category,
            priority=value_to_enum(self.priority, Priority, Priority.MEDIUM),
            energy_level=self.energy_level,
            estimated_duration_seconds=self.estimated_duration_seconds,
            due_date=self.due_date,
            due_time=self.due_time,
            recurrence=value_to_enum(self.recurrence, RecurrenceRule, RecurrenceRule.NONE),
            repeat_days=self.repeat_days or [],
            reminder=value_to_enum(self.reminder, TodoReminderOption, TodoReminderOption.NONE),
            subtasks=_subtasks_from_json(self.subtasks),
            is_completed=self.is_completed,
            completed_at=self.completed_at,
            is_archived=self.is_archived,
            order_index=self.order_index,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, todo: TodoRecord) -> "TodoDB":
        """Create database model from Pydantic model."""
        row = cls(id=todo.id, created_at=todo.created_at)
        row.apply(todo)
        return row

    def apply(self, todo: TodoRecord) -> None:
        """Copy every mutable field from `todo` onto this row."""
        self.title = todo.title
        self.icon = todo.icon
        self.color_name = todo.color_name
        self.notes = todo.notes
        self.category = todo.category
        self.priority = enum_to_value(todo.priority)
        self.energy_level = todo.energy_level
        self.estimated_duration_seconds = todo.estimated_duration_seconds
        self.due_date = todo.due_date
        self.due_time = todo.due_time
        self.recurrence = enum_to_value(todo.recurrence)
        self.repeat_days = list(todo.repeat_days)
        self.reminder = enum_to_value(todo.reminder)
        self.subtasks = _subtasks_to_json(todo.subtasks)
        self.is_completed = todo.is_completed
        self.completed_at = todo.completed_at
        self.is_archived = todo.is_archived
        self.order_index = todo.order_index
        self.updated_at = todo.updated_at
