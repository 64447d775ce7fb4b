"""Derived record state.

Pure functions over a record and an explicit `now`; nothing here reads the
wall clock or mutates its input. Task functions also accept TaskInstances.
"""

from datetime import datetime

from focalplan.errors import ValidationError
from focalplan.models.todo import TodoRecord


def is_past(task, now: datetime) -> bool:
    return now > task.end_time


def is_active(task, now: datetime) -> bool:
    """Task is in progress: start <= now <= end and not completed."""
    return task.start_time <= now <= task.end_time and not task.is_completed


def is_overdue(record, now: datetime) -> bool:
    """Overdue check for tasks and todos.

    Tasks are overdue once their end has passed. Todos are overdue when their
    due day is before today, or when a due time is set and has passed.
    Completed records are never overdue.
    """
    if record.is_completed:
        return False
    if isinstance(record, TodoRecord):
        if record.due_date is None:
            return False
        if record.due_time is not None:
            return datetime.combine(record.due_date, record.due_time) < now
        return record.due_date < now.date()
    return is_past(record, now)


def is_due_today(todo: TodoRecord, now: datetime) -> bool:
    return todo.due_date is not None and todo.due_date == now.date()


def time_range_label(task) -> str:
    """'HH:MM - HH:MM', or just 'HH:MM' for zero-duration tasks."""
    start = task.start_time.strftime("%H:%M")
    if task.duration_seconds == 0:
        return start
    return f"{start} - {task.end_time.strftime('%H:%M')}"


def duration_label(seconds: int) -> str:
    """Format a duration as 'Xh Ym', 'Xh' or 'Ym'."""
    if seconds is None or seconds < 0:
        raise ValidationError("duration_seconds", f"duration must be >= 0, got {seconds!r}")
    hours = int(seconds) // 3600
    minutes = int(seconds) % 3600 // 60
    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"
