"""Reminder instants for tasks and todos.

Only computes when a reminder should fire; delivery belongs to a
ReminderScheduler (see focalplan.notifications).
"""

from datetime import datetime
from typing import Optional

from focalplan.models.task import TaskRecord
from focalplan.models.todo import TodoRecord
from focalplan.recurrence.evaluator import next_occurrence, occurrence_instant


def task_reminder_time(task: TaskRecord) -> Optional[datetime]:
    """Reminder instant for the task's first occurrence, or None if no reminder is set."""
    offset = task.reminder.offset
    if offset is None:
        return None
    return task.start_time - offset


def todo_reminder_time(todo: TodoRecord) -> Optional[datetime]:
    """Reminder instant for a dated todo.

    A todo without a due time is reminded relative to 09:00 on its due day.
    Undated todos get no reminder.
    """
    offset = todo.reminder.offset
    if offset is None or todo.due_date is None:
        return None
    return occurrence_instant(todo, todo.due_date) - offset


def next_reminder(record, after: datetime) -> Optional[datetime]:
    """First reminder instant strictly after `after`.

    For recurring records this walks forward through occurrences; completed
    one-off records have nothing left to remind about.
    """
    offset = record.reminder.offset
    if offset is None:
        return None
    if record.is_completed and not record.is_recurring:
        return None
    occurrence = next_occurrence(record, after + offset)
    if occurrence is None:
        return None
    return occurrence - offset
