"""Repository layer for database operations."""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, func, or_

from focalplan.database.models import TaskCompletionDB, TaskDB, TodoDB, enum_to_value
from focalplan.errors import NotFoundError, ValidationError
from focalplan.models.record_factory import archive_todo, toggle_completion
from focalplan.models.task import TaskCompletionRecord, TaskRecord
from focalplan.models.temporal import RecurrenceRule, end_of_day
from focalplan.models.todo import TodoRecord
from focalplan.notifications import ReminderScheduler, reschedule_reminder
from focalplan.recurrence.evaluator import record_occurs_on
from focalplan.recurrence.instances import TaskInstance, instances_for_date, instances_overlapping_day

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for TaskRecord database operations.

    When a reminder scheduler is supplied, every write re-schedules (or
    cancels) the task's next reminder.
    """

    def __init__(self, db: Session, reminders: Optional[ReminderScheduler] = None):
        self.db = db
        self.reminders = reminders

    def _row(self, task_id: str) -> TaskDB:
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            raise NotFoundError(task_id, kind="task")
        return task_db

    def _sync_reminder(self, task: TaskRecord, now: Optional[datetime]) -> None:
        if self.reminders is not None:
            reschedule_reminder(self.reminders, task, now or datetime.now())

    def create(self, task: TaskRecord, now: Optional[datetime] = None) -> TaskRecord:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise
        created = task_db.to_pydantic()
        self._sync_reminder(created, now)
        return created

    def get(self, task_id: str) -> TaskRecord:
        """Get task by ID.

        Raises:
            NotFoundError: if no task has this id
        """
        return self._row(task_id).to_pydantic()

    def get_all(self) -> List[TaskRecord]:
        """Get all tasks sorted by start time."""
        tasks_db = self.db.query(TaskDB).order_by(TaskDB.start_time, TaskDB.created_at).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_for_range(self, start_day: date, end_day: date) -> List[TaskRecord]:
        """Tasks that can occur in [start_day, end_day].

        One-off tasks overlapping the range (including ones that started
        earlier and run into it), plus recurring tasks anchored on or before its
        last day. Expand with recurrence.instances_for_date.
        """
        if end_day < start_day:
            raise ValidationError("end_day", "end_day must be >= start_day")
        range_start = datetime.combine(start_day, datetime.min.time())
        range_end = end_of_day(datetime.combine(end_day, datetime.min.time()))
        none_value = enum_to_value(RecurrenceRule.NONE)
        longest = self.db.query(func.max(TaskDB.duration_seconds)).scalar() or 0
        earliest_start = range_start - timedelta(seconds=longest)
        tasks_db = self.db.query(TaskDB).filter(
            or_(
                and_(
                    TaskDB.recurrence == none_value,
                    TaskDB.start_time >= earliest_start,
                    TaskDB.start_time < range_end,
                ),
                and_(
                    TaskDB.recurrence != none_value,
                    TaskDB.start_time < range_end,
                ),
            )
        ).order_by(TaskDB.start_time, TaskDB.created_at).all()
        tasks = [task_db.to_pydantic() for task_db in tasks_db]
        return [
            t for t in tasks
            if t.is_recurring or t.start_time >= range_start or t.end_time > range_start
        ]

    def update(self, task: TaskRecord, now: Optional[datetime] = None) -> TaskRecord:
        """Persist every field of an existing task."""
        task_db = self._row(task.id)
        task_db.apply(task)

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.title[:50]}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise
        updated = task_db.to_pydantic()
        self._sync_reminder(updated, now)
        return updated

    def delete(self, task_id: str) -> None:
        """Delete a task, its completion records and its pending reminder."""
        task_db = self._row(task_id)
        try:
            removed = self.db.query(TaskCompletionDB).filter(
                TaskCompletionDB.task_id == task_id
            ).delete(synchronize_session=False)
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id} and {removed} completion records")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        if self.reminders is not None:
            self.reminders.cancel(task_id)

    def completion_records(self, task_ids: Optional[Iterable[str]] = None) -> List[TaskCompletionRecord]:
        """Completion records, optionally limited to some tasks."""
        query = self.db.query(TaskCompletionDB)
        if task_ids is not None:
            query = query.filter(TaskCompletionDB.task_id.in_(list(task_ids)))
        rows = query.order_by(TaskCompletionDB.completed_date).all()
        return [row.to_pydantic() for row in rows]

    def instances_for_date(self, day: date) -> List[TaskInstance]:
        """Expanded task instances for a day, with completion state."""
        tasks = self.get_for_range(day, day)
        records = self.completion_records(t.id for t in tasks if t.is_recurring)
        return instances_for_date(tasks, day, records)

    def instances_overlapping_day(self, day: date) -> List[TaskInstance]:
        """Instances occupying any part of a day, including spill-over from earlier days."""
        tasks = self.get_for_range(day, day)
        records = self.completion_records(t.id for t in tasks if t.is_recurring)
        return instances_overlapping_day(tasks, day, records)

    def toggle_instance_completion(self, task_id: str, day: date, now: datetime) -> TaskInstance:
        """Toggle completion of the task's occurrence on `day`.

        One-off tasks toggle their own flag. Recurring tasks add or remove a
        completion record for that day.

        Raises:
            NotFoundError: if the task does not exist
            ValidationError: if the task does not occur on `day`
        """
        task = self.get(task_id)
        if not record_occurs_on(task, day):
            raise ValidationError("day", f"task {task_id} does not occur on {day.isoformat()}")

        if not task.is_recurring:
            task = self.update(toggle_completion(task, now), now)
            return instances_for_date([task], day)[0]

        existing = self.db.query(TaskCompletionDB).filter(
            TaskCompletionDB.task_id == task_id,
            TaskCompletionDB.completed_date == day,
        ).first()
        try:
            if existing:
                self.db.delete(existing)
                logger.debug(f"Reopened task {task_id} on {day.isoformat()}")
            else:
                record = TaskCompletionRecord(task_id=task_id, completed_date=day, completed_at=now)
                self.db.add(TaskCompletionDB.from_pydantic(record))
                logger.debug(f"Completed task {task_id} on {day.isoformat()}")
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to toggle completion of task {task_id} on {day}: {type(e).__name__}: {str(e)}")
            raise
        return instances_for_date([task], day, self.completion_records([task_id]))[0]


class TodoRepository:
    """Repository for TodoRecord database operations."""

    def __init__(self, db: Session, reminders: Optional[ReminderScheduler] = None):
        self.db = db
        self.reminders = reminders

    def _row(self, todo_id: str) -> TodoDB:
        todo_db = self.db.query(TodoDB).filter(TodoDB.id == todo_id).first()
        if not todo_db:
            raise NotFoundError(todo_id, kind="todo")
        return todo_db

    def _sync_reminder(self, todo: TodoRecord, now: Optional[datetime]) -> None:
        if self.reminders is None:
            return
        if todo.is_archived:
            self.reminders.cancel(todo.id)
        else:
            reschedule_reminder(self.reminders, todo, now or datetime.now())

    def _open_in_group(self, priority: str):
        return self.db.query(TodoDB).filter(
            TodoDB.priority == priority,
            TodoDB.is_completed.is_(False),
            TodoDB.is_archived.is_(False),
        )

    def _commit(self, description: str) -> None:
        try:
            self.db.commit()
            logger.debug(description)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed: {description}: {type(e).__name__}: {str(e)}")
            raise

    def _reindex(self, priority: str) -> None:
        """Re-sequence order_index within an open priority group."""
        rows = self._open_in_group(priority).order_by(TodoDB.order_index, TodoDB.created_at).all()
        for index, row in enumerate(rows):
            row.order_index = index

    def create(self, todo: TodoRecord, now: Optional[datetime] = None) -> TodoRecord:
        """Create a todo at the end of its priority group."""
        priority = enum_to_value(todo.priority)
        todo = todo.model_copy(update={"order_index": self._open_in_group(priority).count()})
        try:
            todo_db = TodoDB.from_pydantic(todo)
            self.db.add(todo_db)
            self.db.commit()
            self.db.refresh(todo_db)
            logger.debug(f"Created todo {todo.id}: {todo.title[:50]}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create todo {todo.id}: {type(e).__name__}: {str(e)}")
            raise
        created = todo_db.to_pydantic()
        self._sync_reminder(created, now)
        return created

    def get(self, todo_id: str) -> TodoRecord:
        """Get todo by ID.

        Raises:
            NotFoundError: if no todo has this id
        """
        return self._row(todo_id).to_pydantic()

    def get_all(self, include_archived: bool = False) -> List[TodoRecord]:
        """Get todos ordered by group position, then creation time."""
        query = self.db.query(TodoDB)
        if not include_archived:
            query = query.filter(TodoDB.is_archived.is_(False))
        rows = query.order_by(TodoDB.order_index, TodoDB.created_at).all()
        return [row.to_pydantic() for row in rows]

    def update(self, todo: TodoRecord, now: Optional[datetime] = None) -> TodoRecord:
        """Persist every field of an existing todo.

        A todo entering an open group (priority change, reopened) goes to its
        end; the group it leaves is re-sequenced.
        """
        todo_db = self._row(todo.id)
        old_priority = todo_db.priority
        new_priority = enum_to_value(todo.priority)
        was_open = not todo_db.is_completed and not todo_db.is_archived
        now_open = not todo.is_completed and not todo.is_archived
        changed_group = old_priority != new_priority
        if now_open and (changed_group or not was_open):
            todo = todo.model_copy(update={"order_index": self._open_in_group(new_priority).count()})
        todo_db.apply(todo)
        if was_open and (changed_group or not now_open):
            self.db.flush()
            self._reindex(old_priority)
        self._commit(f"Updated todo {todo.id}: {todo.title[:50]}")
        self.db.refresh(todo_db)
        updated = todo_db.to_pydantic()
        self._sync_reminder(updated, now)
        return updated

    def toggle_completion(self, todo_id: str, now: datetime) -> TodoRecord:
        return self.update(toggle_completion(self.get(todo_id), now), now)

    def move(self, todo_id: str, new_index: int, now: datetime) -> TodoRecord:
        """Move an open todo to position `new_index` within its priority group."""
        todo_db = self._row(todo_id)
        others = [
            row for row in self._open_in_group(todo_db.priority)
            .order_by(TodoDB.order_index, TodoDB.created_at).all()
            if row.id != todo_id
        ]
        if not 0 <= new_index <= len(others):
            raise ValidationError("order_index", f"must be 0-{len(others)}, got {new_index}")
        others.insert(new_index, todo_db)
        for index, row in enumerate(others):
            row.order_index = index
        todo_db.updated_at = now
        self._commit(f"Moved todo {todo_id} to position {new_index}")
        self.db.refresh(todo_db)
        return todo_db.to_pydantic()

    def delete(self, todo_id: str) -> None:
        todo_db = self._row(todo_id)
        priority = todo_db.priority
        self.db.delete(todo_db)
        self.db.flush()
        self._reindex(priority)
        self._commit(f"Deleted todo {todo_id}")
        if self.reminders is not None:
            self.reminders.cancel(todo_id)

    def archive(self, todo_id: str, now: datetime) -> TodoRecord:
        """Archive a todo. Archiving is one-way."""
        todo = self.get(todo_id)
        if todo.is_archived:
            return todo
        return self.update(archive_todo(todo, now), now)

    def archive_all_completed(self, now: datetime) -> int:
        """Archive every completed todo; returns how many were archived."""
        rows = self.db.query(TodoDB).filter(
            TodoDB.is_completed.is_(True),
            TodoDB.is_archived.is_(False),
        ).all()
        for row in rows:
            row.is_archived = True
            row.updated_at = now
        self._commit(f"Archived {len(rows)} completed todos")
        if self.reminders is not None:
            for row in rows:
                self.reminders.cancel(row.id)
        return len(rows)

    def delete_all_archived(self) -> int:
        """Permanently delete archived todos; returns how many were deleted."""
        count = self.db.query(TodoDB).filter(
            TodoDB.is_archived.is_(True)
        ).delete(synchronize_session=False)
        self._commit(f"Deleted {count} archived todos")
        return count
