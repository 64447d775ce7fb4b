"""Record creation and mutation for focalplan.

This module centralizes record creation so defaults and validation are applied
consistently, and provides the mutations the store performs. Mutations never
modify their input: each returns an updated copy with `updated_at` refreshed.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional, Type, TypeVar, Union

import pydantic

from focalplan.errors import NotFoundError, ValidationError
from focalplan.models.task import Subtask, TaskRecord
from focalplan.models.temporal import at_minute, minute_of_day
from focalplan.models.todo import TodoRecord

R = TypeVar("R", TaskRecord, TodoRecord)

AnyRecord = Union[TaskRecord, TodoRecord]

# Fields a caller may never overwrite through update_record
_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at"}


def _build(model_cls: Type[R], data: Dict[str, Any]) -> R:
    """Validate `data` into `model_cls`, translating pydantic errors."""
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or model_cls.__name__
        raise ValidationError(field, first.get("msg", "invalid value")) from e


def _require_title(title: Optional[str], field: str = "title") -> str:
    if title is None or not title.strip():
        raise ValidationError(field, "title must not be empty")
    return title.strip()


def create_task_record(
    title: str,
    start_time: datetime,
    *,
    now: Optional[datetime] = None,
    **overrides: Any,
) -> TaskRecord:
    """Create a task with defaults, allowing overrides.

    Args:
        title: Task title (required, non-blank)
        start_time: Start instant (required)
        now: Creation timestamp (defaults to the current local time)
        **overrides: Any other TaskRecord field

    Returns:
        Validated TaskRecord

    Raises:
        ValidationError: naming the first offending field
    """
    if start_time is None:
        raise ValidationError("start_time", "start_time is required")
    now = now or datetime.now()
    data = {
        **overrides,
        "title": _require_title(title),
        "start_time": start_time,
        "created_at": now,
        "updated_at": now,
    }
    return _build(TaskRecord, data)


def create_todo_record(
    title: str,
    *,
    now: Optional[datetime] = None,
    **overrides: Any,
) -> TodoRecord:
    """Create a todo with defaults, allowing overrides.

    A due_time without a due_date is dropped since it has no meaning on its own.
    """
    now = now or datetime.now()
    data = {
        **overrides,
        "title": _require_title(title),
        "created_at": now,
        "updated_at": now,
    }
    if data.get("due_date") is None:
        data["due_time"] = None
    return _build(TodoRecord, data)


def update_record(record: R, now: datetime, **changes: Any) -> R:
    """Apply field changes, re-validate, and refresh updated_at."""
    blocked = _IMMUTABLE_FIELDS.intersection(changes)
    if blocked:
        raise ValidationError(sorted(blocked)[0], "field cannot be changed")
    unknown = set(changes) - set(type(record).model_fields)
    if unknown:
        raise ValidationError(sorted(unknown)[0], "unknown field")
    if "title" in changes:
        changes["title"] = _require_title(changes["title"])
    data = {**record.model_dump(), **changes, "updated_at": now}
    if isinstance(record, TodoRecord) and data.get("due_date") is None:
        data["due_time"] = None
    return _build(type(record), data)


def toggle_completion(record: R, now: datetime) -> R:
    completed = not record.is_completed
    return record.model_copy(
        update={
            "is_completed": completed,
            "completed_at": now if completed else None,
            "updated_at": now,
        }
    )


def archive_todo(todo: TodoRecord, now: datetime) -> TodoRecord:
    """Archive a todo. One-way: there is no unarchive transition."""
    if todo.is_archived:
        return todo
    return todo.model_copy(update={"is_archived": True, "updated_at": now})


def move_task_to_day(
    task: TaskRecord,
    day: date,
    now: datetime,
    hour: Optional[int] = None,
    minute: Optional[int] = None,
) -> TaskRecord:
    """Move a task to another day, keeping its time of day unless one is given."""
    if hour is None:
        start_minute = minute_of_day(task.start_time)
    else:
        if not 0 <= hour <= 23:
            raise ValidationError("hour", f"must be 0-23, got {hour}")
        if minute is not None and not 0 <= minute <= 59:
            raise ValidationError("minute", f"must be 0-59, got {minute}")
        start_minute = hour * 60 + (minute or 0)
    return task.model_copy(update={"start_time": at_minute(day, start_minute), "updated_at": now})


# Subtasks

def _sorted_subtasks(record: AnyRecord):
    return sorted(record.subtasks, key=lambda s: s.order_index)


def _reindexed(subtasks):
    return [s.model_copy(update={"order_index": i}) for i, s in enumerate(subtasks)]


def _find_subtask(record: AnyRecord, subtask_id: str) -> Subtask:
    for s in record.subtasks:
        if s.id == subtask_id:
            return s
    raise NotFoundError(subtask_id, kind="subtask")


def add_subtask(record: R, title: str, now: datetime) -> R:
    """Append a subtask with the next sequential order_index."""
    existing = _sorted_subtasks(record)
    next_index = existing[-1].order_index + 1 if existing else 0
    subtask = Subtask(title=_require_title(title), order_index=next_index, created_at=now)
    return record.model_copy(update={"subtasks": existing + [subtask], "updated_at": now})


def remove_subtask(record: R, subtask_id: str, now: datetime) -> R:
    _find_subtask(record, subtask_id)
    remaining = [s for s in _sorted_subtasks(record) if s.id != subtask_id]
    return record.model_copy(update={"subtasks": _reindexed(remaining), "updated_at": now})


def toggle_subtask(record: R, subtask_id: str, now: datetime) -> R:
    _find_subtask(record, subtask_id)
    subtasks = [
        s.model_copy(update={"is_completed": not s.is_completed}) if s.id == subtask_id else s
        for s in _sorted_subtasks(record)
    ]
    return record.model_copy(update={"subtasks": subtasks, "updated_at": now})


def move_subtask(record: R, subtask_id: str, new_index: int, now: datetime) -> R:
    """Move a subtask to position `new_index` and re-sequence the list."""
    moving = _find_subtask(record, subtask_id)
    others = [s for s in _sorted_subtasks(record) if s.id != subtask_id]
    if not 0 <= new_index <= len(others):
        raise ValidationError("order_index", f"must be 0-{len(others)}, got {new_index}")
    others.insert(new_index, moving)
    return record.model_copy(update={"subtasks": _reindexed(others), "updated_at": now})
