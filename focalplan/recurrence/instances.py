"""Expand tasks into per-day instances.

A recurring task is stored once; each day it occurs on gets a virtual
TaskInstance whose completion is tracked by TaskCompletionRecords. A
non-recurring task yields a single instance that is the task itself.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from focalplan.errors import ValidationError
from focalplan.models.constants import SECONDS_PER_DAY
from focalplan.models.task import TaskCompletionRecord, TaskRecord
from focalplan.models.temporal import daterange
from focalplan.recurrence.evaluator import occurrence_instant, record_occurs_on


class TaskInstance(BaseModel):
    """One occurrence of a task on a specific day."""

    id: str = Field(..., description="Task id, or '<task id>:<day>' for virtual instances")
    task: TaskRecord = Field(..., description="Source task")
    instance_date: date = Field(..., description="Day of this occurrence")
    is_virtual: bool = Field(..., description="True when generated from a recurring task")
    is_completed: bool = Field(False, description="Completion of this occurrence")
    completed_at: Optional[datetime] = Field(None, description="When this occurrence was completed")
    start_time: datetime = Field(..., description="Start instant of this occurrence")

    @property
    def task_id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    @property
    def duration_seconds(self) -> int:
        return self.task.duration_seconds

    @property
    def energy_level(self) -> int:
        return self.task.energy_level

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(seconds=self.duration_seconds)


def _completion_index(records: Iterable[TaskCompletionRecord]) -> Dict[Tuple[str, date], TaskCompletionRecord]:
    return {(r.task_id, r.completed_date): r for r in records}


def _instance(task: TaskRecord, day: date, completions) -> TaskInstance:
    if not task.is_recurring:
        return TaskInstance(
            id=task.id,
            task=task,
            instance_date=task.start_time.date(),
            is_virtual=False,
            is_completed=task.is_completed,
            completed_at=task.completed_at,
            start_time=task.start_time,
        )
    record = completions.get((task.id, day))
    return TaskInstance(
        id=f"{task.id}:{day.isoformat()}",
        task=task,
        instance_date=day,
        is_virtual=True,
        is_completed=record is not None,
        completed_at=record.completed_at if record else None,
        start_time=occurrence_instant(task, day),
    )


def instances_for_date(
    tasks: Iterable[TaskRecord],
    day: date,
    completion_records: Iterable[TaskCompletionRecord] = (),
) -> List[TaskInstance]:
    """All task instances on `day`, sorted by start time."""
    completions = _completion_index(completion_records)
    out = [_instance(t, day, completions) for t in tasks if record_occurs_on(t, day)]
    return sorted(out, key=lambda i: (i.start_time, i.task.created_at))


def instances_overlapping_day(
    tasks: Iterable[TaskRecord],
    day: date,
    completion_records: Iterable[TaskCompletionRecord] = (),
) -> List[TaskInstance]:
    """Instances occupying any part of `day`, sorted by start time.

    Adds to instances_for_date the occurrences from earlier days that run past
    midnight into `day`. Use this for occupancy (free time, conflicts).
    """
    tasks = list(tasks)
    completion_records = list(completion_records)
    completions = _completion_index(completion_records)
    day_start = datetime.combine(day, datetime.min.time())
    longest = max((t.duration_seconds for t in tasks), default=0)
    lookback_days = -(-longest // SECONDS_PER_DAY)

    out = instances_for_date(tasks, day, completion_records)
    for back in range(1, lookback_days + 1):
        earlier = day - timedelta(days=back)
        for task in tasks:
            if not record_occurs_on(task, earlier):
                continue
            instance = _instance(task, earlier, completions)
            if instance.end_time > day_start:
                out.append(instance)
    return sorted(out, key=lambda i: (i.start_time, i.task.created_at))


def instances_between(
    tasks: Iterable[TaskRecord],
    start_day: date,
    end_day: date,
    completion_records: Iterable[TaskCompletionRecord] = (),
) -> List[List[TaskInstance]]:
    """Instances for each day in [start_day, end_day], one list per day."""
    if end_day < start_day:
        raise ValidationError("end_day", "end_day must be >= start_day")
    tasks = list(tasks)
    completion_records = list(completion_records)
    return [instances_for_date(tasks, day, completion_records) for day in daterange(start_day, end_day)]
