"""FastAPI web application for focalplan."""

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from focalplan import __version__
from focalplan.config import DAY_END_HOUR, DAY_START_HOUR, ENERGY_CAPACITY, MIN_FREE_GAP_MINUTES, UP_NEXT_LIMIT
from focalplan.database.database import get_db, init_db
from focalplan.database.repository import TaskRepository, TodoRepository
from focalplan.engine import (
    TodoFilter,
    calm_selection,
    daily_energy_load,
    effort_tier,
    energy_gauge,
    filter_todos,
    find_conflicts,
    free_intervals,
    is_due_today,
    is_overdue,
    select_next,
    time_range_label,
    time_until_next,
    todo_stats,
)
from focalplan.errors import NotFoundError, ValidationError
from focalplan.models.energy import EffortTier, EnergyRequest, Priority
from focalplan.models.record_factory import add_subtask, create_task_record, create_todo_record, update_record
from focalplan.models.task import ReminderOption, TaskRecord
from focalplan.models.temporal import RecurrenceRule
from focalplan.models.todo import TodoRecord, TodoReminderOption
from focalplan.notifications import LoggingReminderScheduler, ReminderScheduler
from focalplan.recurrence.evaluator import display_label
from focalplan.recurrence.instances import TaskInstance, instances_for_date, instances_overlapping_day
from focalplan.recurrence.rrule_export import record_to_rrule
from focalplan.suggestions import suggest_icon

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="focalplan API",
    description="Calm day planning: schedule tasks, pick the next todo for your energy",
    version=__version__,
    lifespan=lifespan,
)

_reminder_scheduler = LoggingReminderScheduler()


# Dependencies

def get_now() -> datetime:
    """Reference instant for one request. Overridden in tests."""
    return datetime.now()


def get_reminder_scheduler() -> ReminderScheduler:
    return _reminder_scheduler


def get_task_repository(
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
) -> TaskRepository:
    return TaskRepository(db, reminders)


def get_todo_repository(
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
) -> TodoRepository:
    return TodoRepository(db, reminders)


# Error mapping

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# Request models

class TaskCreateRequest(BaseModel):
    """Request model for creating a task."""
    title: str
    start_time: datetime
    duration_seconds: Optional[int] = None
    icon: Optional[str] = None
    color_name: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None
    repeat_days: Optional[List[int]] = None
    reminder: Optional[ReminderOption] = None
    energy_level: Optional[int] = None
    notes: Optional[str] = None
    subtasks: List[str] = Field(default_factory=list, description="Subtask titles in order")


class TaskUpdateRequest(BaseModel):
    """Request model for updating a task (all fields optional)."""
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    icon: Optional[str] = None
    color_name: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None
    repeat_days: Optional[List[int]] = None
    reminder: Optional[ReminderOption] = None
    energy_level: Optional[int] = None
    notes: Optional[str] = None


class TodoCreateRequest(BaseModel):
    """Request model for creating a todo."""
    title: str
    priority: Optional[Priority] = None
    icon: Optional[str] = None
    color_name: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    estimated_duration_seconds: Optional[int] = None
    energy_level: Optional[int] = None
    recurrence: Optional[RecurrenceRule] = None
    repeat_days: Optional[List[int]] = None
    reminder: Optional[TodoReminderOption] = None
    notes: Optional[str] = None
    subtasks: List[str] = Field(default_factory=list, description="Subtask titles in order")


class TodoUpdateRequest(BaseModel):
    """Request model for updating a todo (all fields optional)."""
    title: Optional[str] = None
    priority: Optional[Priority] = None
    icon: Optional[str] = None
    color_name: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    estimated_duration_seconds: Optional[int] = None
    energy_level: Optional[int] = None
    recurrence: Optional[RecurrenceRule] = None
    repeat_days: Optional[List[int]] = None
    reminder: Optional[TodoReminderOption] = None
    notes: Optional[str] = None


# Response models

class TaskResponse(BaseModel):
    task: TaskRecord
    repeat_label: str
    rrule: Optional[str] = Field(None, description="iCalendar RRULE for calendar export")


class TaskListResponse(BaseModel):
    tasks: List[TaskRecord]
    count: int


class InstanceView(BaseModel):
    """One task occurrence as shown on a day."""
    id: str
    task_id: str
    title: str
    icon: str
    color_name: str
    instance_date: date
    start_time: datetime
    end_time: datetime
    time_range: str
    energy_level: int
    is_virtual: bool
    is_completed: bool


class FreeInterval(BaseModel):
    start: datetime
    end: datetime
    duration_seconds: int


class DayResponse(BaseModel):
    """Response for a day view."""
    day: date
    instances: List[InstanceView]
    energy_load: int
    energy_gauge: int
    free_intervals: List[FreeInterval]
    seconds_until_next: Optional[int] = Field(None, description="Only set when the day is today")


class Conflict(BaseModel):
    instance_id: str
    conflicts_with: List[str]


class ConflictsResponse(BaseModel):
    day: date
    conflicts: List[Conflict]


class TodoView(BaseModel):
    todo: TodoRecord
    is_overdue: bool
    is_due_today: bool
    effort_tier: EffortTier


class TodoListResponse(BaseModel):
    todos: List[TodoView]
    count: int
    stats: Dict[str, float]


class CalmResponse(BaseModel):
    hero: Optional[TodoView]
    up_next: List[TodoView]
    remaining_count: int
    total: int


class FocusResponse(BaseModel):
    status: str
    current: Optional[TodoView]
    completed_count: int


class BulkResponse(BaseModel):
    count: int


class IconSuggestionResponse(BaseModel):
    icon: str
    label: str
    color_name: str


def _task_response(task: TaskRecord) -> TaskResponse:
    return TaskResponse(
        task=task,
        repeat_label=display_label(task.recurrence, task.repeat_days),
        rrule=record_to_rrule(task),
    )


def _instance_view(instance: TaskInstance) -> InstanceView:
    return InstanceView(
        id=instance.id,
        task_id=instance.task_id,
        title=instance.title,
        icon=instance.task.icon,
        color_name=instance.task.color_name,
        instance_date=instance.instance_date,
        start_time=instance.start_time,
        end_time=instance.end_time,
        time_range=time_range_label(instance),
        energy_level=instance.energy_level,
        is_virtual=instance.is_virtual,
        is_completed=instance.is_completed,
    )


def _todo_view(todo: TodoRecord, now: datetime) -> TodoView:
    return TodoView(
        todo=todo,
        is_overdue=is_overdue(todo, now),
        is_due_today=is_due_today(todo, now),
        effort_tier=effort_tier(todo),
    )


def _with_icon(fields: dict, title: str) -> dict:
    """Fill in icon and color from the title when the caller gave neither."""
    if fields.get("icon") is None and fields.get("color_name") is None:
        suggestion = suggest_icon(title)
        fields["icon"] = suggestion.icon
        fields["color_name"] = suggestion.color_name
    return {k: v for k, v in fields.items() if v is not None}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# Tasks

@app.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    request: TaskCreateRequest,
    repo: TaskRepository = Depends(get_task_repository),
    now: datetime = Depends(get_now),
):
    """Create a scheduled task."""
    fields = _with_icon(request.model_dump(exclude={"title", "start_time", "subtasks"}), request.title)
    task = create_task_record(request.title, request.start_time, now=now, **fields)
    for title in request.subtasks:
        task = add_subtask(task, title, now)
    return _task_response(repo.create(task, now))


@app.get("/tasks", response_model=TaskListResponse)
async def list_tasks(repo: TaskRepository = Depends(get_task_repository)):
    tasks = repo.get_all()
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, repo: TaskRepository = Depends(get_task_repository)):
    return _task_response(repo.get(task_id))


@app.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    repo: TaskRepository = Depends(get_task_repository),
    now: datetime = Depends(get_now),
):
    """Update the fields present in the request body."""
    task = update_record(repo.get(task_id), now, **request.model_dump(exclude_unset=True))
    return _task_response(repo.update(task, now))


@app.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, repo: TaskRepository = Depends(get_task_repository)):
    repo.delete(task_id)
    return Response(status_code=204)


@app.post("/tasks/{task_id}/complete", response_model=InstanceView)
async def toggle_task_completion(
    task_id: str,
    day: Optional[date] = Query(None, description="Occurrence day (defaults to today)"),
    repo: TaskRepository = Depends(get_task_repository),
    now: datetime = Depends(get_now),
):
    """Toggle completion of one occurrence of a task."""
    instance = repo.toggle_instance_completion(task_id, day or now.date(), now)
    return _instance_view(instance)


# Days

@app.get("/days/{day}", response_model=DayResponse)
async def view_day(
    day: date,
    repo: TaskRepository = Depends(get_task_repository),
    now: datetime = Depends(get_now),
):
    """Instances, energy and free time for one day."""
    tasks = repo.get_for_range(day, day)
    records = repo.completion_records(t.id for t in tasks if t.is_recurring)
    instances = instances_for_date(tasks, day, records)
    day_start = datetime.combine(day, time(DAY_START_HOUR, 0))
    day_end = datetime.combine(day, time(0, 0)) + timedelta(hours=DAY_END_HOUR)
    occupying = instances_overlapping_day(tasks, day, records)
    gaps = free_intervals(occupying, day_start, day_end, timedelta(minutes=MIN_FREE_GAP_MINUTES))

    load = daily_energy_load(tasks, day, records)
    until_next = time_until_next(now, instances) if day == now.date() else None
    return DayResponse(
        day=day,
        instances=[_instance_view(i) for i in instances],
        energy_load=load,
        energy_gauge=energy_gauge(load, ENERGY_CAPACITY),
        free_intervals=[
            FreeInterval(start=g.start, end=g.end, duration_seconds=int(g.duration.total_seconds()))
            for g in gaps
        ],
        seconds_until_next=int(until_next.total_seconds()) if until_next is not None else None,
    )


@app.get("/days/{day}/conflicts", response_model=ConflictsResponse)
async def day_conflicts(day: date, repo: TaskRepository = Depends(get_task_repository)):
    """Overlapping task occurrences on a day, including ones carried over from the previous day."""
    instances = repo.instances_overlapping_day(day)
    conflicts = []
    for instance in instances:
        overlapping = find_conflicts(instance, instances)
        if overlapping:
            conflicts.append(Conflict(instance_id=instance.id, conflicts_with=[o.id for o in overlapping]))
    return ConflictsResponse(day=day, conflicts=conflicts)


# Todos

@app.post("/todos", response_model=TodoView, status_code=201)
async def create_todo(
    request: TodoCreateRequest,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    fields = _with_icon(request.model_dump(exclude={"title", "subtasks"}), request.title)
    todo = create_todo_record(request.title, now=now, **fields)
    for title in request.subtasks:
        todo = add_subtask(todo, title, now)
    return _todo_view(repo.create(todo, now), now)


@app.get("/todos", response_model=TodoListResponse)
async def list_todos(
    todo_filter: TodoFilter = Query(TodoFilter.ALL, alias="filter"),
    search: str = "",
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    """Non-archived todos matching a filter and search string."""
    todos = repo.get_all()
    matched = filter_todos(todos, todo_filter, now, search)
    return TodoListResponse(
        todos=[_todo_view(t, now) for t in matched],
        count=len(matched),
        stats=asdict(todo_stats(todos, now)),
    )


@app.get("/todos/calm", response_model=CalmResponse)
async def calm_todos(
    energy: EnergyRequest = EnergyRequest.MEDIUM,
    skipped: List[str] = Query([]),
    show_all: bool = False,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    """Hero todo and up next list for the requested energy."""
    selection = calm_selection(repo.get_all(), energy, now, skipped, UP_NEXT_LIMIT, show_all)
    return CalmResponse(
        hero=_todo_view(selection.hero, now) if selection.hero else None,
        up_next=[_todo_view(t, now) for t in selection.up_next],
        remaining_count=selection.remaining_count,
        total=selection.total,
    )


@app.get("/todos/focus", response_model=FocusResponse)
async def focus_todo(
    completed_count: int = 0,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    """Next todo by priority waterfall.

    Clients pass how many todos they completed in the current session so the
    empty state can tell "all done" from "nothing to do".
    """
    result = select_next(repo.get_all(), completed_count)
    return FocusResponse(
        status=result.status.value,
        current=_todo_view(result.current, now) if result.current else None,
        completed_count=result.completed_count,
    )


@app.post("/todos/archive-completed", response_model=BulkResponse)
async def archive_completed_todos(
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    return BulkResponse(count=repo.archive_all_completed(now))


@app.delete("/todos/archived", response_model=BulkResponse)
async def delete_archived_todos(repo: TodoRepository = Depends(get_todo_repository)):
    return BulkResponse(count=repo.delete_all_archived())


@app.get("/todos/{todo_id}", response_model=TodoView)
async def get_todo(
    todo_id: str,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    return _todo_view(repo.get(todo_id), now)


@app.put("/todos/{todo_id}", response_model=TodoView)
async def update_todo(
    todo_id: str,
    request: TodoUpdateRequest,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    todo = update_record(repo.get(todo_id), now, **request.model_dump(exclude_unset=True))
    return _todo_view(repo.update(todo, now), now)


@app.delete("/todos/{todo_id}", status_code=204)
async def delete_todo(todo_id: str, repo: TodoRepository = Depends(get_todo_repository)):
    repo.delete(todo_id)
    return Response(status_code=204)


@app.post("/todos/{todo_id}/complete", response_model=TodoView)
async def toggle_todo_completion(
    todo_id: str,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    return _todo_view(repo.toggle_completion(todo_id, now), now)


@app.post("/todos/{todo_id}/archive", response_model=TodoView)
async def archive_todo_endpoint(
    todo_id: str,
    repo: TodoRepository = Depends(get_todo_repository),
    now: datetime = Depends(get_now),
):
    return _todo_view(repo.archive(todo_id, now), now)


# Suggestions

@app.get("/suggestions/icon", response_model=IconSuggestionResponse)
async def icon_suggestion(title: str):
    suggestion = suggest_icon(title)
    return IconSuggestionResponse(icon=suggestion.icon, label=suggestion.label, color_name=suggestion.color_name)
