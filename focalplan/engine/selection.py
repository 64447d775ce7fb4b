"""Todo selection for Calm Mode, Focus Mode and list views.

Every function here is a pure function of (candidates, now, parameters).
Nothing is cached between calls: callers re-evaluate after each mutation, and
identical inputs always produce identical ordering.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from focalplan.config import UP_NEXT_LIMIT
from focalplan.errors import NotFoundError, ValidationError, parse_enum
from focalplan.engine.classifier import effort_tier, priority_rank, tier_allowed
from focalplan.engine.derived import is_due_today, is_overdue
from focalplan.models.energy import EnergyRequest, Priority
from focalplan.models.todo import TodoRecord


# Focus Mode tiers, highest first
WATERFALL_TIERS = (Priority.HIGH, Priority.MEDIUM, Priority.LOW, Priority.NONE)


def is_open(todo: TodoRecord) -> bool:
    """Todo is still actionable (not completed, not archived)."""
    return not todo.is_completed and not todo.is_archived


# Calm Mode

def _calm_sort_key(todo: TodoRecord, now: datetime) -> tuple:
    """Sort key: priority, overdue first, due today first, due date (None last), created_at."""
    return (
        priority_rank(todo.priority),
        0 if is_overdue(todo, now) else 1,
        0 if is_due_today(todo, now) else 1,
        (0, todo.due_date) if todo.due_date is not None else (1, date.max),
        todo.created_at,
    )


def rank_for_energy(
    candidates: Iterable[TodoRecord],
    energy: EnergyRequest,
    now: datetime,
    skipped: Iterable[str] = (),
) -> List[TodoRecord]:
    """Open todos matching the requested energy, best first.

    Todos whose effort tier is too high for `energy` and todos whose id is in
    `skipped` are left out.
    """
    energy = parse_enum(EnergyRequest, energy, "energy")
    skipped = set(skipped)
    matched = [
        t for t in candidates
        if is_open(t) and t.id not in skipped and tier_allowed(effort_tier(t), energy)
    ]
    return sorted(matched, key=lambda t: _calm_sort_key(t, now))


@dataclass(frozen=True)
class CalmSelection:
    """Result of Calm Mode selection."""
    hero: Optional[TodoRecord]
    up_next: List[TodoRecord]
    remaining_count: int
    total: int


def calm_selection(
    candidates: Iterable[TodoRecord],
    energy: EnergyRequest,
    now: datetime,
    skipped: Iterable[str] = (),
    up_next_limit: int = UP_NEXT_LIMIT,
    show_all: bool = False,
) -> CalmSelection:
    """Split the energy-ranked list into a hero todo and an "up next" list.

    The up next list is capped at `up_next_limit` unless `show_all` is set;
    `remaining_count` is how many ranked todos the cap hides.
    """
    if up_next_limit < 0:
        raise ValidationError("up_next_limit", f"must be >= 0, got {up_next_limit}")
    ranked = rank_for_energy(candidates, energy, now, skipped)
    if not ranked:
        return CalmSelection(hero=None, up_next=[], remaining_count=0, total=0)
    rest = ranked[1:]
    up_next = rest if show_all else rest[:up_next_limit]
    return CalmSelection(
        hero=ranked[0],
        up_next=up_next,
        remaining_count=len(rest) - len(up_next),
        total=len(ranked),
    )


# Focus Mode

class FocusStatus(str, Enum):
    CURRENT = "current"
    ALL_DONE = "all_done"  # Something was completed this session and nothing is left
    NO_TASKS = "no_tasks"  # Nothing to do from the start


@dataclass(frozen=True)
class FocusResult:
    status: FocusStatus
    current: Optional[TodoRecord]
    completed_count: int


def _creation_order(todos: List[TodoRecord]) -> List[TodoRecord]:
    # sorted() is stable: equal created_at keeps input order
    return sorted(todos, key=lambda t: t.created_at)


def partition_by_priority(candidates: Iterable[TodoRecord]) -> Dict[Priority, List[TodoRecord]]:
    """Open todos split into priority tiers, each in creation order."""
    tiers: Dict[Priority, List[TodoRecord]] = {p: [] for p in WATERFALL_TIERS}
    for todo in candidates:
        if is_open(todo):
            tiers[Priority(todo.priority)].append(todo)
    return {p: _creation_order(todos) for p, todos in tiers.items()}


def select_next(candidates: Iterable[TodoRecord], completed_count: int = 0) -> FocusResult:
    """Waterfall selection: first todo of the first non-empty priority tier."""
    if completed_count < 0:
        raise ValidationError("completed_count", f"must be >= 0, got {completed_count}")
    tiers = partition_by_priority(candidates)
    for priority in WATERFALL_TIERS:
        if tiers[priority]:
            return FocusResult(FocusStatus.CURRENT, tiers[priority][0], completed_count)
    status = FocusStatus.ALL_DONE if completed_count > 0 else FocusStatus.NO_TASKS
    return FocusResult(status, None, completed_count)


@dataclass(frozen=True)
class FocusSession:
    """An immutable Focus Mode session.

    `complete()` returns a new session; the working set shrinks by the
    completed todo and the completed count grows by one.
    """
    todos: Tuple[TodoRecord, ...] = field(default_factory=tuple)
    completed_count: int = 0

    @classmethod
    def start(cls, candidates: Iterable[TodoRecord]) -> "FocusSession":
        return cls(todos=tuple(t for t in candidates if is_open(t)))

    @property
    def result(self) -> FocusResult:
        return select_next(self.todos, self.completed_count)

    @property
    def current(self) -> Optional[TodoRecord]:
        return self.result.current

    @property
    def status(self) -> FocusStatus:
        return self.result.status

    def complete(self, todo_id: str) -> "FocusSession":
        if not any(t.id == todo_id for t in self.todos):
            raise NotFoundError(todo_id, kind="todo")
        return replace(
            self,
            todos=tuple(t for t in self.todos if t.id != todo_id),
            completed_count=self.completed_count + 1,
        )


# List views

class TodoFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"
    NO_DATE = "no_date"


def _matches_filter(todo: TodoRecord, todo_filter: TodoFilter, now: datetime) -> bool:
    if todo_filter == TodoFilter.ALL:
        return True
    if todo_filter == TodoFilter.TODAY:
        return is_due_today(todo, now) or (todo.due_date is None and todo.created_at.date() == now.date())
    if todo_filter == TodoFilter.UPCOMING:
        return todo.due_date is not None and todo.due_date > now.date()
    if todo_filter == TodoFilter.OVERDUE:
        return is_overdue(todo, now)
    if todo_filter == TodoFilter.NO_DATE:
        return todo.due_date is None
    return False


def _matches_search(todo: TodoRecord, query: str) -> bool:
    if query in todo.title.lower():
        return True
    if todo.notes and query in todo.notes.lower():
        return True
    return any(query in s.title.lower() for s in todo.subtasks)


def filter_todos(
    todos: Iterable[TodoRecord],
    todo_filter: TodoFilter,
    now: datetime,
    search: str = "",
) -> List[TodoRecord]:
    """Non-archived todos matching a filter and an optional search string."""
    todo_filter = parse_enum(TodoFilter, todo_filter, "filter")
    query = (search or "").strip().lower()
    return [
        t for t in todos
        if not t.is_archived
        and _matches_filter(t, todo_filter, now)
        and (not query or _matches_search(t, query))
    ]


def group_by_priority(todos: Iterable[TodoRecord]) -> Dict[Priority, List[TodoRecord]]:
    """Open todos per priority section, ordered by order_index then created_at."""
    groups = partition_by_priority(todos)
    return {
        p: sorted(items, key=lambda t: (t.order_index, t.created_at))
        for p, items in groups.items()
    }


def completed_todos(todos: Iterable[TodoRecord]) -> List[TodoRecord]:
    """Completed, non-archived todos, most recently completed first."""
    done = [t for t in todos if t.is_completed and not t.is_archived]
    return sorted(done, key=lambda t: t.completed_at or t.updated_at, reverse=True)


@dataclass(frozen=True)
class TodoStats:
    active_count: int
    overdue_count: int
    due_today_count: int
    completed_today_count: int
    completion_progress: float


def todo_stats(todos: Iterable[TodoRecord], now: datetime) -> TodoStats:
    todos = list(todos)
    active = [t for t in todos if is_open(t)]
    visible = [t for t in todos if not t.is_archived]
    completed_today = [
        t for t in todos
        if t.completed_at is not None and t.completed_at.date() == now.date()
    ]
    progress = (
        sum(1 for t in visible if t.is_completed) / len(visible)
        if visible else 0.0
    )
    return TodoStats(
        active_count=len(active),
        overdue_count=sum(1 for t in active if is_overdue(t, now)),
        due_today_count=sum(1 for t in active if is_due_today(t, now)),
        completed_today_count=len(completed_today),
        completion_progress=progress,
    )
