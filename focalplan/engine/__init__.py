"""Scheduling and selection engine for focalplan."""

from focalplan.engine.classifier import (
    daily_energy_load,
    effort_tier,
    energy_gauge,
    energy_label,
    priority_rank,
    tier_allowed,
)
from focalplan.engine.derived import (
    duration_label,
    is_active,
    is_due_today,
    is_overdue,
    is_past,
    time_range_label,
)
from focalplan.engine.placement import (
    TimeSpan,
    find_conflicts,
    free_intervals,
    occupied_spans,
    overlaps,
    suggest_slot,
    time_until_next,
)
from focalplan.engine.reminders import next_reminder, task_reminder_time, todo_reminder_time
from focalplan.engine.selection import (
    CalmSelection,
    FocusResult,
    FocusSession,
    FocusStatus,
    TodoFilter,
    calm_selection,
    completed_todos,
    filter_todos,
    group_by_priority,
    rank_for_energy,
    select_next,
    todo_stats,
)

__all__ = [
    "daily_energy_load",
    "effort_tier",
    "energy_gauge",
    "energy_label",
    "priority_rank",
    "tier_allowed",
    "duration_label",
    "is_active",
    "is_due_today",
    "is_overdue",
    "is_past",
    "time_range_label",
    "TimeSpan",
    "find_conflicts",
    "free_intervals",
    "occupied_spans",
    "overlaps",
    "suggest_slot",
    "time_until_next",
    "next_reminder",
    "task_reminder_time",
    "todo_reminder_time",
    "CalmSelection",
    "FocusResult",
    "FocusSession",
    "FocusStatus",
    "TodoFilter",
    "calm_selection",
    "completed_todos",
    "filter_todos",
    "group_by_priority",
    "rank_for_energy",
    "select_next",
    "todo_stats",
]
