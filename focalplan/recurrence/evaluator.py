"""Recurrence evaluation for tasks and todos.

Decides whether a record occurs on a given day and finds neighbouring
occurrences. Deterministic: same inputs always produce the same outputs.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from focalplan.errors import ValidationError, parse_enum
from focalplan.models.constants import DEFAULT_TODO_REMINDER_TIME, OCCURRENCE_SEARCH_DAYS, YEARLY_SEARCH_DAYS
from focalplan.models.task import TaskRecord
from focalplan.models.temporal import (
    EVERYDAY,
    WEEKDAYS,
    WEEKENDS,
    RecurrenceRule,
    Weekday,
    daterange,
    validate_repeat_days,
    weekday_index,
)
from focalplan.models.todo import TodoRecord

Record = Union[TaskRecord, TodoRecord]


def _rule(rule) -> RecurrenceRule:
    return parse_enum(RecurrenceRule, rule, "recurrence")


def occurs_on(
    rule: RecurrenceRule,
    anchor: date,
    day: date,
    repeat_days: Iterable[int] = (),
) -> bool:
    """Check whether a rule anchored on `anchor` produces an occurrence on `day`.

    Nothing occurs before the anchor day. A custom rule with no selected
    weekdays never occurs.
    """
    rule = _rule(rule)
    if day < anchor:
        return False

    if rule == RecurrenceRule.NONE:
        return day == anchor

    if rule == RecurrenceRule.DAILY:
        return True

    if rule == RecurrenceRule.WEEKLY:
        return weekday_index(day) == weekday_index(anchor)

    if rule == RecurrenceRule.BIWEEKLY:
        if weekday_index(day) != weekday_index(anchor):
            return False
        return ((day - anchor).days // 7) % 2 == 0

    if rule == RecurrenceRule.MONTHLY:
        return day.day == anchor.day

    if rule == RecurrenceRule.YEARLY:
        return (day.month, day.day) == (anchor.month, anchor.day)

    if rule == RecurrenceRule.CUSTOM:
        days = validate_repeat_days(repeat_days)
        return weekday_index(day) in days

    return False


def record_occurs_on(record: Record, day: date) -> bool:
    return occurs_on(record.recurrence, record.anchor_date, day, record.repeat_days)


def _search_days(record: Record) -> int:
    if _rule(record.recurrence) == RecurrenceRule.YEARLY:
        return YEARLY_SEARCH_DAYS
    return OCCURRENCE_SEARCH_DAYS


def _occurrence_time(record: Record) -> Optional[time]:
    if isinstance(record, TaskRecord):
        return record.start_time.time()
    if record.due_date is None:
        return None
    return record.due_time or DEFAULT_TODO_REMINDER_TIME


def occurrence_instant(record: Record, day: date) -> Optional[datetime]:
    """Instant of the record's occurrence on `day` (None for undated todos)."""
    at = _occurrence_time(record)
    if at is None:
        return None
    return datetime.combine(day, at)


def next_occurrence(record: Record, after: datetime) -> Optional[datetime]:
    """First occurrence instant strictly after `after`.

    Searches a year ahead (eight years for yearly rules). Returns None for undated todos and for
    rules that never produce another occurrence.
    """
    if _occurrence_time(record) is None:
        return None
    first_day = max(after.date(), record.anchor_date)
    last_day = after.date() + timedelta(days=_search_days(record))
    for day in daterange(first_day, last_day):
        if not record_occurs_on(record, day):
            continue
        instant = occurrence_instant(record, day)
        if instant > after:
            return instant
    return None


def previous_occurrence(record: Record, before: datetime) -> Optional[datetime]:
    """Last occurrence instant strictly before `before`, never before the anchor."""
    if _occurrence_time(record) is None:
        return None
    floor = max(record.anchor_date, before.date() - timedelta(days=_search_days(record)))
    day = before.date()
    while day >= floor:
        if record_occurs_on(record, day):
            instant = occurrence_instant(record, day)
            if instant < before:
                return instant
        day = day - timedelta(days=1)
    return None


def occurrence_days(record: Record, start_day: date, end_day: date) -> List[date]:
    """All occurrence days in the inclusive range [start_day, end_day]."""
    if end_day < start_day:
        raise ValidationError("end_day", "end_day must be >= start_day")
    first = max(start_day, record.anchor_date)
    return [day for day in daterange(first, end_day) if record_occurs_on(record, day)]


_RULE_LABELS = {
    RecurrenceRule.DAILY: "Daily",
    RecurrenceRule.WEEKLY: "Weekly",
    RecurrenceRule.BIWEEKLY: "Biweekly",
    RecurrenceRule.MONTHLY: "Monthly",
    RecurrenceRule.YEARLY: "Yearly",
}


def display_label(rule: RecurrenceRule, days: Iterable[int] = ()) -> str:
    """Human-readable recurrence summary.

    Custom day sets are matched against the Weekdays, Weekends and Every day
    presets in that order; anything else is listed as short weekday names.
    """
    rule = _rule(rule)
    if rule == RecurrenceRule.NONE:
        return "None"
    if rule != RecurrenceRule.CUSTOM:
        return _RULE_LABELS[rule]

    selected = set(validate_repeat_days(days))
    if not selected:
        return "Custom"
    if selected == WEEKDAYS:
        return "Weekdays"
    if selected == WEEKENDS:
        return "Weekends"
    if selected == EVERYDAY:
        return "Every day"
    return " ".join(Weekday(d).short_name for d in sorted(selected))
