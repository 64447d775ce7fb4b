"""Export record recurrence to iCalendar RRULE strings (export-only)."""

from __future__ import annotations

from typing import List, Optional, Union

from focalplan.errors import parse_enum
from focalplan.models.task import TaskRecord
from focalplan.models.temporal import RecurrenceRule, Weekday, validate_repeat_days
from focalplan.models.todo import TodoRecord


_WD_MAP: dict[Weekday, str] = {
    Weekday.SUNDAY: "SU",
    Weekday.MONDAY: "MO",
    Weekday.TUESDAY: "TU",
    Weekday.WEDNESDAY: "WE",
    Weekday.THURSDAY: "TH",
    Weekday.FRIDAY: "FR",
    Weekday.SATURDAY: "SA",
}

_FREQ: dict[RecurrenceRule, str] = {
    RecurrenceRule.DAILY: "DAILY",
    RecurrenceRule.WEEKLY: "WEEKLY",
    RecurrenceRule.BIWEEKLY: "WEEKLY",
    RecurrenceRule.MONTHLY: "MONTHLY",
    RecurrenceRule.YEARLY: "YEARLY",
    RecurrenceRule.CUSTOM: "WEEKLY",
}


def rule_to_rrule(rule: RecurrenceRule, repeat_days=()) -> Optional[str]:
    """Convert a rule to an RRULE (without the leading 'RRULE:' prefix).

    Returns None for rules that never repeat, including a custom rule with no
    selected weekdays.
    """
    rule = parse_enum(RecurrenceRule, rule, "recurrence")
    days = validate_repeat_days(repeat_days)
    if rule == RecurrenceRule.NONE:
        return None
    if rule == RecurrenceRule.CUSTOM and not days:
        return None
    parts: List[str] = [f"FREQ={_FREQ[rule]}"]
    if rule == RecurrenceRule.BIWEEKLY:
        parts.append("INTERVAL=2")
    if rule == RecurrenceRule.CUSTOM:
        parts.append("BYDAY=" + ",".join(_WD_MAP[Weekday(d)] for d in days))
    return ";".join(parts)


def record_to_rrule(record: Union[TaskRecord, TodoRecord]) -> Optional[str]:
    return rule_to_rrule(record.recurrence, record.repeat_days)
