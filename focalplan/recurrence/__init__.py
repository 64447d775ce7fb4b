"""Recurrence evaluation and expansion for focalplan."""

from focalplan.recurrence.evaluator import (
    display_label,
    next_occurrence,
    occurrence_days,
    occurs_on,
    previous_occurrence,
    record_occurs_on,
)
from focalplan.recurrence.instances import (
    TaskInstance,
    instances_between,
    instances_for_date,
    instances_overlapping_day,
)

__all__ = [
    "display_label",
    "next_occurrence",
    "occurrence_days",
    "occurs_on",
    "previous_occurrence",
    "record_occurs_on",
    "TaskInstance",
    "instances_between",
    "instances_for_date",
    "instances_overlapping_day",
]
