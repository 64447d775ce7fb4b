"""Conflict detection and free-time placement for a day's schedule.

Intervals are half-open [start, end): a task ending at 10:00 does not overlap
one starting at 10:00. Functions accept TaskRecords or TaskInstances.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from focalplan.config import MIN_FREE_GAP_MINUTES
from focalplan.errors import InvariantViolation, ValidationError
from focalplan.models.temporal import validate_duration

DEFAULT_MIN_GAP = timedelta(minutes=MIN_FREE_GAP_MINUTES)


@dataclass(frozen=True)
class TimeSpan:
    """A half-open time interval."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise InvariantViolation(f"span ends before it starts: {self.start} > {self.end}")

    @classmethod
    def of(cls, start: datetime, end: datetime) -> "TimeSpan":
        """Build a span from caller input, raising ValidationError when end < start."""
        if end < start:
            raise ValidationError("end", f"end {end} is before start {start}")
        return cls(start, end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


def _span(task) -> TimeSpan:
    return TimeSpan(task.start_time, task.end_time)


def overlaps(a, b) -> bool:
    """True iff a.start < b.end and b.start < a.end.

    Accepts TimeSpans or anything with start_time/end_time.
    """
    a = a if isinstance(a, TimeSpan) else _span(a)
    b = b if isinstance(b, TimeSpan) else _span(b)
    return a.start < b.end and b.start < a.end


def occupied_spans(
    tasks: Iterable,
    day_start: Optional[datetime] = None,
    day_end: Optional[datetime] = None,
) -> List[TimeSpan]:
    """Merge task intervals into non-overlapping occupied spans.

    Zero-length tasks occupy nothing. Touching spans are merged. When
    `day_start` / `day_end` are given, spans are clipped to that window and
    spans falling entirely outside it are dropped.
    """
    spans = sorted((_span(t) for t in tasks), key=lambda s: (s.start, s.end))
    merged: List[TimeSpan] = []
    for span in spans:
        if day_start is not None or day_end is not None:
            start = max(span.start, day_start) if day_start is not None else span.start
            end = min(span.end, day_end) if day_end is not None else span.end
            if end <= start:
                continue
            span = TimeSpan(start, end)
        if span.is_empty:
            continue
        if merged and span.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeSpan(last.start, max(last.end, span.end))
        else:
            merged.append(span)
    return merged


def _gaps(busy: List[TimeSpan], day_start: datetime, day_end: datetime) -> List[TimeSpan]:
    gaps = []
    cursor = day_start
    for span in busy:
        if span.start > cursor:
            gaps.append(TimeSpan(cursor, span.start))
        cursor = max(cursor, span.end)
    if cursor < day_end:
        gaps.append(TimeSpan(cursor, day_end))
    return gaps


def free_intervals(
    day_tasks: Iterable,
    day_start: datetime,
    day_end: datetime,
    min_gap: timedelta = DEFAULT_MIN_GAP,
) -> List[TimeSpan]:
    """Free gaps within [day_start, day_end] not covered by any task.

    Gaps shorter than `min_gap` are dropped, as are zero-length gaps.
    """
    if day_end < day_start:
        raise ValidationError("day_end", f"day_end {day_end} is before day_start {day_start}")
    if min_gap < timedelta(0):
        raise ValidationError("min_gap", f"must be >= 0, got {min_gap}")
    busy = occupied_spans(day_tasks, day_start, day_end)
    return [g for g in _gaps(busy, day_start, day_end) if not g.is_empty and g.duration >= min_gap]


def time_until_next(now: datetime, day_tasks: Iterable) -> Optional[timedelta]:
    """Time until the next task start strictly after `now`, on `now`'s day."""
    upcoming = [
        t.start_time for t in day_tasks
        if t.start_time > now and t.start_time.date() == now.date()
    ]
    if not upcoming:
        return None
    return min(upcoming) - now


def find_conflicts(candidate, day_tasks: Iterable) -> List:
    """Tasks overlapping `candidate`, excluding the candidate itself."""
    if candidate.duration_seconds == 0:
        return []
    return [
        t for t in day_tasks
        if t.id != candidate.id and t.duration_seconds > 0 and overlaps(candidate, t)
    ]


def suggest_slot(
    duration_seconds: int,
    day_tasks: Iterable,
    day_start: datetime,
    day_end: datetime,
    not_before: Optional[datetime] = None,
    min_gap: timedelta = DEFAULT_MIN_GAP,
) -> Optional[TimeSpan]:
    """Earliest free span of `duration_seconds` within the day, or None."""
    validate_duration(duration_seconds, "duration_seconds")
    needed = timedelta(seconds=duration_seconds)
    for gap in free_intervals(day_tasks, day_start, day_end, min_gap):
        start = gap.start
        if not_before is not None:
            start = max(start, not_before)
        if start + needed <= gap.end:
            return TimeSpan(start, start + needed)
    return None
