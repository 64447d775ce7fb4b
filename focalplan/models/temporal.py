"""Temporal value types for focalplan.

Instants are naive local `datetime`s, calendar days are `date`s and durations
are non-negative integer seconds. Weekdays are indexed 0=Sunday .. 6=Saturday.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, List

from focalplan.errors import ValidationError
from focalplan.models.constants import MINUTES_PER_DAY


class RecurrenceRule(str, Enum):
    """How a record repeats."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"  # Selected weekdays, see repeat_days


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def short_name(self) -> str:
        return self.name[:3].title()


WEEKDAYS: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})
WEEKENDS: FrozenSet[int] = frozenset({0, 6})
EVERYDAY: FrozenSet[int] = frozenset(range(7))


def weekday_index(day: date) -> int:
    """Weekday of `day` with Sunday=0."""
    # Python weekday: Monday=0 ... Sunday=6
    return (day.weekday() + 1) % 7


def validate_repeat_days(days: Iterable[int]) -> List[int]:
    """Deduplicate and sort weekday indices, rejecting anything outside 0-6."""
    out = set()
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6:
            raise ValidationError("repeat_days", f"weekday index must be 0-6, got {d!r}")
        out.add(d)
    return sorted(out)


def validate_duration(seconds: int, field: str = "duration_seconds") -> int:
    if seconds is None or seconds < 0:
        raise ValidationError(field, f"duration must be >= 0, got {seconds!r}")
    return int(seconds)


def minute_of_day(instant: datetime) -> int:
    return instant.hour * 60 + instant.minute


def at_minute(day: date, minute: int) -> datetime:
    """Instant on `day` at minute-of-day `minute`."""
    if not 0 <= minute < MINUTES_PER_DAY:
        raise ValidationError("minute_of_day", f"must be in [0, {MINUTES_PER_DAY}), got {minute}")
    return datetime.combine(day, time(minute // 60, minute % 60))


def start_of_day(instant: datetime) -> datetime:
    return datetime.combine(instant.date(), time(0, 0))


def end_of_day(instant: datetime) -> datetime:
    """Exclusive end of the day containing `instant` (next midnight)."""
    return start_of_day(instant) + timedelta(days=1)


def daterange(start: date, end_inclusive: date) -> Iterable[date]:
    cur = start
    while cur <= end_inclusive:
        yield cur
        cur = cur + timedelta(days=1)
