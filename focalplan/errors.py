"""Error taxonomy for focalplan.

Every failure the engine reports is one of these named kinds; callers decide
how to present them.
"""

from typing import Optional


class PlannerError(Exception):
    """Base class for all focalplan errors."""


class ValidationError(PlannerError, ValueError):
    """Bad input shape (negative duration, empty title, weekday outside 0-6...)."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(PlannerError, LookupError):
    """An operation referenced an id that is not in the supplied set or store."""

    def __init__(self, record_id: str, kind: str = "record", message: Optional[str] = None):
        super().__init__(message or f"{kind} {record_id} not found")
        self.record_id = record_id
        self.kind = kind


class InvariantViolation(PlannerError, AssertionError):
    """Internal assertion failure. Indicates a bug, never bad caller input."""


def parse_enum(enum_cls, value, field: str):
    """Convert `value` to `enum_cls`, raising ValidationError naming `field`."""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(field, f"unknown {field} {value!r}") from None
