"""Reminder delivery interface.

The engine computes reminder instants (focalplan.engine.reminders); a
ReminderScheduler turns them into notifications. Hosts plug in their own
implementation; the default just logs.
"""

import logging
from datetime import datetime
from typing import Dict, Optional, Protocol, Tuple

from focalplan.engine.reminders import next_reminder

logger = logging.getLogger(__name__)


class ReminderScheduler(Protocol):
    """Interface for scheduling local reminders for a record."""

    def schedule(self, record_id: str, fire_at: datetime, title: str) -> None:
        """Schedule (or replace) the reminder for `record_id`."""
        ...

    def cancel(self, record_id: str) -> None:
        """Cancel any pending reminder for `record_id`."""
        ...


class LoggingReminderScheduler:
    """Records pending reminders in memory and logs instead of delivering."""

    def __init__(self):
        self.pending: Dict[str, Tuple[datetime, str]] = {}

    def schedule(self, record_id: str, fire_at: datetime, title: str) -> None:
        self.pending[record_id] = (fire_at, title)
        logger.info(f"Scheduled reminder for {record_id} ('{title}') at {fire_at.isoformat()}")

    def cancel(self, record_id: str) -> None:
        if self.pending.pop(record_id, None) is not None:
            logger.info(f"Cancelled reminder for {record_id}")


def reschedule_reminder(scheduler: ReminderScheduler, record, now: datetime) -> Optional[datetime]:
    """Replace the pending reminder for `record` with its next one after `now`.

    Returns the new fire time, or None when nothing was scheduled.
    """
    scheduler.cancel(record.id)
    fire_at = next_reminder(record, now)
    if fire_at is None:
        return None
    scheduler.schedule(record.id, fire_at, record.title)
    return fire_at
