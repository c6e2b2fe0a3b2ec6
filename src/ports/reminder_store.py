"""Reminder store port — abstract interface for reminder persistence.

UI layers depend on this protocol, never on a specific storage backend.
Implementations must apply a completion (log insert + reminder update)
atomically and serialise completions of the same reminder.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from src.core.reminder_scheduler import Bucket, ReminderError
from src.data.models import Reminder, ReminderKind, ReminderLog


class ReminderNotFound(ReminderError):
    """Raised when a reminder id does not exist in the store."""


@runtime_checkable
class ReminderStore(Protocol):
    """Abstract reminder storage used by UI layers."""

    def add_reminder(
        self, item_id: str, kind: ReminderKind | str, title: str, **fields,
    ) -> Reminder: ...

    def get_reminder(self, reminder_id: str) -> Reminder | None: ...

    def list_active(self, item_id: str | None = None) -> list[Reminder]: ...

    def get_due(self, instant: datetime | None = None) -> list[Reminder]: ...

    def complete(
        self,
        reminder_id: str,
        notes: str | None = None,
        completed_at: datetime | None = None,
    ) -> tuple[Reminder, ReminderLog]: ...

    def deactivate(self, reminder_id: str) -> bool: ...

    def delete_reminder(self, reminder_id: str) -> bool: ...

    def logs_for_item(self, item_id: str) -> list[ReminderLog]: ...

    def marked_dates(self) -> set[date]: ...

    def reminders_on(self, day: date) -> list[Reminder]: ...

    def timeline(
        self, now: datetime | None = None,
    ) -> list[tuple[Bucket, list[Reminder]]]: ...
