"""
LifeStock Reminders — Data Models.

A reminder belongs to a household item (stock, card, phone line) and is
either a one-time deadline or a recurring cycle. Completing a reminder
appends an immutable ReminderLog entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReminderKind(Enum):
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class RecurrenceUnit(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass
class Reminder:
    """A one-time or recurring reminder attached to an item.

    One-time reminders use ``due_date``; recurring reminders use
    ``next_due_date``, which moves forward on every completion.
    """

    id: str
    item_id: str
    kind: ReminderKind
    title: str
    description: str = ""

    # One-time
    due_date: datetime | None = None

    # Recurring
    recurrence_interval: int | None = None
    recurrence_unit: RecurrenceUnit | None = None
    start_date: datetime | None = None
    next_due_date: datetime | None = None

    advance_days: int = 0             # notify this many days ahead
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_recurring(self) -> bool:
        return self.kind is ReminderKind.RECURRING


@dataclass(frozen=True)
class ReminderLog:
    """Completion record. Never updated once written."""

    id: str
    reminder_id: str
    completed_at: datetime
    notes: str | None = None
