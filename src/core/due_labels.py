"""Due-date labels for reminder lists and the calendar day panel.

Pure helpers built on the scheduler's day arithmetic.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum

from src.core.reminder_scheduler import day_difference

URGENT_DAYS = 3
SOON_DAYS = 7


class UrgencyLevel(Enum):
    OVERDUE = "overdue"
    URGENT = "urgent"
    SOON = "soon"
    NORMAL = "normal"


def urgency_level(
    target: datetime, now: datetime, tz: tzinfo | None = None,
) -> UrgencyLevel:
    """Colour-coding level: overdue, due within 3 days, within a week, or later."""
    if target < now:
        return UrgencyLevel.OVERDUE
    days = day_difference(target, now, tz)
    if days <= URGENT_DAYS:
        return UrgencyLevel.URGENT
    if days <= SOON_DAYS:
        return UrgencyLevel.SOON
    return UrgencyLevel.NORMAL


def describe_due(
    target: datetime, now: datetime, tz: tzinfo | None = None,
) -> str:
    """Human-readable remaining time, e.g. "Due tomorrow" or "Overdue by 3 days"."""
    days = day_difference(target, now, tz)
    if target < now:
        if days >= 0:
            return "Overdue"
        overdue = abs(days)
        return f"Overdue by {overdue} day" + ("" if overdue == 1 else "s")
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    return f"Due in {days} days"
