"""Reminder scheduler — pure date logic for one-time and recurring reminders.

Resolves each reminder's target instant, classifies it into a
date-relative bucket for the timeline, rolls recurring reminders forward
on completion, and collects the calendar dates that carry reminders.

No I/O: callers pass "now" in explicitly and persist what comes back.
Day boundaries are local wall-clock midnights. Pass ``tz`` to convert
instants into a specific zone first; otherwise aware instants are read
on the reference instant's wall clock and naive ones as they stand.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, tzinfo
from enum import Enum

from dateutil.relativedelta import relativedelta

from src.data.models import RecurrenceUnit, Reminder, ReminderKind, ReminderLog


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ReminderError(Exception):
    """Base class for reminder scheduling errors."""


class InvalidRecurrenceConfiguration(ReminderError):
    """Recurring reminder has no usable interval or unit."""


class MissingTargetInstant(ReminderError):
    """Reminder has no due date, next due date or start date."""


class InvalidReminder(ReminderError):
    """Reminder fields violate a creation-time constraint."""


# ---------------------------------------------------------------------------
# Buckets
# ---------------------------------------------------------------------------


class Bucket(Enum):
    """Timeline groups, declared in display order."""

    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    DAY_AFTER_TOMORROW = "day_after_tomorrow"
    WITHIN_WEEK = "within_week"
    WITHIN_MONTH = "within_month"
    WITHIN_QUARTER = "within_quarter"
    WITHIN_HALF_YEAR = "within_half_year"
    WITHIN_YEAR = "within_year"
    DISTANT = "distant"


# (inclusive upper bound in days, bucket), checked in order
_BUCKET_LIMITS: list[tuple[int, Bucket]] = [
    (0, Bucket.TODAY),
    (1, Bucket.TOMORROW),
    (2, Bucket.DAY_AFTER_TOMORROW),
    (7, Bucket.WITHIN_WEEK),
    (30, Bucket.WITHIN_MONTH),
    (90, Bucket.WITHIN_QUARTER),
    (180, Bucket.WITHIN_HALF_YEAR),
    (365, Bucket.WITHIN_YEAR),
]


# ---------------------------------------------------------------------------
# Target instants and day arithmetic
# ---------------------------------------------------------------------------


def target_instant(reminder: Reminder) -> datetime | None:
    """Return the instant a reminder is due.

    One-time reminders use ``due_date``. Recurring reminders use
    ``next_due_date``, falling back to ``start_date`` if it was never set.
    """
    if reminder.kind is ReminderKind.ONE_TIME:
        return reminder.due_date
    if reminder.next_due_date is not None:
        return reminder.next_due_date
    return reminder.start_date


def require_target_instant(reminder: Reminder) -> datetime:
    """Like target_instant, but raises MissingTargetInstant instead of returning None."""
    instant = target_instant(reminder)
    if instant is None:
        raise MissingTargetInstant(f"Reminder {reminder.id!r} has no target instant")
    return instant


def date_key(instant: datetime, tz: tzinfo | None = None) -> date:
    """Truncate an instant to its calendar date."""
    if tz is not None:
        instant = instant.astimezone(tz)
    return instant.date()


def day_difference(
    target: datetime, reference: datetime, tz: tzinfo | None = None,
) -> int:
    """Signed number of calendar days from reference's date to target's date.

    Counts midnights crossed, not elapsed 24h periods, so 23:59 today
    versus 00:01 today is 0 and a DST change never skews the result.
    Without ``tz``, two aware instants are both read on the reference's
    wall clock, so a target after the reference never counts as earlier.
    """
    if tz is None and reference.tzinfo is not None and target.tzinfo is not None:
        tz = reference.tzinfo
    return (date_key(target, tz) - date_key(reference, tz)).days


def bucket_for_days(days: int) -> Bucket:
    """Map any whole-day difference to exactly one bucket."""
    if days < 0:
        return Bucket.OVERDUE
    for limit, bucket in _BUCKET_LIMITS:
        if days <= limit:
            return bucket
    return Bucket.DISTANT


def classify_urgency(
    target: datetime, now: datetime, tz: tzinfo | None = None,
) -> Bucket:
    """Bucket a target instant relative to now.

    Anything strictly before now is overdue, even earlier the same day.
    """
    if target < now:
        return Bucket.OVERDUE
    return bucket_for_days(day_difference(target, now, tz))


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------


def _step(interval: int, unit: RecurrenceUnit) -> relativedelta:
    if unit is RecurrenceUnit.DAY:
        return relativedelta(days=interval)
    if unit is RecurrenceUnit.WEEK:
        return relativedelta(weeks=interval)
    if unit is RecurrenceUnit.MONTH:
        return relativedelta(months=interval)
    return relativedelta(years=interval)


def _check_recurrence(interval: int | None, unit: RecurrenceUnit | None) -> None:
    if interval is None or interval <= 0:
        raise InvalidRecurrenceConfiguration(
            f"Recurrence interval must be a positive integer, got {interval!r}"
        )
    if not isinstance(unit, RecurrenceUnit):
        raise InvalidRecurrenceConfiguration(f"Unknown recurrence unit: {unit!r}")


def advance(
    current_due: datetime, interval: int, unit: RecurrenceUnit,
) -> datetime:
    """Return the next occurrence after current_due.

    Arithmetic is on the wall clock, so the time of day survives DST
    changes. Month and year steps clamp to the last day of a shorter
    month (Jan 31 -> Feb 28/29, Feb 29 -> Feb 28). The clamped day becomes
    the new baseline: advancing Feb 28 again gives Mar 28.
    """
    _check_recurrence(interval, unit)
    return current_due + _step(interval, unit)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def create_reminder(
    item_id: str,
    kind: ReminderKind | str,
    title: str,
    *,
    description: str = "",
    due_date: datetime | None = None,
    recurrence_interval: int | None = None,
    recurrence_unit: RecurrenceUnit | str | None = None,
    start_date: datetime | None = None,
    next_due_date: datetime | None = None,
    advance_days: int = 0,
    reminder_id: str | None = None,
    created_at: datetime | None = None,
) -> Reminder:
    """Build a new active reminder, validating its scheduling fields.

    A recurring reminder's next_due_date defaults to start_date.

    Raises:
        MissingTargetInstant: one-time without due_date, or recurring
            without start_date.
        InvalidRecurrenceConfiguration: bad interval or unit.
        InvalidReminder: negative advance_days, or next_due_date before
            start_date.
    """
    kind = ReminderKind(kind)
    if advance_days < 0:
        raise InvalidReminder(f"advance_days must be >= 0, got {advance_days}")

    if kind is ReminderKind.ONE_TIME:
        if due_date is None:
            raise MissingTargetInstant("One-time reminder requires a due date")
        unit = None
    else:
        try:
            unit = RecurrenceUnit(recurrence_unit) if recurrence_unit is not None else None
        except ValueError as exc:
            raise InvalidRecurrenceConfiguration(
                f"Unknown recurrence unit: {recurrence_unit!r}"
            ) from exc
        _check_recurrence(recurrence_interval, unit)
        if start_date is None:
            raise MissingTargetInstant("Recurring reminder requires a start date")
        if next_due_date is None:
            next_due_date = start_date
        elif next_due_date < start_date:
            raise InvalidReminder("next_due_date cannot be earlier than start_date")

    return Reminder(
        id=reminder_id or uuid.uuid4().hex,
        item_id=item_id,
        kind=kind,
        title=title,
        description=description,
        due_date=None if unit else due_date,
        recurrence_interval=recurrence_interval if unit else None,
        recurrence_unit=unit,
        start_date=start_date if unit else None,
        next_due_date=next_due_date if unit else None,
        advance_days=advance_days,
        is_active=True,
        created_at=created_at,
        updated_at=created_at,
    )


def complete(
    reminder: Reminder,
    completed_at: datetime,
    notes: str | None = None,
    *,
    log_id: str | None = None,
) -> tuple[Reminder, ReminderLog]:
    """Complete a reminder, returning (updated reminder, new log entry).

    One-time reminders are deactivated. Recurring reminders stay active and
    roll next_due_date forward by one interval. The input is not modified;
    on error nothing is produced, so the caller has nothing to persist.
    Callers must save both results in a single transaction.
    """
    if reminder.is_recurring:
        _check_recurrence(reminder.recurrence_interval, reminder.recurrence_unit)
        current_due = require_target_instant(reminder)
        updated = replace(
            reminder,
            next_due_date=advance(
                current_due, reminder.recurrence_interval, reminder.recurrence_unit,
            ),
            updated_at=completed_at,
        )
    else:
        updated = replace(reminder, is_active=False, updated_at=completed_at)

    log = ReminderLog(
        id=log_id or uuid.uuid4().hex,
        reminder_id=reminder.id,
        completed_at=completed_at,
        notes=notes,
    )
    return updated, log


# ---------------------------------------------------------------------------
# Batch views — reminders without a target instant are skipped
# ---------------------------------------------------------------------------


def sort_reminders(reminders: Iterable[Reminder]) -> list[Reminder]:
    """Sort by (target instant, id), dropping reminders with no target."""
    dated = [r for r in reminders if target_instant(r) is not None]
    dated.sort(key=lambda r: (target_instant(r), r.id))
    return dated


def marked_date_set(
    reminders: Iterable[Reminder], tz: tzinfo | None = None,
) -> set[date]:
    """Calendar dates on which at least one active reminder is due."""
    dates: set[date] = set()
    for reminder in reminders:
        if not reminder.is_active:
            continue
        instant = target_instant(reminder)
        if instant is not None:
            dates.add(date_key(instant, tz))
    return dates


def group_by_bucket(
    reminders: Iterable[Reminder], now: datetime, tz: tzinfo | None = None,
) -> list[tuple[Bucket, list[Reminder]]]:
    """Group reminders into timeline buckets.

    Buckets come out in Bucket declaration order and empty ones are
    omitted. Within a bucket reminders are sorted by target instant, then id.
    """
    grouped: dict[Bucket, list[Reminder]] = {}
    for reminder in sort_reminders(reminders):
        bucket = classify_urgency(target_instant(reminder), now, tz)
        grouped.setdefault(bucket, []).append(reminder)
    return [(bucket, grouped[bucket]) for bucket in Bucket if bucket in grouped]


def due_on_or_before(
    reminders: Iterable[Reminder], instant: datetime,
) -> list[Reminder]:
    """Active reminders whose target instant is at or before instant."""
    return [
        r for r in sort_reminders(reminders)
        if r.is_active and target_instant(r) <= instant
    ]


def reminders_on(
    reminders: Iterable[Reminder], day: date, tz: tzinfo | None = None,
) -> list[Reminder]:
    """Active reminders due on a given calendar date."""
    return [
        r for r in sort_reminders(reminders)
        if r.is_active and date_key(target_instant(r), tz) == day
    ]
