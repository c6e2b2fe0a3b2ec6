"""Tests for src.data.models — Reminder and ReminderLog dataclasses."""

import dataclasses
from dataclasses import asdict
from datetime import datetime

import pytest

from src.data.models import RecurrenceUnit, Reminder, ReminderKind, ReminderLog


def test_one_time_reminder_defaults():
    reminder = Reminder(
        id="r1",
        item_id="milk",
        kind=ReminderKind.ONE_TIME,
        title="Milk expires",
        due_date=datetime(2026, 2, 7, 9, 0),
    )
    assert reminder.description == ""
    assert reminder.recurrence_interval is None
    assert reminder.recurrence_unit is None
    assert reminder.next_due_date is None
    assert reminder.advance_days == 0
    assert reminder.is_active is True
    assert reminder.is_recurring is False


def test_recurring_reminder_fields():
    start = datetime(2026, 1, 1, 8, 0)
    reminder = Reminder(
        id="r2",
        item_id="sim-card",
        kind=ReminderKind.RECURRING,
        title="Top up phone line",
        recurrence_interval=3,
        recurrence_unit=RecurrenceUnit.MONTH,
        start_date=start,
        next_due_date=start,
        advance_days=2,
    )
    assert reminder.is_recurring is True
    assert reminder.recurrence_unit is RecurrenceUnit.MONTH
    assert reminder.advance_days == 2


def test_enum_values_match_stored_strings():
    assert ReminderKind("one_time") is ReminderKind.ONE_TIME
    assert ReminderKind("recurring") is ReminderKind.RECURRING
    assert [u.value for u in RecurrenceUnit] == ["day", "week", "month", "year"]


def test_reminder_log_is_immutable():
    log = ReminderLog(id="l1", reminder_id="r1", completed_at=datetime(2026, 1, 1))
    assert log.notes is None
    with pytest.raises(dataclasses.FrozenInstanceError):
        log.notes = "changed"


def test_reminder_serializable():
    reminder = Reminder(
        id="r1", item_id="i1", kind=ReminderKind.ONE_TIME, title="Test",
        due_date=datetime(2026, 1, 1),
    )
    d = asdict(reminder)
    assert d["title"] == "Test"
    assert d["is_active"] is True
