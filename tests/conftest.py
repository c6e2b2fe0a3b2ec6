"""Shared test fixtures and configuration.

Pins environment variables before src.config is imported and provides
a ReminderDB backed by a temp file.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
from datetime import timezone


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_reminders.db")


@pytest.fixture
def reminder_db(tmp_db_path):
    """Return a ReminderDB instance backed by a temp file, on UTC day boundaries."""
    from src.data.db import ReminderDB
    return ReminderDB(db_path=tmp_db_path, tz=timezone.utc)
