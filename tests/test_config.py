"""Tests for src.config — Settings validation."""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from src.config import Settings


def test_defaults():
    s = Settings()
    assert s.DATABASE_PATH == "data/reminders.db"
    assert s.TIMEZONE == "UTC"


def test_tz_property_returns_zoneinfo():
    s = Settings(TIMEZONE="Asia/Shanghai")
    assert s.tz == ZoneInfo("Asia/Shanghai")


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        Settings(TIMEZONE="Mars/Olympus_Mons")

