"""
LifeStock Reminders — Reminder Database.

SQLite storage for reminders and their completion logs. All scheduling
decisions are delegated to src.core.reminder_scheduler; this module only
reads rows, calls the core, and writes back the results.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, tzinfo
from pathlib import Path

from src.core import reminder_scheduler as scheduler
from src.core.reminder_scheduler import Bucket
from src.data.models import RecurrenceUnit, Reminder, ReminderKind, ReminderLog
from src.ports.reminder_store import ReminderNotFound

logger = logging.getLogger(__name__)


def _dump_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_dt(value: str | None, tz: tzinfo) -> datetime | None:
    """Parse a stored timestamp back into the store's zone.

    isoformat() keeps only a fixed UTC offset, so aware values are moved
    back onto the zone's rules before any wall-clock arithmetic.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(tz)


class ReminderDB:
    """SQLite-backed storage for reminders and reminder logs."""

    def __init__(self, db_path: str | None = None, tz: tzinfo | None = None) -> None:
        if db_path is None or tz is None:
            from src.config import settings
            db_path = db_path or settings.DATABASE_PATH
            tz = tz or settings.tz

        self._db_path = db_path
        self._tz = tz
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the reminders and reminder_logs tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reminders (
                    id                  TEXT    PRIMARY KEY,
                    item_id             TEXT    NOT NULL,
                    reminder_type       TEXT    NOT NULL,
                    title               TEXT    NOT NULL,
                    description         TEXT    NOT NULL DEFAULT '',
                    due_date            TEXT,
                    recurrence_interval INTEGER,
                    recurrence_unit     TEXT,
                    start_date          TEXT,
                    next_due_date       TEXT,
                    advance_days        INTEGER NOT NULL DEFAULT 0,
                    is_active           INTEGER NOT NULL DEFAULT 1,
                    created_at          TEXT,
                    updated_at          TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reminder_logs (
                    id           TEXT PRIMARY KEY,
                    reminder_id  TEXT NOT NULL REFERENCES reminders(id),
                    completed_at TEXT NOT NULL,
                    notes        TEXT
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reminders_item ON reminders(item_id)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_logs_reminder ON reminder_logs(reminder_id)"
            )
        logger.debug("Reminder tables initialized at %s", self._db_path)

    def _row_to_reminder(self, row: sqlite3.Row) -> Reminder:
        unit = row["recurrence_unit"]
        return Reminder(
            id=row["id"],
            item_id=row["item_id"],
            kind=ReminderKind(row["reminder_type"]),
            title=row["title"],
            description=row["description"],
            due_date=_load_dt(row["due_date"], self._tz),
            recurrence_interval=row["recurrence_interval"],
            recurrence_unit=RecurrenceUnit(unit) if unit else None,
            start_date=_load_dt(row["start_date"], self._tz),
            next_due_date=_load_dt(row["next_due_date"], self._tz),
            advance_days=row["advance_days"],
            is_active=bool(row["is_active"]),
            created_at=_load_dt(row["created_at"], self._tz),
            updated_at=_load_dt(row["updated_at"], self._tz),
        )

    def _row_to_log(self, row: sqlite3.Row) -> ReminderLog:
        return ReminderLog(
            id=row["id"],
            reminder_id=row["reminder_id"],
            completed_at=_load_dt(row["completed_at"], self._tz),
            notes=row["notes"],
        )

    def _now(self) -> datetime:
        return datetime.now(self._tz)

    # -- writes ---------------------------------------------------------

    def add_reminder(
        self, item_id: str, kind: ReminderKind | str, title: str, **fields,
    ) -> Reminder:
        """Validate and insert a new reminder.

        Accepts the keyword fields of scheduler.create_reminder.
        """
        fields.setdefault("created_at", self._now())
        reminder = scheduler.create_reminder(item_id, kind, title, **fields)

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO reminders
                    (id, item_id, reminder_type, title, description, due_date,
                     recurrence_interval, recurrence_unit, start_date,
                     next_due_date, advance_days, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (
                    reminder.id, reminder.item_id, reminder.kind.value,
                    reminder.title, reminder.description,
                    _dump_dt(reminder.due_date),
                    reminder.recurrence_interval,
                    reminder.recurrence_unit.value if reminder.recurrence_unit else None,
                    _dump_dt(reminder.start_date),
                    _dump_dt(reminder.next_due_date),
                    reminder.advance_days,
                    _dump_dt(reminder.created_at),
                    _dump_dt(reminder.updated_at),
                ),
            )
        logger.info(
            "Reminder added: %s '%s' (%s) for item %s",
            reminder.id, reminder.title, reminder.kind.value, item_id,
        )
        return reminder

    def complete(
        self,
        reminder_id: str,
        notes: str | None = None,
        completed_at: datetime | None = None,
    ) -> tuple[Reminder, ReminderLog]:
        """Complete a reminder: append a log and update the reminder atomically.

        The row is read inside a write transaction, so a concurrent
        completion of the same reminder sees the advanced next_due_date.
        On any error nothing is written.
        """
        if completed_at is None:
            completed_at = self._now()

        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?", (reminder_id,)
            ).fetchone()
            if row is None:
                raise ReminderNotFound(f"Reminder {reminder_id} not found")

            updated, log = scheduler.complete(
                self._row_to_reminder(row), completed_at, notes,
            )
            conn.execute(
                "INSERT INTO reminder_logs (id, reminder_id, completed_at, notes) "
                "VALUES (?, ?, ?, ?)",
                (log.id, log.reminder_id, _dump_dt(log.completed_at), log.notes),
            )
            conn.execute(
                "UPDATE reminders SET next_due_date = ?, is_active = ?, updated_at = ? "
                "WHERE id = ?",
                (
                    _dump_dt(updated.next_due_date),
                    int(updated.is_active),
                    _dump_dt(updated.updated_at),
                    reminder_id,
                ),
            )

        if updated.is_recurring:
            logger.info(
                "Reminder %s completed, next due: %s",
                reminder_id, updated.next_due_date.isoformat(),
            )
        else:
            logger.info("Reminder %s completed and deactivated", reminder_id)
        return updated, log

    def deactivate(self, reminder_id: str) -> bool:
        """Stop a reminder without deleting it or its history."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE reminders SET is_active = 0, updated_at = ? "
                "WHERE id = ? AND is_active = 1",
                (_dump_dt(self._now()), reminder_id),
            )
        deactivated = cursor.rowcount > 0
        if deactivated:
            logger.info("Reminder %s deactivated", reminder_id)
        return deactivated

    def delete_reminder(self, reminder_id: str) -> bool:
        """Delete a reminder together with its completion logs."""
        with self._connect() as conn:
            conn.execute("DELETE FROM reminder_logs WHERE reminder_id = ?", (reminder_id,))
            cursor = conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Reminder %s deleted", reminder_id)
        return deleted

    # -- reads ----------------------------------------------------------

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        """Fetch a single reminder by ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?", (reminder_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_reminder(row)

    def list_all(
        self, active_only: bool = False, item_id: str | None = None,
    ) -> list[Reminder]:
        """List reminders in creation order, optionally filtered."""
        conditions: list[str] = []
        params: list = []
        if active_only:
            conditions.append("is_active = 1")
        if item_id is not None:
            conditions.append("item_id = ?")
            params.append(item_id)

        query = "SELECT * FROM reminders"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY created_at, id"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        return [self._row_to_reminder(r) for r in rows]

    def list_active(self, item_id: str | None = None) -> list[Reminder]:
        """Active reminders, optionally for a single item."""
        return self.list_all(active_only=True, item_id=item_id)

    def get_due(self, instant: datetime | None = None) -> list[Reminder]:
        """Active reminders due at or before instant (default: now)."""
        if instant is None:
            instant = self._now()
        return scheduler.due_on_or_before(self.list_active(), instant)

    def logs_for_reminder(self, reminder_id: str) -> list[ReminderLog]:
        """Completion history of one reminder, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM reminder_logs WHERE reminder_id = ? "
                "ORDER BY completed_at DESC",
                (reminder_id,),
            ).fetchall()
        return [self._row_to_log(r) for r in rows]

    def logs_for_item(self, item_id: str) -> list[ReminderLog]:
        """Completion history of every reminder on an item, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT l.* FROM reminder_logs l
                JOIN reminders r ON r.id = l.reminder_id
                WHERE r.item_id = ?
                ORDER BY l.completed_at DESC
                """,
                (item_id,),
            ).fetchall()
        return [self._row_to_log(r) for r in rows]

    def marked_dates(self) -> set[date]:
        """Calendar dates carrying at least one active reminder."""
        return scheduler.marked_date_set(self.list_active(), self._tz)

    def reminders_on(self, day: date) -> list[Reminder]:
        """Active reminders due on a calendar date."""
        return scheduler.reminders_on(self.list_active(), day, self._tz)

    def timeline(
        self, now: datetime | None = None,
    ) -> list[tuple[Bucket, list[Reminder]]]:
        """Active reminders grouped into timeline buckets."""
        if now is None:
            now = self._now()
        return scheduler.group_by_bucket(self.list_active(), now, self._tz)
