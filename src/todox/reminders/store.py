# src/todox/reminders/store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

REMINDERS_STORAGE_KEY = "todox_scheduled_reminders"


class ReminderStateStore:
    """
    SQLite key/value store holding the persisted reminder mirror.

    One row per storage key; the value is a JSON list of
    {"key", "taskId", "reminderType"} records, in registry order.

    Thread-safety:
    - each method opens its own SQLite connection

    Calls are blocking. The scheduler invokes save() on the event-loop thread
    (including from timer callbacks); the row is tiny, so no executor is used.
    """

    def __init__(
        self,
        db_path: str | Path = "reminders.sqlite3",
        *,
        storage_key: str = REMINDERS_STORAGE_KEY,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_key = storage_key
        self._ensure_schema()
        logger.info("ReminderStateStore ready db=%s key=%s", self._db_path, self._storage_key)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_raw(self) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT value FROM kv_state WHERE key = ?", (self._storage_key,))
            row = cur.fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def _write_raw(self, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv_state(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self._storage_key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load(self) -> list[dict[str, Any]]:
        """
        Return the stored records. Missing row -> [].

        Raises on unreadable/corrupt data; the scheduler decides how to degrade.
        """
        raw = self._read_raw()
        if raw is None:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON list under {self._storage_key!r}")
        return [item for item in data if isinstance(item, dict)]

    def save(self, records: list[dict[str, Any]]) -> None:
        self._write_raw(json.dumps(records, ensure_ascii=False))
        logger.debug("Reminder mirror saved (%d records)", len(records))

    def clear(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv_state WHERE key = ?", (self._storage_key,))
            conn.commit()
        finally:
            conn.close()
