# src/todox/reminders/models.py

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any, Final, NamedTuple

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


class TaskStatus(StrEnum):
    """
    Task lifecycle status as reported by the task UI.

    Only COMPLETE matters to the reminder engine; anything unknown is treated as ACTIVE.
    """

    ACTIVE = "active"
    COMPLETE = "complete"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.ACTIVE
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.ACTIVE


def parse_due_date(raw: Any) -> date | None:
    """Accept a date, a datetime or an ISO string (date part only). Malformed -> None."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip()[:10])
    except ValueError:
        logger.debug("Ignoring malformed due date %r", raw)
        return None


def parse_due_time(raw: Any) -> tuple[int, int] | None:
    """Parse "HH:MM" into (hours, minutes). Malformed or out of range -> None."""
    if raw is None or raw == "":
        return None
    m = _TIME_RE.match(str(raw))
    if not m:
        logger.debug("Ignoring malformed due time %r", raw)
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        logger.debug("Ignoring out-of-range due time %r", raw)
        return None
    return hours, minutes


@dataclass(slots=True)
class Task:
    id: str
    title: str
    due_date: date | None = None
    due_time: str | None = None
    status: TaskStatus = TaskStatus.ACTIVE
    priority: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.status == TaskStatus.COMPLETE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Build a Task from the UI payload (camelCase keys, `_id` or `id`)."""
        raw_id = data.get("_id", data.get("id"))
        if raw_id is None or str(raw_id).strip() == "":
            raise ValueError("task id is required")

        # A malformed time is kept as-is so resolve_due_instant rejects the task.
        due_time = data.get("dueTime", data.get("due_time"))

        return cls(
            id=str(raw_id),
            title=str(data.get("title") or ""),
            due_date=parse_due_date(data.get("dueDate", data.get("due_date"))),
            due_time=str(due_time).strip() if due_time else None,
            status=TaskStatus.from_raw(data.get("status")),
            priority=data.get("priority"),
        )


class ReminderInterval(NamedTuple):
    label: str
    offset: timedelta


REMINDER_INTERVALS: Final[tuple[ReminderInterval, ...]] = (
    ReminderInterval("1day", timedelta(days=1)),
    ReminderInterval("1hour", timedelta(hours=1)),
    ReminderInterval("30min", timedelta(minutes=30)),
    ReminderInterval("15min", timedelta(minutes=15)),
)


class ReminderKey(NamedTuple):
    task_id: str
    label: str

    def __str__(self) -> str:
        return f"{self.task_id}-{self.label}"

    @classmethod
    def parse(cls, raw: str) -> ReminderKey:
        # Labels never contain "-", task ids may.
        task_id, sep, label = raw.rpartition("-")
        if not sep or not task_id or not label:
            raise ValueError(f"malformed reminder key: {raw!r}")
        return cls(task_id=task_id, label=label)


class _Restored:
    """Registry value for entries restored from storage: no live timer behind it."""

    _instance: _Restored | None = None

    def __new__(cls) -> _Restored:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "RESTORED"

    def __bool__(self) -> bool:
        return False


RESTORED: Final = _Restored()
