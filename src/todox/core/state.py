# src/todox/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..reminders.models import Task
from ..reminders.scheduler import ReminderScheduler
from .loop_runner import ReminderLoopRunner


@dataclass
class AppState:
    """
    Composition of long-lived objects used by the CLI and connectors.

    `tasks` stands in for the task UI's store: the reminder engine only reads
    id/title/due_date/due_time/status from it.
    """

    settings: Any
    scheduler: ReminderScheduler
    runner: ReminderLoopRunner | None = None

    tasks: dict[str, Task] = field(default_factory=dict)
    notified_urgent: set[str] = field(default_factory=set)
    closers: list[Any] = field(default_factory=list)
