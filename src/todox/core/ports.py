# src/todox/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder engine.

The scheduler depends on Protocols instead of concrete implementations.
This keeps timers/storage/notification surfaces swappable and makes testing easier
(virtual clock, in-memory mirror, recording surface).
"""

from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol


class NotificationPermission(StrEnum):
    DEFAULT = "default"  # not asked yet
    GRANTED = "granted"
    DENIED = "denied"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerPort(Protocol):
    """Delayed-callback facility. `after` never blocks the caller."""

    def after(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class Clock(Protocol):
    def now(self) -> datetime: ...


class ReminderMirror(Protocol):
    """
    Persisted snapshot of scheduled reminder keys.

    Records are {"key", "taskId", "reminderType"} dicts; no timer handles.
    """

    def load(self) -> list[dict[str, Any]]: ...
    def save(self, records: list[dict[str, Any]]) -> None: ...


class NotificationSurface(Protocol):
    """
    Where reminders are displayed (console, Matrix room, ...).

    Surfaces dedupe by tag: showing a tag that is already on screen replaces it.
    """

    @property
    def supported(self) -> bool: ...

    @property
    def permission(self) -> NotificationPermission: ...

    async def request_permission(self) -> NotificationPermission: ...

    def show(self, title: str, *, body: str, tag: str) -> None: ...

    def close(self, tag: str) -> None: ...
