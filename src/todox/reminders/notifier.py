# src/todox/reminders/notifier.py

from __future__ import annotations

import logging

from ..core.ports import NotificationPermission, NotificationSurface, TimerHandle, TimerPort
from .models import Task

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Task Reminder"
DEFAULT_TTL_SECONDS = 5.0


def notification_tag(task: Task, label: str | None = None) -> str:
    return f"task-{task.id}-{label or ''}"


def notification_body(task: Task, label: str | None = None) -> str:
    suffix = f" ({label})" if label else ""
    return f"Task due soon{suffix}: {task.title}"


class TaskNotifier:
    """
    Shows task reminders on a NotificationSurface.

    - no-op (logged) unless permission is granted
    - one notification per (task, label) tag; re-showing a tag replaces it
    - every notification is closed automatically after ttl_seconds
    """

    def __init__(
        self,
        surface: NotificationSurface,
        timers: TimerPort,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.surface = surface
        self._timers = timers
        self._ttl = max(0.0, float(ttl_seconds))
        self._auto_close: dict[str, TimerHandle] = {}

    def are_notifications_supported(self) -> bool:
        return self.surface.supported and self.surface.permission == NotificationPermission.GRANTED

    async def request_notification_permission(self) -> bool:
        if not self.surface.supported:
            logger.info("Notification surface does not support notifications")
            return False

        current = self.surface.permission
        if current == NotificationPermission.GRANTED:
            return True
        if current == NotificationPermission.DENIED:
            return False

        try:
            result = await self.surface.request_permission()
        except Exception:
            logger.exception("Notification permission request failed")
            return False
        logger.info("Notification permission -> %s", result.value)
        return result == NotificationPermission.GRANTED

    def show_task_notification(self, task: Task, reminder_label: str | None = None) -> None:
        if not self.are_notifications_supported():
            logger.info("Notification permission not granted; skipping task %s", task.id)
            return

        tag = notification_tag(task, reminder_label)
        previous = self._auto_close.pop(tag, None)
        if previous is not None:
            previous.cancel()

        try:
            self.surface.show(NOTIFICATION_TITLE, body=notification_body(task, reminder_label), tag=tag)
        except Exception:
            logger.exception("Failed to show notification tag=%s", tag)
            return

        self._auto_close[tag] = self._timers.after(self._ttl, lambda: self._close(tag))

    def _close(self, tag: str) -> None:
        self._auto_close.pop(tag, None)
        try:
            self.surface.close(tag)
        except Exception:
            logger.exception("Failed to close notification tag=%s", tag)
