# src/todox/reminders/scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Owns the registry of pending reminders per task:
- turns a task's due date/time into up to four fire times (1day/1hour/30min/15min before),
- arms one timer per future fire time through an injected TimerPort,
- mirrors the registry keys into a ReminderMirror after every mutation,
- cancels/reschedules when a task is edited or completed.

All methods run on a single thread (the reminder loop). None of them raise to the caller.
"""

import logging
from collections.abc import Iterable
from typing import Any

from ..core.ports import Clock, ReminderMirror, TimerHandle, TimerPort
from .due import task_due_instant
from .models import REMINDER_INTERVALS, RESTORED, ReminderKey, Task, _Restored
from .notifier import TaskNotifier
from .timers import SystemClock

logger = logging.getLogger(__name__)

RegistryValue = TimerHandle | _Restored


def _is_schedulable(task: Task) -> bool:
    return task.due_date is not None and not task.is_complete


class ReminderScheduler:
    def __init__(
        self,
        *,
        timers: TimerPort,
        mirror: ReminderMirror,
        notifier: TaskNotifier,
        clock: Clock | None = None,
    ) -> None:
        self._timers = timers
        self._mirror = mirror
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self._registry: dict[ReminderKey, RegistryValue] = {}

    # ---- persistence ----

    def _mirror_records(self) -> list[dict[str, Any]]:
        return [
            {"key": str(key), "taskId": key.task_id, "reminderType": key.label}
            for key in self._registry
        ]

    def _save_mirror(self) -> None:
        try:
            self._mirror.save(self._mirror_records())
        except Exception:
            logger.exception("Failed to persist reminder mirror")

    def restore_reminders_from_storage(self) -> int:
        """
        Re-insert persisted keys as RESTORED sentinels (no live timers).

        Corrupt or unreadable storage leaves the registry untouched.
        Returns the number of restored entries.
        """
        try:
            records = self._mirror.load()
        except Exception:
            logger.exception("Error restoring reminders from storage")
            return 0

        keys: list[ReminderKey] = []
        for rec in records:
            try:
                task_id = rec.get("taskId")
                label = rec.get("reminderType")
                if task_id is not None and label:
                    keys.append(ReminderKey(str(task_id), str(label)))
                else:
                    keys.append(ReminderKey.parse(str(rec["key"])))
            except (KeyError, ValueError):
                logger.warning("Skipping malformed reminder record %r", rec)

        self._cancel_all_live()
        self._registry.clear()
        for key in keys:
            self._registry[key] = RESTORED

        logger.info("Restored %d reminder entries from storage", len(keys))
        return len(keys)

    def prune_restored_reminders(self, live_tasks: Iterable[Task]) -> int:
        """
        Drop RESTORED entries whose task is gone, complete, or has no due date.
        """
        schedulable = {t.id for t in live_tasks if _is_schedulable(t)}
        stale = [
            key
            for key, value in self._registry.items()
            if value is RESTORED and key.task_id not in schedulable
        ]
        for key in stale:
            del self._registry[key]
        if stale:
            logger.info("Pruned %d stale restored reminders", len(stale))
            self._save_mirror()
        return len(stale)

    # ---- scheduling ----

    def schedule_task_reminders(self, task: Task) -> None:
        if not _is_schedulable(task):
            return

        self.cancel_task_reminders(task.id)

        due = task_due_instant(task)
        if due is None:
            logger.debug("Task %s has an unusable due time %r; not scheduling", task.id, task.due_time)
            return

        now = self._clock.now()
        for interval in REMINDER_INTERVALS:
            fire_at = due - interval.offset
            if fire_at <= now:
                continue

            key = ReminderKey(task.id, interval.label)
            delay = (fire_at - now).total_seconds()
            self._registry[key] = self._timers.after(delay, self._make_fire_callback(task, key))
            self._save_mirror()
            logger.info("Reminder armed %s at %s (in %.0fs)", key, fire_at.isoformat(), delay)

    def _make_fire_callback(self, task: Task, key: ReminderKey):
        def _fire() -> None:
            try:
                self._notifier.show_task_notification(task, key.label)
            finally:
                self._registry.pop(key, None)
                self._save_mirror()
            logger.info("Reminder fired %s", key)

        return _fire

    def cancel_task_reminders(self, task_id: str) -> None:
        keys = [key for key in self._registry if key.task_id == task_id]
        for key in keys:
            handle = self._registry.pop(key)
            if handle is not RESTORED:
                handle.cancel()
        if keys:
            logger.info("Cancelled %d reminders for task %s", len(keys), task_id)
            self._save_mirror()

    def update_task_reminders(self, old_task: Task, new_task: Task) -> None:
        # Cancel strictly before rescheduling.
        self.cancel_task_reminders(old_task.id)
        if _is_schedulable(new_task):
            self.schedule_task_reminders(new_task)

    def _cancel_all_live(self) -> None:
        for value in self._registry.values():
            if value is not RESTORED:
                value.cancel()

    def shutdown(self) -> None:
        """Cancel every live timer; the persisted mirror is left as-is for the next start."""
        self._cancel_all_live()

    # ---- queries ----

    def get_scheduled_reminder_count(self, task_id: str) -> int:
        return sum(1 for key in self._registry if key.task_id == task_id)

    def scheduled_keys(self) -> list[ReminderKey]:
        return list(self._registry)

    def is_restored(self, key: ReminderKey) -> bool:
        return self._registry.get(key) is RESTORED

    # ---- notification passthroughs ----

    def show_task_notification(self, task: Task, reminder_label: str | None = None) -> None:
        self._notifier.show_task_notification(task, reminder_label)

    async def request_notification_permission(self) -> bool:
        return await self._notifier.request_notification_permission()

    def are_notifications_supported(self) -> bool:
        return self._notifier.are_notifications_supported()
