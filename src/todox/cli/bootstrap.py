# src/todox/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- starts the reminder loop thread,
- wires timers/mirror/notification surface into a ReminderScheduler on that loop,
- restores the persisted reminder mirror.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..connectors.console_notifier import ConsoleNotifier
from ..core.loop_runner import ReminderLoopRunner, start_loop_in_background
from ..core.ports import NotificationSurface
from ..core.state import AppState
from ..reminders.notifier import TaskNotifier
from ..reminders.scheduler import ReminderScheduler
from ..reminders.store import ReminderStateStore
from ..reminders.timers import AsyncioTimers, SystemClock

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.reminders_db_path.parent.mkdir(parents=True, exist_ok=True)


async def _build_surface(settings, state_closers: list) -> NotificationSurface:
    if settings.notifier == "matrix":
        from ..connectors.matrix_client import create_matrix_client
        from ..connectors.matrix_notifier import MatrixNotifier

        client = await create_matrix_client(settings)
        if client is not None:
            notifier = MatrixNotifier(client, settings.matrix_room)
            if settings.auto_grant_notifications:
                await notifier.request_permission()

            async def _close_matrix() -> None:
                await notifier.drain()
                await client.close()

            state_closers.append(_close_matrix)
            return notifier
        logger.warning("Matrix notifier unavailable; falling back to console.")

    return ConsoleNotifier(granted=settings.auto_grant_notifications)


async def _build_scheduler(settings, closers: list) -> ReminderScheduler:
    surface = await _build_surface(settings, closers)
    timers = AsyncioTimers(asyncio.get_running_loop())
    notifier = TaskNotifier(surface, timers, ttl_seconds=settings.notification_ttl_seconds)
    scheduler = ReminderScheduler(
        timers=timers,
        mirror=ReminderStateStore(settings.reminders_db_path),
        notifier=notifier,
        clock=SystemClock(),
    )
    scheduler.restore_reminders_from_storage()
    return scheduler


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    runner: ReminderLoopRunner | None = start_loop_in_background()
    if runner is None:
        raise RuntimeError("Reminder loop failed to start")

    closers: list = []
    scheduler = runner.run(_build_scheduler(settings, closers), timeout=60.0)

    state = AppState(settings=settings, scheduler=scheduler, runner=runner)
    state.closers.extend(closers)
    return state


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    runner = state.runner
    if runner is None:
        state.scheduler.shutdown()
        return

    try:
        runner.call(state.scheduler.shutdown)
    except Exception:
        logger.exception("Failed to cancel reminder timers.")

    for closer in state.closers:
        try:
            runner.run(closer(), timeout=10.0)
        except Exception:
            logger.debug("Closer failed.", exc_info=True)

    runner.stop()
    runner.join(timeout=10.0)
