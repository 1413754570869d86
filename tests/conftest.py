# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from todox.core.state import AppState
from todox.reminders.notifier import TaskNotifier
from todox.reminders.scheduler import ReminderScheduler

from .fakes import FakeClock, FakeSurface, InMemoryMirror, VirtualTimers

NOW = datetime(2024, 5, 31, 9, 5, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="todox-test",
        log_level="DEBUG",
        console_enabled=False,
        notifier="console",
        auto_grant_notifications=True,
        notification_ttl_seconds=5.0,
        urgent_window_hours=24.0,
        data_dir=tmp_path,
        reminders_db_path=tmp_path / "reminders.sqlite3",
        matrix_store_path=tmp_path / "matrix_store",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def timers(clock: FakeClock) -> VirtualTimers:
    return VirtualTimers(clock)


@pytest.fixture()
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture()
def mirror() -> InMemoryMirror:
    return InMemoryMirror()


@pytest.fixture()
def notifier(surface: FakeSurface, timers: VirtualTimers) -> TaskNotifier:
    return TaskNotifier(surface, timers, ttl_seconds=5.0)


@pytest.fixture()
def scheduler(
    timers: VirtualTimers,
    mirror: InMemoryMirror,
    notifier: TaskNotifier,
    clock: FakeClock,
) -> ReminderScheduler:
    return ReminderScheduler(timers=timers, mirror=mirror, notifier=notifier, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, scheduler: ReminderScheduler) -> AppState:
    """
    AppState without a loop thread: commands call the scheduler directly,
    timers are virtual.
    """
    return AppState(settings=settings, scheduler=scheduler, runner=None)
