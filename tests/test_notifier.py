# tests/test_notifier.py

from __future__ import annotations

from datetime import timedelta

import pytest

from todox.core.ports import NotificationPermission
from todox.reminders.models import Task
from todox.reminders.notifier import TaskNotifier

TASK = Task(id="t1", title="Call the bank")


def test_show_without_label(notifier, surface) -> None:
    notifier.show_task_notification(TASK)

    assert len(surface.shown) == 1
    assert surface.shown[0].body == "Task due soon: Call the bank"
    assert surface.shown[0].tag == "task-t1-"


def test_show_is_noop_without_permission(notifier, surface, timers) -> None:
    surface.permission_state = NotificationPermission.DEFAULT
    notifier.show_task_notification(TASK, "1hour")

    assert surface.shown == []
    assert timers.handles == []


def test_notification_auto_closes_after_ttl(notifier, surface, timers) -> None:
    notifier.show_task_notification(TASK, "15min")

    timers.advance(timedelta(seconds=4.9))
    assert surface.closed == []
    timers.advance(timedelta(seconds=0.1))
    assert surface.closed == ["task-t1-15min"]


def test_reshowing_a_tag_restarts_its_auto_close(notifier, surface, timers) -> None:
    notifier.show_task_notification(TASK, "15min")
    timers.advance(timedelta(seconds=3))
    notifier.show_task_notification(TASK, "15min")

    timers.advance(timedelta(seconds=3))
    assert surface.closed == []

    timers.advance(timedelta(seconds=2))
    assert surface.closed == ["task-t1-15min"]
    assert [n.tag for n in surface.shown] == ["task-t1-15min", "task-t1-15min"]


def test_surface_error_is_logged_not_raised(surface, timers, caplog) -> None:
    def _boom(title, *, body, tag) -> None:
        raise RuntimeError("surface down")

    surface.show = _boom  # type: ignore[method-assign]
    notifier = TaskNotifier(surface, timers)

    notifier.show_task_notification(TASK, "1day")

    assert "Failed to show notification" in caplog.text
    assert timers.handles == []


def test_are_notifications_supported(notifier, surface) -> None:
    assert notifier.are_notifications_supported() is True
    surface.permission_state = NotificationPermission.DENIED
    assert notifier.are_notifications_supported() is False
    surface.permission_state = NotificationPermission.GRANTED
    surface.supported_flag = False
    assert notifier.are_notifications_supported() is False


@pytest.mark.asyncio
async def test_request_permission_prompts_once(notifier, surface) -> None:
    surface.permission_state = NotificationPermission.DEFAULT
    surface.answer = NotificationPermission.GRANTED

    assert await notifier.request_notification_permission() is True
    assert await notifier.request_notification_permission() is True
    assert surface.requests == 1


@pytest.mark.asyncio
async def test_request_permission_denied_or_unsupported(notifier, surface) -> None:
    surface.permission_state = NotificationPermission.DENIED
    assert await notifier.request_notification_permission() is False
    assert surface.requests == 0

    surface.permission_state = NotificationPermission.DEFAULT
    surface.supported_flag = False
    assert await notifier.request_notification_permission() is False
    assert surface.requests == 0

    surface.supported_flag = True
    surface.answer = NotificationPermission.DENIED
    assert await notifier.request_notification_permission() is False
    assert surface.requests == 1
