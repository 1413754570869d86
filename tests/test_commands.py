# tests/test_commands.py

from __future__ import annotations

from datetime import date

from todox.cli.commands import CommandRegistry, refresh_urgent, registry
from todox.core.ports import NotificationPermission
from todox.reminders.models import Task

from .conftest import NOW


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_done_flow(state) -> None:
    out = registry.handle(state, "/add t1 2024-06-01 09:00 Pay rent")
    assert out == "Task t1 saved; 3 reminder(s) scheduled."
    assert state.tasks["t1"].title == "Pay rent"
    assert state.tasks["t1"].due_time == "09:00"

    assert registry.handle(state, "/count t1") == "t1: 3 reminder(s) scheduled."

    assert registry.handle(state, "/done t1") == "Task t1 completed; reminders cancelled."
    assert state.scheduler.get_scheduled_reminder_count("t1") == 0


def test_due_moves_and_clears(state) -> None:
    registry.handle(state, "/add t1 2024-06-01 09:00 Pay rent")

    assert registry.handle(state, "/due t1 2024-06-10") == "Task t1 updated; 4 reminder(s) scheduled."
    assert state.tasks["t1"].due_date == date(2024, 6, 10)
    assert state.tasks["t1"].due_time is None

    assert registry.handle(state, "/due t1 none") == "Task t1 updated; 0 reminder(s) scheduled."
    assert "No task" in (registry.handle(state, "/due zzz 2024-06-10") or "")
    assert (registry.handle(state, "/due t1 someday") or "").startswith("Usage")


def test_cancel_is_safe_twice(state) -> None:
    registry.handle(state, "/add t1 2024-06-10 Plan trip")
    registry.handle(state, "/cancel t1")
    assert registry.handle(state, "/cancel t1") == "Reminders for t1 cancelled."
    assert state.scheduler.get_scheduled_reminder_count("t1") == 0


def test_refresh_urgent_notifies_once_per_task(state, surface) -> None:
    state.tasks["t1"] = Task(id="t1", title="Pay rent", due_date=date(2024, 6, 1), due_time="09:00")
    state.tasks["t2"] = Task(id="t2", title="Later", due_date=date(2024, 6, 9))

    urgent = refresh_urgent(state, NOW)
    refresh_urgent(state, NOW)

    assert [t.id for t in urgent] == ["t1"]
    assert [n.tag for n in surface.shown] == ["task-t1-"]


def test_prune_uses_known_tasks(state, mirror) -> None:
    mirror.records = [
        {"key": "gone-1hour", "taskId": "gone", "reminderType": "1hour"},
    ]
    state.scheduler.restore_reminders_from_storage()
    assert registry.handle(state, "/prune") == "Pruned 1 stale restored reminder(s)."


def test_notify_on_requests_permission(state, surface) -> None:
    surface.permission_state = NotificationPermission.DEFAULT
    emitted: list[str] = []

    assert registry.handle(state, "/notify on", emit=emitted.append) == "Notifications enabled."
    assert surface.requests == 1
    assert emitted
