# src/todox/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, TypeVar, cast

from ..core.state import AppState
from ..reminders.due import format_time_remaining, select_urgent_tasks, task_due_instant, time_until_due
from ..reminders.models import Task, TaskStatus, parse_due_date, parse_due_time

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def on_loop(state: AppState, fn: Callable[..., T], *args: Any) -> T:
    """Run a scheduler call on the reminder loop thread (direct call when there is no loop)."""
    if state.runner is None:
        return fn(*args)
    return state.runner.call(fn, *args)


def _now() -> datetime:
    return datetime.now()


def _parse_when(args: list[str]) -> tuple[Any, str | None, list[str]] | None:
    """Parse "<YYYY-MM-DD> [HH:MM] rest..." -> (date, time, rest). None if the date is bad."""
    if not args:
        return None
    due_date = parse_due_date(args[0])
    if due_date is None:
        return None
    rest = args[1:]
    due_time: str | None = None
    if rest and parse_due_time(rest[0]) is not None:
        due_time, rest = rest[0], rest[1:]
    return due_date, due_time, rest


def _describe(task: Task, now: datetime, count: int) -> str:
    due = task_due_instant(task)
    when = due.strftime("%Y-%m-%d %H:%M") if due else "no due date"
    left = format_time_remaining(time_until_due(task, now)) if due and due > now else ""
    left_str = f", {left} left" if left else ""
    return f"{task.id}: {task.title} [{task.status.value}] due {when}{left_str} (reminders: {count})"


def refresh_urgent(state: AppState, now: datetime | None = None) -> list[Task]:
    """
    Urgent banner: notify every newly urgent task once per session (no reminder label).
    Returns the urgent tasks, closest deadline first.
    """
    now = now or _now()
    window = timedelta(hours=float(getattr(state.settings, "urgent_window_hours", 24.0)))
    urgent = select_urgent_tasks(state.tasks.values(), now, window=window)
    for task in urgent:
        if task.id in state.notified_urgent:
            continue
        on_loop(state, state.scheduler.show_task_notification, task)
        state.notified_urgent.add(task.id)
    return urgent


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    scheduler = state.scheduler
    keys = on_loop(state, scheduler.scheduled_keys)
    enabled = on_loop(state, scheduler.are_notifications_supported)
    return (
        "Status:\n"
        f"  Notifier: {getattr(state.settings, 'notifier', 'console')}\n"
        f"  Notifications: {'ON' if enabled else 'OFF'}\n"
        f"  Tasks: {len(state.tasks)}\n"
        f"  Scheduled reminders: {len(keys)}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <id> <YYYY-MM-DD> [HH:MM] <title...>
    """
    usage = "Usage: /add <id> <YYYY-MM-DD> [HH:MM] <title...>"
    if len(args) < 2:
        return usage
    task_id = args[0]
    parsed = _parse_when(args[1:])
    if parsed is None:
        return usage
    due_date, due_time, rest = parsed

    title = " ".join(rest).strip() or task_id
    task = Task(id=task_id, title=title, due_date=due_date, due_time=due_time)

    old = state.tasks.get(task_id)
    state.tasks[task_id] = task
    if old is None:
        on_loop(state, state.scheduler.schedule_task_reminders, task)
    else:
        state.notified_urgent.discard(task_id)
        on_loop(state, state.scheduler.update_task_reminders, old, task)
    refresh_urgent(state)

    count = on_loop(state, state.scheduler.get_scheduled_reminder_count, task_id)
    return f"Task {task_id} saved; {count} reminder(s) scheduled."


def cmd_due(state: AppState, args: list[str]) -> str:
    """
    /due <id> <YYYY-MM-DD> [HH:MM]   -> move the due date
    /due <id> none                   -> clear it
    """
    usage = "Usage: /due <id> <YYYY-MM-DD> [HH:MM] | /due <id> none"
    if len(args) < 2:
        return usage
    old = state.tasks.get(args[0])
    if old is None:
        return f"No task with id {args[0]}."

    if args[1].lower() == "none":
        new = replace(old, due_date=None, due_time=None)
    else:
        parsed = _parse_when(args[1:])
        if parsed is None:
            return usage
        due_date, due_time, _ = parsed
        new = replace(old, due_date=due_date, due_time=due_time)

    state.tasks[new.id] = new
    state.notified_urgent.discard(new.id)
    on_loop(state, state.scheduler.update_task_reminders, old, new)
    refresh_urgent(state)

    count = on_loop(state, state.scheduler.get_scheduled_reminder_count, new.id)
    return f"Task {new.id} updated; {count} reminder(s) scheduled."


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    old = state.tasks.get(args[0])
    if old is None:
        return f"No task with id {args[0]}."
    new = replace(old, status=TaskStatus.COMPLETE)
    state.tasks[new.id] = new
    on_loop(state, state.scheduler.update_task_reminders, old, new)
    return f"Task {new.id} completed; reminders cancelled."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /cancel <id>"
    on_loop(state, state.scheduler.cancel_task_reminders, args[0])
    return f"Reminders for {args[0]} cancelled."


def cmd_count(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /count <id>"
    count = on_loop(state, state.scheduler.get_scheduled_reminder_count, args[0])
    return f"{args[0]}: {count} reminder(s) scheduled."


def cmd_list(state: AppState, args: list[str]) -> str:
    if not state.tasks:
        return "No tasks."
    now = _now()
    lines = ["Tasks:"]
    for task in state.tasks.values():
        count = on_loop(state, state.scheduler.get_scheduled_reminder_count, task.id)
        lines.append("  " + _describe(task, now, count))
    return "\n".join(lines)


def cmd_urgent(state: AppState, args: list[str]) -> str:
    now = _now()
    urgent = refresh_urgent(state, now)
    if not urgent:
        return "No tasks due soon."
    lines = [f"Reminder: {len(urgent)} task(s) due soon!"]
    for task in urgent[:3]:
        due = task_due_instant(task)
        when = due.strftime("%Y-%m-%d %H:%M") if due else ""
        left = format_time_remaining(time_until_due(task, now))
        high = " [high]" if task.priority == "high" else ""
        lines.append(f"  {task.title}{high} - due {when} ({left} left)")
    if len(urgent) > 3:
        lines.append(f"  ...and {len(urgent) - 3} more")
    return "\n".join(lines)


def cmd_notify(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /notify       -> show status
    /notify on    -> ask for notification permission
    """
    scheduler = state.scheduler
    if not args:
        enabled = on_loop(state, scheduler.are_notifications_supported)
        return f"Notifications are {'ON' if enabled else 'OFF'}. Use /notify on to enable."

    if args[0].lower() not in ("on", "1", "true", "yes"):
        return "Usage: /notify on"

    if emit:
        emit("[NOTIFY] Requesting notification permission...")

    if state.runner is None:
        granted = asyncio.run(scheduler.request_notification_permission())
    else:
        granted = state.runner.run(scheduler.request_notification_permission(), timeout=None)
    return "Notifications enabled." if granted else "Notifications are not permitted."


def cmd_prune(state: AppState, args: list[str]) -> str:
    pruned = on_loop(state, state.scheduler.prune_restored_reminders, list(state.tasks.values()))
    return f"Pruned {pruned} stale restored reminder(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show notifier/permission/reminder totals.")
registry.register("add", cmd_add, help_text="Add or replace a task: /add <id> <YYYY-MM-DD> [HH:MM] <title>.")
registry.register("due", cmd_due, help_text="Move a due date: /due <id> <YYYY-MM-DD> [HH:MM] | none.")
registry.register("done", cmd_done, help_text="Mark a task complete: /done <id>.")
registry.register("cancel", cmd_cancel, help_text="Cancel reminders for a task: /cancel <id>.")
registry.register("count", cmd_count, help_text="Scheduled reminder count: /count <id>.")
registry.register("list", cmd_list, help_text="List tasks with their reminder counts.", aliases=["ls"])
registry.register("urgent", cmd_urgent, help_text="Show tasks due within the urgent window.")
registry.register("notify", cmd_notify, help_text="Enable notifications: /notify on.")
registry.register("prune", cmd_prune, help_text="Drop restored reminders for unknown/finished tasks.")
