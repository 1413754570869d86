# src/todox/reminders/due.py

"""
Due-instant helpers.

Every place that needs "when is this task due" goes through resolve_due_instant(),
so reminder fire times, the time-remaining text and the urgent banner agree.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from .models import Task, TaskStatus, parse_due_time

END_OF_DAY = time(23, 59, 59, 999000)


def resolve_due_instant(due_date: date | None, due_time: str | None = None) -> datetime | None:
    """
    Combine a calendar date and an optional "HH:MM" into a naive local datetime.

    - with due_time: date + HH:MM:00
    - without:       date 23:59:59.999
    - missing date or malformed time: None (not schedulable)
    """
    if due_date is None:
        return None
    if not due_time:
        return datetime.combine(due_date, END_OF_DAY)
    parsed = parse_due_time(due_time)
    if parsed is None:
        return None
    hours, minutes = parsed
    return datetime.combine(due_date, time(hours, minutes))


def task_due_instant(task: Task) -> datetime | None:
    return resolve_due_instant(task.due_date, task.due_time)


def time_until_due(task: Task, now: datetime) -> timedelta | None:
    due = task_due_instant(task)
    if due is None:
        return None
    return due - now


def format_time_remaining(delta: timedelta | None) -> str:
    """Short human text for a remaining duration ("3h 20m", "45m", "due now")."""
    if delta is None:
        return ""
    total_minutes = int(delta.total_seconds() // 60)
    if total_minutes <= 0:
        return "due now"
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return "due now"


def select_urgent_tasks(
    tasks: Iterable[Task],
    now: datetime,
    *,
    window: timedelta = timedelta(hours=24),
) -> list[Task]:
    """
    Active tasks due within (now, now + window], closest deadline first.
    """
    urgent: list[tuple[datetime, Task]] = []
    for task in tasks:
        if task.status != TaskStatus.ACTIVE:
            continue
        due = task_due_instant(task)
        if due is None:
            continue
        remaining = due - now
        if timedelta(0) < remaining <= window:
            urgent.append((due, task))
    urgent.sort(key=lambda pair: pair[0])
    return [task for _, task in urgent]
