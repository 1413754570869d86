"""
Reminder subsystem.

Components:
- models.py: data structures (Task, TaskStatus, ReminderInterval, ReminderKey)
- due.py: due-instant resolution + urgent-task helpers
- timers.py: asyncio-backed TimerPort and the system clock
- store.py: SQLite-backed persisted mirror of scheduled reminder keys
- notifier.py: permission-aware notification display with auto-close
- scheduler.py: ReminderScheduler (registry, schedule/cancel/update/restore)
"""
