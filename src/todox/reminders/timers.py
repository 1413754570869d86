# src/todox/reminders/timers.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

logger = logging.getLogger(__name__)


class SystemClock:
    """Local wall clock (naive datetimes, same frame as resolved due instants)."""

    def now(self) -> datetime:
        return datetime.now()


class AsyncioTimers:
    """
    TimerPort on top of an asyncio event loop.

    Callbacks run on the loop thread, one at a time; cancelling the returned handle
    before the deadline guarantees the callback never runs.
    Must be used from the loop thread (the reminder loop or a coroutine on it).

    Callbacks run inline on the loop: the scheduler's fire callback writes the
    SQLite mirror synchronously, so a slow disk delays other callbacks.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def after(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        def _run() -> None:
            try:
                callback()
            except Exception:
                logger.exception("Timer callback failed")

        return self._get_loop().call_later(max(0.0, float(delay_seconds)), _run)
