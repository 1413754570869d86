# src/todox/connectors/console_notifier.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..core.ports import NotificationPermission

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """
    NotificationSurface that prints reminders to the terminal.

    A terminal cannot un-print a line, so close() only forgets the tag;
    showing a tag that is still open prints a "(updated)" line instead of a new one.
    """

    def __init__(
        self,
        *,
        granted: bool = False,
        prompt: Callable[[str], str] = input,
        write: Callable[[str], None] | None = None,
    ) -> None:
        self._permission = NotificationPermission.GRANTED if granted else NotificationPermission.DEFAULT
        self._prompt = prompt
        self._write = write or (lambda line: print(line, flush=True))
        self._open: dict[str, str] = {}

    @property
    def supported(self) -> bool:
        return True

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    async def request_permission(self) -> NotificationPermission:
        if self._permission != NotificationPermission.DEFAULT:
            return self._permission

        answer = await asyncio.to_thread(self._prompt, "Allow task reminder notifications? [y/N] ")
        granted = (answer or "").strip().lower() in {"y", "yes"}
        self._permission = NotificationPermission.GRANTED if granted else NotificationPermission.DENIED
        return self._permission

    def show(self, title: str, *, body: str, tag: str) -> None:
        marker = " (updated)" if tag in self._open else ""
        self._open[tag] = body
        self._write(f"[{_ts_local()}] [{title}]{marker} {body}")

    def close(self, tag: str) -> None:
        if self._open.pop(tag, None) is not None:
            logger.debug("Console notification dismissed tag=%s", tag)

    def open_tags(self) -> list[str]:
        return list(self._open)
