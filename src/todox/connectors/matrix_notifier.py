# src/todox/connectors/matrix_notifier.py

from __future__ import annotations

import asyncio
import logging

from nio import AsyncClient, JoinResponse, RoomSendResponse

from ..core.ports import NotificationPermission

logger = logging.getLogger(__name__)


class MatrixNotifier:
    """
    NotificationSurface that posts reminders into one Matrix room.

    - show(): sends an m.notice; if the tag is already posted, the old event is redacted first
    - close(): redacts the event posted for the tag
    - permission: GRANTED once the bot is joined to the room

    show/close are called on the event loop thread; the network calls run as tasks
    and are serialized with a lock so a close never overtakes its show.
    """

    def __init__(self, client: AsyncClient | None, room_id: str) -> None:
        self._client = client
        self._room_id = (room_id or "").strip()
        self._permission = NotificationPermission.DEFAULT
        self._events: dict[str, str] = {}
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def supported(self) -> bool:
        return self._client is not None and bool(self._room_id)

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    async def request_permission(self) -> NotificationPermission:
        client = self._client
        if client is None or not self._room_id:
            return NotificationPermission.DENIED

        resp = await client.join(self._room_id)
        if isinstance(resp, JoinResponse):
            self._permission = NotificationPermission.GRANTED
            logger.info("Matrix notifier joined %s", self._room_id)
        else:
            self._permission = NotificationPermission.DENIED
            logger.warning("Matrix notifier could not join %s: %r", self._room_id, resp)
        return self._permission

    def show(self, title: str, *, body: str, tag: str) -> None:
        self._spawn(self._post(tag, f"{title}: {body}"))

    def close(self, tag: str) -> None:
        self._spawn(self._redact(tag))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, tag: str, text: str) -> None:
        client = self._client
        if client is None:
            return
        async with self._lock:
            previous = self._events.pop(tag, None)
            if previous:
                await self._redact_event(previous)

            try:
                resp = await client.room_send(
                    room_id=self._room_id,
                    message_type="m.room.message",
                    content={"msgtype": "m.notice", "body": text},
                )
            except Exception:
                logger.exception("Failed to post reminder tag=%s to %s", tag, self._room_id)
                return

            if isinstance(resp, RoomSendResponse):
                self._events[tag] = resp.event_id
                logger.info("Reminder posted tag=%s event=%s", tag, resp.event_id)
            else:
                logger.warning("Matrix room_send failed tag=%s: %r", tag, resp)

    async def _redact(self, tag: str) -> None:
        async with self._lock:
            event_id = self._events.pop(tag, None)
            if event_id:
                await self._redact_event(event_id)

    async def _redact_event(self, event_id: str) -> None:
        if self._client is None:
            return
        try:
            await self._client.room_redact(self._room_id, event_id, reason="reminder expired")
        except Exception:
            logger.exception("Failed to redact reminder event %s", event_id)

    async def drain(self) -> None:
        """Wait for in-flight posts/redactions (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
