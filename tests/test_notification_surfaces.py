# tests/test_notification_surfaces.py

from __future__ import annotations

import pytest
from nio import JoinError, JoinResponse, RoomSendResponse

from todox.connectors.console_notifier import ConsoleNotifier
from todox.connectors.matrix_notifier import MatrixNotifier
from todox.core.ports import NotificationPermission


@pytest.mark.asyncio
async def test_console_notifier_prompts_and_prints() -> None:
    lines: list[str] = []
    prompts: list[str] = []

    def prompt(text: str) -> str:
        prompts.append(text)
        return "y"

    surface = ConsoleNotifier(prompt=prompt, write=lines.append)
    assert surface.permission == NotificationPermission.DEFAULT

    assert await surface.request_permission() == NotificationPermission.GRANTED
    assert await surface.request_permission() == NotificationPermission.GRANTED
    assert len(prompts) == 1

    surface.show("Task Reminder", body="Task due soon (1hour): Pay rent", tag="task-t1-1hour")
    surface.show("Task Reminder", body="Task due soon (1hour): Pay rent", tag="task-t1-1hour")
    assert "(updated)" not in lines[0]
    assert "(updated)" in lines[1]
    assert surface.open_tags() == ["task-t1-1hour"]

    surface.close("task-t1-1hour")
    assert surface.open_tags() == []


@pytest.mark.asyncio
async def test_console_notifier_denied() -> None:
    surface = ConsoleNotifier(prompt=lambda _: "", write=lambda _: None)
    assert await surface.request_permission() == NotificationPermission.DENIED


class FakeMatrixClient:
    def __init__(self, *, join_ok: bool = True) -> None:
        self.join_ok = join_ok
        self.sent: list[dict] = []
        self.redacted: list[str] = []
        self._n = 0

    async def join(self, room_id: str):
        if self.join_ok:
            return JoinResponse(room_id)
        return JoinError("forbidden")

    async def room_send(self, room_id: str, message_type: str, content: dict):
        self._n += 1
        self.sent.append(content)
        return RoomSendResponse(f"$ev{self._n}", room_id)

    async def room_redact(self, room_id: str, event_id: str, reason: str | None = None):
        self.redacted.append(event_id)


@pytest.mark.asyncio
async def test_matrix_notifier_replaces_and_redacts_by_tag() -> None:
    client = FakeMatrixClient()
    surface = MatrixNotifier(client, "!room:example.org")  # type: ignore[arg-type]

    assert surface.supported
    assert await surface.request_permission() == NotificationPermission.GRANTED

    surface.show("Task Reminder", body="Task due soon (30min): Pay rent", tag="task-t1-30min")
    await surface.drain()
    surface.show("Task Reminder", body="Task due soon (30min): Pay rent", tag="task-t1-30min")
    await surface.drain()

    assert [c["body"] for c in client.sent] == ["Task Reminder: Task due soon (30min): Pay rent"] * 2
    assert client.sent[0]["msgtype"] == "m.notice"
    assert client.redacted == ["$ev1"]

    surface.close("task-t1-30min")
    await surface.drain()
    assert client.redacted == ["$ev1", "$ev2"]


@pytest.mark.asyncio
async def test_matrix_notifier_unsupported_or_denied() -> None:
    assert not MatrixNotifier(None, "!room:example.org").supported
    assert not MatrixNotifier(FakeMatrixClient(), "").supported  # type: ignore[arg-type]

    surface = MatrixNotifier(FakeMatrixClient(join_ok=False), "!room:example.org")  # type: ignore[arg-type]
    assert await surface.request_permission() == NotificationPermission.DENIED


@pytest.mark.asyncio
async def test_matrix_notifier_without_client_is_inert() -> None:
    surface = MatrixNotifier(None, "!room:example.org")

    assert await surface.request_permission() == NotificationPermission.DENIED
    surface.show("Task Reminder", body="Task due soon: Pay rent", tag="task-t1-")
    surface.close("task-t1-")
    await surface.drain()
