# SPDX-License-Identifier: MIT

import asyncio
from typing import Any, Optional

import pendulum
import pytest

from geonotes.error import NotificationError
from geonotes.model.reminder import NotificationId, PermissionAnswer
from geonotes.repository.backend import MemoryBackend
from geonotes.repository.note import NoteStore


class FakeNotificationCenter:
    """In-memory notification center with scripted permission answers."""

    def __init__(
        self,
        permission: PermissionAnswer = PermissionAnswer.UNSET,
        request_answer: PermissionAnswer = PermissionAnswer.GRANTED,
    ) -> None:
        self.permission = permission
        self.request_answer = request_answer
        self.pending: dict[NotificationId, dict[str, Any]] = {}
        self.request_count = 0
        self.release: Optional[asyncio.Event] = None
        self.fail = False

    async def schedule(
        self,
        id: NotificationId,
        title: str,
        body: str,
        at: pendulum.DateTime,
        metadata: dict[str, Any],
    ) -> None:
        if self.fail:
            raise NotificationError("delivery backend unavailable")
        self.pending[id] = {
            "title": title,
            "body": body,
            "at": at,
            "metadata": metadata,
        }

    async def cancel(self, id: NotificationId) -> None:
        self.pending.pop(id, None)

    async def list_pending(self) -> list[NotificationId]:
        return list(self.pending.keys())

    async def check_permission(self) -> PermissionAnswer:
        return self.permission

    async def request_permission(self) -> PermissionAnswer:
        self.request_count += 1
        if self.release is not None:
            await self.release.wait()
        self.permission = self.request_answer
        return self.request_answer


class FailingBackend(MemoryBackend):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def save(self, key: str, value: Any) -> None:
        if self.fail:
            raise OSError("disk full")
        super().save(key, value)


class Clock:
    def __init__(self, now: pendulum.DateTime) -> None:
        self.now = now

    def __call__(self) -> pendulum.DateTime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now.add(**kwargs)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> NoteStore:
    return NoteStore(backend)


@pytest.fixture
def granted_center() -> FakeNotificationCenter:
    return FakeNotificationCenter(permission=PermissionAnswer.GRANTED)


@pytest.fixture
def clock() -> Clock:
    return Clock(pendulum.datetime(2024, 5, 1, 12, 0, 0, tz="UTC"))
