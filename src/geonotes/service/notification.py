# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypedDict

import pendulum
from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from geonotes import time
from geonotes.error import NotificationError
from geonotes.model.reminder import NotificationId, PermissionAnswer

logger = logging.getLogger(__name__)


class PendingNotification(TypedDict):
    id: NotificationId
    title: str
    body: str
    at: pendulum.DateTime
    metadata: dict[str, Any]


class NotificationCenter(Protocol):
    """Platform delivery mechanism for local notifications."""

    async def schedule(
        self,
        id: NotificationId,
        title: str,
        body: str,
        at: pendulum.DateTime,
        metadata: dict[str, Any],
    ) -> None: ...

    async def cancel(self, id: NotificationId) -> None: ...

    async def list_pending(self) -> list[NotificationId]: ...

    async def check_permission(self) -> PermissionAnswer: ...

    async def request_permission(self) -> PermissionAnswer: ...


class YamlNotificationCenter:
    """
    Notification center backed by a YAML file in the data directory.

    Notifications whose delivery time has passed are moved from the pending
    list to the delivered list whenever the file is read. The permission
    prompt is delegated to ``prompt``, which returns True when the user
    allows notifications.
    """

    def __init__(
        self,
        data_path: Path,
        prompt: Callable[[], bool],
        clock: Callable[[], pendulum.DateTime] = time.now_utc,
    ) -> None:
        self.path = data_path / "notifications.yaml"
        self.prompt = prompt
        self.clock = clock

    def __load_data(self) -> dict[str, Any]:
        data: Optional[dict[str, Any]] = None
        if self.path.is_file():
            try:
                data = load(self.path.read_text(encoding="utf-8"), Loader=Loader)
            except (OSError, YAMLError) as e:
                raise NotificationError(f"Unable to read {self.path}: {e}") from e
        if data is None:
            data = {}
        data.setdefault("permission", PermissionAnswer.UNSET.value)
        data.setdefault("pending", [])
        data.setdefault("delivered", [])

        now = self.clock()
        pending = []
        for notification in data["pending"]:
            if time.datetime_from_str(notification["at"]) <= now:
                data["delivered"].append(notification)
            else:
                pending.append(notification)
        data["pending"] = pending
        return data

    def __save_data(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                dump(data, Dumper=Dumper, allow_unicode=True), encoding="utf-8"
            )
        except OSError as e:
            raise NotificationError(f"Unable to write {self.path}: {e}") from e

    async def schedule(
        self,
        id: NotificationId,
        title: str,
        body: str,
        at: pendulum.DateTime,
        metadata: dict[str, Any],
    ) -> None:
        data = self.__load_data()
        # Scheduling an id that is already pending replaces it
        data["pending"] = [n for n in data["pending"] if n["id"] != id]
        data["pending"].append(
            {
                "id": id,
                "title": title,
                "body": body,
                "at": time.datetime_to_iso_str(at),
                "metadata": metadata,
            }
        )
        self.__save_data(data)
        logger.debug("scheduled notification %d at %s", id, at)

    async def cancel(self, id: NotificationId) -> None:
        data = self.__load_data()
        data["pending"] = [n for n in data["pending"] if n["id"] != id]
        self.__save_data(data)

    async def list_pending(self) -> list[NotificationId]:
        data = self.__load_data()
        self.__save_data(data)
        return [n["id"] for n in data["pending"]]

    async def check_permission(self) -> PermissionAnswer:
        return PermissionAnswer(self.__load_data()["permission"])

    async def request_permission(self) -> PermissionAnswer:
        answer = PermissionAnswer.GRANTED if self.prompt() else PermissionAnswer.DENIED
        data = self.__load_data()
        data["permission"] = answer.value
        self.__save_data(data)
        return answer

    def pending_notifications(self) -> list[PendingNotification]:
        return [
            {
                "id": n["id"],
                "title": n["title"],
                "body": n["body"],
                "at": time.datetime_from_str(n["at"]),
                "metadata": n.get("metadata") or {},
            }
            for n in self.__load_data()["pending"]
        ]
