# SPDX-License-Identifier: MIT

import asyncio
import hashlib
import logging
from copy import deepcopy
from typing import Any, Callable, Optional

import pendulum

from geonotes import time
from geonotes.error import NotificationError
from geonotes.geo import distance_km
from geonotes.model.note import Note, NoteId
from geonotes.model.reminder import (
    NotificationId,
    PermissionAnswer,
    PermissionState,
    ReminderKind,
    ReminderState,
)
from geonotes.service.notification import NotificationCenter

logger = logging.getLogger(__name__)

WELCOME_NOTIFICATION_ID: NotificationId = 1

# Ids below this value are kept for fixed notifications such as the welcome one
RESERVED_NOTIFICATION_IDS = 1000
MAX_NOTIFICATION_ID = 2**31 - 1

DEFAULT_REMINDER_DELAY_MINUTES = 60
DEFAULT_PROXIMITY_RADIUS_KM = 0.1
DEFAULT_WELCOME_DELAY_SECONDS = 2
PROXIMITY_DELIVERY_DELAY_SECONDS = 1
EXCERPT_LENGTH = 50

REMINDER_TITLE = "Geo-Notes Reminder"
WELCOME_TITLE = "Welcome to Geo-Notes!"
WELCOME_BODY = "Start capturing your location-based memories"
PROXIMITY_TITLE = "You're near a memory!"


def notification_id_for(note_id: NoteId, kind: ReminderKind) -> NotificationId:
    """
    Derive a stable notification id for a note and reminder kind.

    The id is the first 8 bytes of SHA-256 over ``"<kind>:<note id>"``,
    reduced into [RESERVED_NOTIFICATION_IDS, MAX_NOTIFICATION_ID). With n
    reminders the chance of any collision is roughly n^2 / 2^32, about 0.02%
    for 1000 notes.
    """
    digest = hashlib.sha256(f"{kind.value}:{note_id}".encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], "big")
    return RESERVED_NOTIFICATION_IDS + value % (
        MAX_NOTIFICATION_ID - RESERVED_NOTIFICATION_IDS
    )


def excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def permission_state_from_answer(answer: PermissionAnswer) -> PermissionState:
    match answer:
        case PermissionAnswer.GRANTED:
            return PermissionState.GRANTED
        case PermissionAnswer.DENIED:
            return PermissionState.DENIED
    return PermissionState.UNREQUESTED


class ReminderScheduler:
    """
    Permission state machine plus time and proximity reminders.

    Permission moves Unrequested -> Requesting -> Granted | Denied. Checking
    never prompts. Scheduling only happens while Granted and enabled and
    reports failure with False instead of raising. Disabling cancels every
    delivery but keeps the permission, so enabling again does not re-prompt
    once Granted.
    """

    def __init__(
        self,
        notifications: NotificationCenter,
        clock: Callable[[], pendulum.DateTime] = time.now_utc,
        proximity_radius_km: float = DEFAULT_PROXIMITY_RADIUS_KM,
        default_delay_minutes: int = DEFAULT_REMINDER_DELAY_MINUTES,
        welcome_delay_seconds: int = DEFAULT_WELCOME_DELAY_SECONDS,
        enabled: bool = True,
    ) -> None:
        self.notifications = notifications
        self.clock = clock
        self.proximity_radius_km = proximity_radius_km
        self.default_delay_minutes = default_delay_minutes
        self.welcome_delay_seconds = welcome_delay_seconds
        self.enabled = enabled
        self.permission = PermissionState.UNREQUESTED
        self._permission_request: Optional[asyncio.Future[PermissionState]] = None
        self._reminders: dict[NotificationId, ReminderState] = {}

    async def check_permission(self) -> PermissionState:
        if self.permission == PermissionState.REQUESTING:
            return self.permission
        try:
            answer = await self.notifications.check_permission()
        except NotificationError as e:
            logger.error("Unable to check notification permission: %s", e)
            return self.permission
        self.permission = permission_state_from_answer(answer)
        return self.permission

    async def request_permission(self) -> PermissionState:
        """
        Prompt for permission unless already granted.

        Concurrent callers share one prompt. The prompt is shielded so a
        caller that gives up does not cancel it and its outcome is still
        recorded.
        """
        if self.permission == PermissionState.GRANTED:
            return self.permission

        if self._permission_request is None:
            self.permission = PermissionState.REQUESTING
            request = asyncio.ensure_future(self.__prompt())
            request.add_done_callback(self.__record_permission)
            self._permission_request = request

        return await asyncio.shield(self._permission_request)

    async def __prompt(self) -> PermissionState:
        try:
            answer = await self.notifications.request_permission()
        except NotificationError as e:
            logger.error("Notification permission request failed: %s", e)
            return PermissionState.UNREQUESTED
        return permission_state_from_answer(answer)

    def __record_permission(self, request: "asyncio.Future[PermissionState]") -> None:
        self._permission_request = None
        if request.cancelled() or request.exception() is not None:
            self.permission = PermissionState.UNREQUESTED
            return
        self.permission = request.result()
        logger.info("notification permission is %s", self.permission)

    async def __can_schedule(self) -> bool:
        if not self.enabled:
            return False
        if self.permission == PermissionState.UNREQUESTED:
            await self.check_permission()
        return self.permission == PermissionState.GRANTED

    async def __schedule(
        self,
        id: NotificationId,
        title: str,
        body: str,
        at: pendulum.DateTime,
        metadata: dict[str, Any],
    ) -> bool:
        try:
            await self.notifications.schedule(id, title, body, at, metadata)
        except NotificationError as e:
            logger.error("Failed to schedule notification %d: %s", id, e)
            return False
        return True

    async def schedule_time_reminder(
        self, note: Note, delay_minutes: Optional[int] = None
    ) -> bool:
        if not await self.__can_schedule():
            logger.warning("Notification permission not granted")
            return False

        if delay_minutes is None:
            delay_minutes = self.default_delay_minutes
        scheduled_at = self.clock().add(minutes=delay_minutes)
        id = notification_id_for(note["id"], ReminderKind.TIME_DELAYED)

        existing = self._reminders.get(id)
        if existing is not None and existing["note_id"] != note["id"]:
            logger.warning(
                "Notification id %d is shared by notes %s and %s",
                id,
                existing["note_id"],
                note["id"],
            )

        scheduled = await self.__schedule(
            id,
            REMINDER_TITLE,
            f'Remember your note: "{excerpt(note["text"])}"',
            scheduled_at,
            {"noteId": note["id"], "lat": note["lat"], "lng": note["lng"]},
        )
        if scheduled:
            self._reminders[id] = {
                "note_id": note["id"],
                "notification_id": id,
                "kind": ReminderKind.TIME_DELAYED,
                "scheduled_at": scheduled_at,
                "delivered": False,
            }
        return scheduled

    async def schedule_welcome_reminder(self) -> bool:
        if not await self.__can_schedule():
            return False
        return await self.__schedule(
            WELCOME_NOTIFICATION_ID,
            WELCOME_TITLE,
            WELCOME_BODY,
            self.clock().add(seconds=self.welcome_delay_seconds),
            {},
        )

    async def schedule_proximity_reminder(
        self,
        user_lat: Optional[float],
        user_lng: Optional[float],
        notes: list[Note],
    ) -> bool:
        """
        One-shot check of the user's position against ``notes``.

        Only the first note within the proximity radius is announced. Returns
        True when a reminder was scheduled. A missing position skips the check.
        """
        if user_lat is None or user_lng is None:
            return False
        if not await self.__can_schedule():
            return False

        nearby_notes = [
            note
            for note in notes
            if distance_km(user_lat, user_lng, note["lat"], note["lng"])
            <= self.proximity_radius_km
        ]
        if len(nearby_notes) == 0:
            return False

        note = nearby_notes[0]
        id = notification_id_for(note["id"], ReminderKind.PROXIMITY)
        scheduled = await self.__schedule(
            id,
            PROXIMITY_TITLE,
            f'Remember: "{excerpt(note["text"])}"',
            self.clock().add(seconds=PROXIMITY_DELIVERY_DELAY_SECONDS),
            {"noteId": note["id"], "lat": note["lat"], "lng": note["lng"]},
        )
        if scheduled:
            # No delivery callback exists, so an immediate delivery is assumed
            self._reminders[id] = {
                "note_id": note["id"],
                "notification_id": id,
                "kind": ReminderKind.PROXIMITY,
                "scheduled_at": None,
                "delivered": True,
            }
        return scheduled

    async def cancel_all(self) -> None:
        try:
            pending = await self.notifications.list_pending()
            for id in pending:
                await self.notifications.cancel(id)
        except NotificationError as e:
            logger.error("Failed to cancel notifications: %s", e)
            return
        self._reminders.clear()

    async def cancel_for_note(self, note_id: NoteId) -> None:
        ids = {notification_id_for(note_id, kind) for kind in ReminderKind}
        try:
            pending = await self.notifications.list_pending()
            for id in pending:
                if id in ids:
                    await self.notifications.cancel(id)
        except NotificationError as e:
            logger.error("Failed to cancel reminders for note %s: %s", note_id, e)
            return
        for id in ids:
            self._reminders.pop(id, None)

    async def enable(self) -> bool:
        self.enabled = True
        if self.permission != PermissionState.GRANTED:
            await self.check_permission()
        if self.permission != PermissionState.GRANTED:
            await self.request_permission()
        return self.permission == PermissionState.GRANTED

    async def disable(self) -> None:
        self.enabled = False
        await self.cancel_all()

    async def reminders(self) -> list[ReminderState]:
        """
        Known reminders, reconciled against the pending deliveries.

        A reminder that is past due and no longer pending is marked delivered.
        One that disappeared before it was due was cancelled elsewhere and is
        forgotten. Delivered reminders are reported once and then dropped.
        """
        try:
            pending = set(await self.notifications.list_pending())
        except NotificationError as e:
            logger.error("Unable to list pending notifications: %s", e)
            return deepcopy(list(self._reminders.values()))

        now = self.clock()
        for id, reminder in list(self._reminders.items()):
            if reminder["delivered"] or id in pending:
                continue
            scheduled_at = reminder["scheduled_at"]
            if scheduled_at is None or scheduled_at <= now:
                reminder["delivered"] = True
            else:
                del self._reminders[id]

        report = deepcopy(list(self._reminders.values()))
        for id in [id for id, r in self._reminders.items() if r["delivered"]]:
            del self._reminders[id]
        return report
