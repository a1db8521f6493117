# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import Optional, TypeAlias, TypedDict

import pendulum

from geonotes.model.note import NoteId

NotificationId: TypeAlias = int


class PermissionState(StrEnum):
    UNREQUESTED = "unrequested"
    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionAnswer(StrEnum):
    """Permission as reported by a notification collaborator."""

    GRANTED = "granted"
    DENIED = "denied"
    UNSET = "unset"


class ReminderKind(StrEnum):
    TIME_DELAYED = "time-delayed"
    PROXIMITY = "proximity"


class ReminderState(TypedDict):
    note_id: NoteId
    notification_id: NotificationId
    kind: ReminderKind
    scheduled_at: Optional[pendulum.DateTime]
    delivered: bool
