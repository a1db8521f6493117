# SPDX-License-Identifier: MIT

from enum import StrEnum


class GeoNotesError(Exception):
    pass


class ValidationError(GeoNotesError):
    """Raised when a note candidate fails validation (for example empty text)."""


class FormatError(GeoNotesError):
    """Raised when an export or backup document is structurally invalid."""


class NotificationError(GeoNotesError):
    """Raised by a notification collaborator when a delivery operation fails."""


class LocationErrorCode(StrEnum):
    PERMISSION_DENIED = "permission-denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"


class LocationError(GeoNotesError):
    def __init__(self, code: LocationErrorCode, message: str = "") -> None:
        self.code = code
        super().__init__(message or f"location {code}")
