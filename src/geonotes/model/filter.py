# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import NotRequired, Optional, TypedDict

from geonotes.model.location import Coordinate


class DateRange(StrEnum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class NoteFilter(TypedDict):
    text: NotRequired[Optional[str]]
    date_range: NotRequired[Optional[DateRange]]
    radius_km: NotRequired[Optional[float]]
    center: NotRequired[Optional[Coordinate]]
