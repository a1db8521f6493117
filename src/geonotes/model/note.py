# SPDX-License-Identifier: MIT

from typing import Optional, TypeAlias, TypedDict

import pendulum

NoteId: TypeAlias = str


class Note(TypedDict):
    id: NoteId
    text: str
    lat: float
    lng: float
    image_url: Optional[str]
    timestamp: pendulum.DateTime
