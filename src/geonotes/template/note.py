# SPDX-License-Identifier: MIT

from geonotes.model.note import Note
from geonotes.time import now_utc


def get_note_template() -> Note:
    return {
        "id": "",
        "text": "",
        "lat": 0.0,
        "lng": 0.0,
        "image_url": None,
        "timestamp": now_utc(),
    }
