# SPDX-License-Identifier: MIT

from copy import deepcopy

from geonotes.model.note import Note


def sort_notes_newest_first(notes: list[Note]) -> list[Note]:
    sorted_notes = deepcopy(notes)
    sorted_notes.sort(key=lambda note: note["timestamp"], reverse=True)
    return sorted_notes
