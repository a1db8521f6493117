# SPDX-License-Identifier: MIT

import asyncio
import logging
import uuid
from copy import deepcopy
from typing import Any, Awaitable, Callable, Optional, TypeAlias

from geonotes import time
from geonotes.error import ValidationError
from geonotes.geo import distance_km
from geonotes.model.note import Note, NoteId
from geonotes.repository.backend import StorageBackend
from geonotes.template.note import get_note_template

logger = logging.getLogger(__name__)

NOTES_KEY = "geo-notes"

DeleteHook: TypeAlias = Callable[[NoteId], Awaitable[None]]


def generate_note_id() -> NoteId:
    return str(uuid.uuid4())


class NoteStore:
    """
    Owns the note collection.

    The in-memory list is the source of truth. Mutations run under one lock:
    build a new list, persist it, then swap it in. A failed save leaves the
    previous list in place. The lock is recreated for each event loop, so one
    store can be driven by successive asyncio.run calls.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend
        self._notes: Optional[list[Note]] = None
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._delete_hooks: list[DeleteHook] = []

    @property
    def lock(self) -> asyncio.Lock:
        # An asyncio.Lock binds to the loop it first waits on
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    @property
    def notes(self) -> list[Note]:
        if self._notes is None:
            self.__load_data()
        if self._notes is None:
            raise ValueError()
        return self._notes

    def __load_data(self) -> None:
        raw_notes = self.backend.load(NOTES_KEY)
        if raw_notes is None:
            raw_notes = []
        self._notes = [
            self.__convert_note_for_deserialization(note) for note in raw_notes
        ]

    def __save_data(self, notes: list[Note]) -> None:
        serializable_notes = [
            self.__convert_note_for_serialization(note) for note in notes
        ]
        self.backend.save(NOTES_KEY, serializable_notes)
        logger.debug("persisted %d notes", len(notes))

    def __convert_note_for_serialization(self, note: Note) -> dict[str, Any]:
        return {
            "id": note["id"],
            "text": note["text"],
            "lat": note["lat"],
            "lng": note["lng"],
            "imageUrl": note["image_url"],
            "timestamp": time.datetime_to_iso_str(note["timestamp"]),
        }

    def __convert_note_for_deserialization(self, note: dict[str, Any]) -> Note:
        return {
            "id": note["id"],
            "text": note["text"],
            "lat": float(note["lat"]),
            "lng": float(note["lng"]),
            "image_url": note.get("imageUrl"),
            "timestamp": time.datetime_from_str(note["timestamp"]),
        }

    def on_delete(self, hook: DeleteHook) -> None:
        """Register a coroutine called with the id of every removed note."""
        self._delete_hooks.append(hook)

    async def __fire_delete_hooks(self, ids: list[NoteId]) -> None:
        for id in ids:
            for hook in self._delete_hooks:
                await hook(id)

    async def add_note(
        self,
        text: str,
        lat: float,
        lng: float,
        image_url: Optional[str] = None,
    ) -> Note:
        trimmed_text = text.strip() if isinstance(text, str) else ""
        if trimmed_text == "":
            raise ValidationError("Note text cannot be empty")

        note = get_note_template()
        note["id"] = generate_note_id()
        note["text"] = trimmed_text
        note["lat"] = lat
        note["lng"] = lng
        note["image_url"] = image_url
        note["timestamp"] = time.now_utc()

        async with self.lock:
            existing_ids = {existing["id"] for existing in self.notes}
            while note["id"] in existing_ids:
                note["id"] = generate_note_id()

            updated_notes = self.notes + [note]
            self.__save_data(updated_notes)
            self._notes = updated_notes

        logger.debug("added note %s", note["id"])
        return deepcopy(note)

    async def delete_note(self, id: NoteId) -> None:
        async with self.lock:
            updated_notes = [note for note in self.notes if note["id"] != id]
            if len(updated_notes) == len(self.notes):
                return
            self.__save_data(updated_notes)
            self._notes = updated_notes
            await self.__fire_delete_hooks([id])

        logger.debug("deleted note %s", id)

    async def replace_all(self, notes: list[Note]) -> None:
        """Replace the whole collection. Hooks fire for every id that disappears."""
        replacement = deepcopy(notes)
        replacement_ids = {note["id"] for note in replacement}
        if len(replacement_ids) != len(replacement):
            raise ValidationError("Replacement notes contain duplicate ids")

        async with self.lock:
            removed_ids = [
                note["id"] for note in self.notes if note["id"] not in replacement_ids
            ]
            self.__save_data(replacement)
            self._notes = replacement
            await self.__fire_delete_hooks(removed_ids)

        logger.debug("replaced collection with %d notes", len(replacement))

    def get_note_by_id(self, id: NoteId) -> Optional[Note]:
        for note in self.notes:
            if note["id"] == id:
                return deepcopy(note)
        return None

    def get_notes_within_radius(
        self, center_lat: float, center_lng: float, radius_km: float
    ) -> list[Note]:
        return [
            deepcopy(note)
            for note in self.notes
            if distance_km(center_lat, center_lng, note["lat"], note["lng"])
            <= radius_km
        ]

    def list_all(self) -> list[Note]:
        return deepcopy(self.notes)

    def find_ids_by_prefix(self, prefix: str) -> list[NoteId]:
        return [note["id"] for note in self.notes if note["id"].startswith(prefix)]

    def is_empty(self) -> bool:
        return len(self.notes) == 0
