# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Any, Callable, Optional

from geonotes import configuration
from geonotes.model.export import ImportResult, RestoreResult
from geonotes.model.filter import NoteFilter
from geonotes.model.location import DEFAULT_LOCATION_OPTIONS, Coordinate
from geonotes.model.note import Note
from geonotes.query.filter import filter_notes
from geonotes.repository.backend import YamlFileBackend
from geonotes.repository.note import NoteStore
from geonotes.service import export
from geonotes.service.location import (
    LocationProvider,
    StaticLocationProvider,
    try_get_coordinate,
)
from geonotes.service.notification import YamlNotificationCenter
from geonotes.service.reminder import ReminderScheduler


class GeoNotes:
    """
    Composition of the note store, reminder scheduler and location provider.

    Deleting a note through the store always cancels its reminders.
    """

    def __init__(
        self,
        store: NoteStore,
        scheduler: ReminderScheduler,
        location: LocationProvider,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.location = location
        self.store.on_delete(self.scheduler.cancel_for_note)

    async def current_location(self) -> Optional[Coordinate]:
        return await try_get_coordinate(self.location, DEFAULT_LOCATION_OPTIONS)

    async def search(
        self, note_filter: NoteFilter, use_current_location: bool = True
    ) -> list[Note]:
        criteria = NoteFilter(**note_filter)
        if (
            use_current_location
            and criteria.get("radius_km") is not None
            and criteria.get("center") is None
        ):
            criteria["center"] = await self.current_location()
        return filter_notes(self.store.list_all(), criteria)

    async def enable_notifications(self) -> bool:
        granted = await self.scheduler.enable()
        if granted and self.store.is_empty():
            await self.scheduler.schedule_welcome_reminder()
        return granted

    async def disable_notifications(self) -> None:
        await self.scheduler.disable()

    async def remind_nearby(self) -> bool:
        coordinate = await self.current_location()
        if coordinate is None:
            return False
        return await self.scheduler.schedule_proximity_reminder(
            coordinate["lat"], coordinate["lng"], self.store.list_all()
        )

    async def import_document(self, document: dict[str, Any]) -> ImportResult:
        return await export.import_from_document(document, self.store.add_note)

    async def restore_backup(self, document: dict[str, Any]) -> RestoreResult:
        return await export.restore_from_backup(document, self.store.replace_all)


def build_application(
    config: configuration.Configuration,
    data_path: Path,
    prompt: Callable[[], bool],
    location: Optional[Coordinate] = None,
) -> GeoNotes:
    store = NoteStore(YamlFileBackend(data_path))
    scheduler = ReminderScheduler(
        YamlNotificationCenter(data_path, prompt),
        proximity_radius_km=config["proximity_radius_km"],
        default_delay_minutes=config["reminder_delay_minutes"],
        welcome_delay_seconds=config["welcome_delay_seconds"],
        enabled=config["notifications_enabled"],
    )
    coordinate = location if location is not None else config.get("last_location")
    return GeoNotes(store, scheduler, StaticLocationProvider(coordinate))
