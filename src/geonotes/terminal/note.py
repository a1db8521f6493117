# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console

from geonotes.error import LocationError
from geonotes.model.filter import DateRange, NoteFilter
from geonotes.model.location import DEFAULT_LOCATION_OPTIONS
from geonotes.query.sort import sort_notes_newest_first
from geonotes.repository.configuration import CONFIGURATION_REPO
from geonotes.terminal.custom_typer import AliasedTyperGroup
from geonotes.terminal.parse import resolve_note_id
from geonotes.terminal.runtime import (
    get_application,
    location_from_options,
    run_async,
)
from geonotes.view.note import notes_report, short_id, single_note_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

LatOption = Annotated[
    Optional[float], typer.Option("--lat", help="latitude in degrees")
]
LngOption = Annotated[
    Optional[float], typer.Option("--lng", help="longitude in degrees")
]


@app.command("add, a")
def add(
    text: Annotated[str, typer.Argument(help="note text, up to 500 characters")],
    lat: LatOption = None,
    lng: LngOption = None,
    image: Annotated[
        Optional[str],
        typer.Option("--image", "-i", help="path or data URI of an attached photo"),
    ] = None,
) -> None:
    if len(text.strip()) > 500:
        raise typer.BadParameter("Note text is limited to 500 characters")

    location = location_from_options(lat, lng)
    geo_notes = get_application(location)

    async def _add() -> None:
        coordinate = await geo_notes.location.get_current_coordinate(
            DEFAULT_LOCATION_OPTIONS
        )
        note = await geo_notes.store.add_note(
            text, coordinate["lat"], coordinate["lng"], image
        )
        Console().print(f"Added note {short_id(note)}")

    run_async(_add())

    if location is not None:
        CONFIGURATION_REPO.update_config(last_location=location)


@app.command("list, ls")
def list_notes(
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="case-insensitive text match"),
    ] = None,
    date: Annotated[
        DateRange, typer.Option("--date", "-d", help="creation date range")
    ] = DateRange.ALL,
    radius: Annotated[
        Optional[float],
        typer.Option("--radius", "-r", help="only notes within this many km"),
    ] = None,
    lat: LatOption = None,
    lng: LngOption = None,
) -> None:
    location = location_from_options(lat, lng)
    geo_notes = get_application(location)

    async def _list() -> None:
        center = await geo_notes.current_location() if radius is not None else None
        if radius is not None and center is None:
            Console().print(
                "[yellow]Location needed for distance filter, ignoring --radius"
                "[/yellow]"
            )
        note_filter: NoteFilter = {
            "text": search,
            "date_range": date,
            "radius_km": radius,
            "center": center,
        }
        notes = await geo_notes.search(note_filter, use_current_location=False)
        notes_report("notes", sort_notes_newest_first(notes), center)

    run_async(_list())


@app.command("near")
def near(
    lat: LatOption = None,
    lng: LngOption = None,
    radius: Annotated[
        Optional[float],
        typer.Option("--radius", "-r", help="search radius in km"),
    ] = None,
) -> None:
    location = location_from_options(lat, lng)
    geo_notes = get_application(location)
    radius_km = (
        radius
        if radius is not None
        else CONFIGURATION_REPO.get_config()["default_search_radius_km"]
    )

    async def _near() -> None:
        try:
            center = await geo_notes.location.get_current_coordinate(
                DEFAULT_LOCATION_OPTIONS
            )
        except LocationError as e:
            raise typer.BadParameter(str(e))
        notes = geo_notes.store.get_notes_within_radius(
            center["lat"], center["lng"], radius_km
        )
        notes_report(
            f"notes within {radius_km:g} km", sort_notes_newest_first(notes), center
        )

    run_async(_near())


@app.command("show, s")
def show(id: Annotated[str, typer.Argument(help="note id or unique prefix")]) -> None:
    geo_notes = get_application()
    note_id = resolve_note_id(geo_notes.store, id)
    note = geo_notes.store.get_note_by_id(note_id)
    if note is not None:
        single_note_report(note)


@app.command("delete, rm")
def delete(
    id: Annotated[str, typer.Argument(help="note id or unique prefix")],
) -> None:
    geo_notes = get_application()
    note_id = resolve_note_id(geo_notes.store, id)
    run_async(geo_notes.store.delete_note(note_id))
    Console().print(f"Deleted note {note_id[:8]}")
