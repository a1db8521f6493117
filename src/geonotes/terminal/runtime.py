# SPDX-License-Identifier: MIT

import asyncio
from typing import Any, Coroutine, Optional, TypeVar

import typer
from rich.console import Console

from geonotes import configuration
from geonotes.application import GeoNotes, build_application
from geonotes.error import GeoNotesError
from geonotes.model.location import Coordinate
from geonotes.repository.configuration import CONFIGURATION_REPO

T = TypeVar("T")

error_console = Console(stderr=True)


def confirm_notifications() -> bool:
    return typer.confirm("Allow geonotes to schedule reminders?", default=True)


def location_from_options(
    lat: Optional[float], lng: Optional[float]
) -> Optional[Coordinate]:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise typer.BadParameter("--lat and --lng must be given together")
    if not -90 <= lat <= 90:
        raise typer.BadParameter(f"Latitude must be between -90 and 90, got {lat}")
    if not -180 <= lng <= 180:
        raise typer.BadParameter(f"Longitude must be between -180 and 180, got {lng}")
    return {"lat": lat, "lng": lng}


def get_application(location: Optional[Coordinate] = None) -> GeoNotes:
    return build_application(
        CONFIGURATION_REPO.get_config(),
        configuration.DATA_PATH,
        confirm_notifications,
        location,
    )


def run_async(coroutine: Coroutine[Any, Any, T]) -> T:
    """Run a core coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coroutine)
    except GeoNotesError as e:
        error_console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1)
