# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console

from geonotes.repository.configuration import CONFIGURATION_REPO
from geonotes.service.notification import YamlNotificationCenter
from geonotes.terminal.custom_typer import AliasedTyperGroup
from geonotes.terminal.parse import resolve_note_id
from geonotes.terminal.runtime import (
    get_application,
    location_from_options,
    run_async,
)
from geonotes.view.reminder import pending_notifications_report, status_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("enable")
def enable() -> None:
    geo_notes = get_application()
    if not run_async(geo_notes.enable_notifications()):
        Console().print("[yellow]Notification permission was not granted")
        raise typer.Exit(code=1)
    CONFIGURATION_REPO.update_config(notifications_enabled=True)
    Console().print("Reminders enabled")


@app.command("disable")
def disable() -> None:
    geo_notes = get_application()
    run_async(geo_notes.disable_notifications())
    CONFIGURATION_REPO.update_config(notifications_enabled=False)
    Console().print("Reminders disabled, pending reminders cancelled")


@app.command("status, st")
def status() -> None:
    geo_notes = get_application()

    async def _status() -> None:
        permission = await geo_notes.scheduler.check_permission()
        pending = await geo_notes.scheduler.notifications.list_pending()
        status_report(geo_notes.scheduler.enabled, permission, len(pending))

    run_async(_status())


@app.command("schedule, s")
def schedule(
    id: Annotated[str, typer.Argument(help="note id or unique prefix")],
    delay: Annotated[
        Optional[int],
        typer.Option("--delay", "-d", min=0, help="minutes until the reminder"),
    ] = None,
) -> None:
    geo_notes = get_application()
    note = geo_notes.store.get_note_by_id(resolve_note_id(geo_notes.store, id))
    if note is None:
        raise typer.BadParameter(f"No note matches '{id}'")

    scheduled = run_async(geo_notes.scheduler.schedule_time_reminder(note, delay))
    if scheduled:
        Console().print("Reminder scheduled")
    else:
        Console().print(
            "[yellow]Reminder not scheduled, run 'geonotes reminder enable' first"
        )
        raise typer.Exit(code=1)


@app.command("nearby, n")
def nearby(
    lat: Annotated[Optional[float], typer.Option("--lat")] = None,
    lng: Annotated[Optional[float], typer.Option("--lng")] = None,
) -> None:
    """Remind about the first note within reach of the current position."""
    geo_notes = get_application(location_from_options(lat, lng))
    if run_async(geo_notes.remind_nearby()):
        Console().print("Reminder scheduled for a nearby note")
    else:
        Console().print("No nearby note to remind about")


@app.command("cancel, c")
def cancel(
    id: Annotated[
        Optional[str], typer.Argument(help="note id or unique prefix")
    ] = None,
    all: Annotated[bool, typer.Option("--all", "-a")] = False,
) -> None:
    geo_notes = get_application()
    if all:
        run_async(geo_notes.scheduler.cancel_all())
        Console().print("Cancelled all reminders")
        return
    if id is None:
        raise typer.BadParameter("Give a note id or --all")
    note_id = resolve_note_id(geo_notes.store, id)
    run_async(geo_notes.scheduler.cancel_for_note(note_id))
    Console().print(f"Cancelled reminders for note {note_id[:8]}")


@app.command("list, ls")
def list_reminders() -> None:
    geo_notes = get_application()
    notifications = geo_notes.scheduler.notifications
    if isinstance(notifications, YamlNotificationCenter):
        pending_notifications_report(notifications.pending_notifications())
