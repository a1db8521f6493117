# SPDX-License-Identifier: MIT

import logging
from typing import Annotated

import typer

from geonotes.log_config import configure_logging
from geonotes.terminal import configuration, export, note, reminder
from geonotes.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="Geo-Notes - notes pinned to places",
    no_args_is_help=True,
)
app.add_typer(note.app, name="note, n", help="create, find and delete notes")
app.add_typer(reminder.app, name="reminder, r", help="time and nearby reminders")
app.add_typer(export.app, name="export, x", help="write JSON, CSV, GPX or backup")
app.add_typer(configuration.app, name="config, c", help="show or change settings")
app.command(name="import, i")(export.import_notes)
app.command(name="restore")(export.restore)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Geo-Notes - notes pinned to places

    Global options that apply to all commands.
    """
    if verbose:
        configure_logging(logging.DEBUG)


def run() -> None:
    app()
