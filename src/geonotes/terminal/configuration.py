# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from geonotes import configuration
from geonotes.repository.configuration import CONFIGURATION_REPO
from geonotes.terminal.custom_typer import AliasedTyperGroup
from geonotes.terminal.runtime import location_from_options

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("show, s")
def show() -> None:
    config = CONFIGURATION_REPO.get_config()

    table = Table(box=box.SIMPLE)
    table.add_column("key")
    table.add_column("value")
    table.add_row("config file", str(configuration.APP_CONFIG_PATH))
    table.add_row("data path", str(configuration.DATA_PATH))
    for key, value in config.items():
        table.add_row(key, "" if value is None else str(value))

    Console().print(table)


@app.command("set")
def set_config(
    reminder_delay: Annotated[
        Optional[int],
        typer.Option("--reminder-delay", min=0, help="default reminder delay, minutes"),
    ] = None,
    proximity_radius: Annotated[
        Optional[float],
        typer.Option("--proximity-radius", min=0, help="nearby reminder radius, km"),
    ] = None,
    search_radius: Annotated[
        Optional[float],
        typer.Option("--search-radius", min=0, help="default 'note near' radius, km"),
    ] = None,
    welcome_delay: Annotated[
        Optional[int],
        typer.Option("--welcome-delay", min=0, help="welcome reminder delay, seconds"),
    ] = None,
    data_path: Annotated[
        Optional[str], typer.Option("--data-path", help="directory for note data")
    ] = None,
    remove_data_path: Annotated[bool, typer.Option("--remove-data-path")] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
    lat: Annotated[
        Optional[float], typer.Option("--lat", help="last known latitude")
    ] = None,
    lng: Annotated[
        Optional[float], typer.Option("--lng", help="last known longitude")
    ] = None,
    remove_location: Annotated[bool, typer.Option("--remove-location")] = False,
) -> None:
    if log_level is not None and log_level.upper() not in (
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
    ):
        raise typer.BadParameter(f"Unknown log level '{log_level}'")

    CONFIGURATION_REPO.update_config(
        data_path=data_path,
        remove_data_path=remove_data_path,
        reminder_delay_minutes=reminder_delay,
        proximity_radius_km=proximity_radius,
        welcome_delay_seconds=welcome_delay,
        default_search_radius_km=search_radius,
        log_level=log_level,
        last_location=location_from_options(lat, lng),
        remove_last_location=remove_location,
    )
    Console().print("Configuration updated")
