# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from geonotes.geo import distance_km
from geonotes.model.location import Coordinate
from geonotes.model.note import Note
from geonotes.time import datetime_to_display_local_datetime_str

SHORT_ID_LENGTH = 8


def short_id(note: Note) -> str:
    return note["id"][:SHORT_ID_LENGTH]


def first_line(text: str) -> str:
    return text.split("\n")[0].strip()


def notes_report(
    report_name: str,
    notes: list[Note],
    center: Optional[Coordinate] = None,
) -> None:
    console = Console()
    console.print(f"[bold]{report_name}[/bold] ({len(notes)})")

    notes_table = Table(box=box.SIMPLE)
    notes_table.add_column("id")
    notes_table.add_column("timestamp")
    notes_table.add_column("location")
    if center is not None:
        notes_table.add_column("distance", justify="right")
    notes_table.add_column("photo")
    notes_table.add_column("text", overflow="ellipsis")

    for note in notes:
        row = [
            short_id(note),
            datetime_to_display_local_datetime_str(note["timestamp"]),
            f"{note['lat']:.5f}, {note['lng']:.5f}",
        ]
        if center is not None:
            distance = distance_km(
                center["lat"], center["lng"], note["lat"], note["lng"]
            )
            row.append(f"{distance:.2f} km")
        row.append("yes" if note["image_url"] else "")
        row.append(first_line(note["text"]))
        notes_table.add_row(*row)

    console.print(notes_table)


def single_note_report(note: Note) -> None:
    note_table = Table(box=box.SIMPLE)
    note_table.add_column("property")
    note_table.add_column("value")

    note_table.add_row("id", note["id"])
    note_table.add_row(
        "timestamp", datetime_to_display_local_datetime_str(note["timestamp"])
    )
    note_table.add_row("lat", str(note["lat"]))
    note_table.add_row("lng", str(note["lng"]))
    note_table.add_row("image", note["image_url"] or "")

    console = Console()
    console.print(note_table)
    console.print(Panel(note["text"], title="Note Text", border_style="blue"))
