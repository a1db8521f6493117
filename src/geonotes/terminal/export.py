# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from geonotes.error import FormatError
from geonotes.service import export
from geonotes.terminal.custom_typer import AliasedTyperGroup
from geonotes.terminal.runtime import get_application, run_async

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

OutputOption = Annotated[
    Path,
    typer.Option(
        "--output",
        "-o",
        file_okay=False,
        dir_okay=True,
        help="directory the export file is written to",
    ),
]


def __write(output: Path, file_name: str, content: str) -> None:
    output.mkdir(parents=True, exist_ok=True)
    path = output / file_name
    path.write_text(content, encoding="utf-8")
    Console().print(f"Wrote {path}")


def read_document(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FormatError(f"Unable to read {path}: {e}") from e
    return export.loads_document(text)


@app.command("json, j")
def export_json(output: OutputOption = Path(".")) -> None:
    notes = get_application().store.list_all()
    file_name = export.export_filename("export", "json")
    __write(output, file_name, export.dumps_document(export.to_export_model(notes)))


@app.command("csv, c")
def export_csv(output: OutputOption = Path(".")) -> None:
    notes = get_application().store.list_all()
    file_name = export.export_filename("export", "csv")
    __write(output, file_name, export.serialize_tabular(notes))


@app.command("gpx, g")
def export_gpx(output: OutputOption = Path(".")) -> None:
    notes = get_application().store.list_all()
    file_name = export.export_filename("export", "gpx")
    __write(output, file_name, export.serialize_waypoints(notes))


@app.command("backup, b")
def export_backup(output: OutputOption = Path(".")) -> None:
    notes = get_application().store.list_all()
    file_name = export.export_filename("backup", "json")
    __write(output, file_name, export.dumps_document(export.to_backup_model(notes)))


def import_notes(
    file: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, help="JSON export file")
    ],
) -> None:
    """Add the notes of a JSON export to the current collection."""
    geo_notes = get_application()

    async def _import() -> None:
        result = await geo_notes.import_document(read_document(file))
        Console().print(
            f"Imported {result['imported_count']} of {result['total']} notes"
            f" ({result['skipped_count']} skipped)"
        )

    run_async(_import())


def restore(
    file: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, help="JSON backup file")
    ],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="do not ask for confirmation")
    ] = False,
) -> None:
    """Replace every note with the contents of a backup."""
    if not yes:
        typer.confirm("This replaces all current notes. Continue?", abort=True)
    geo_notes = get_application()

    async def _restore() -> None:
        result = await geo_notes.restore_backup(read_document(file))
        Console().print(f"Restored {result['restored_count']} notes")

    run_async(_restore())
