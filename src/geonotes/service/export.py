# SPDX-License-Identifier: MIT

import csv
import io
import json
import logging
from typing import Any, Awaitable, Callable, Optional, TypeAlias, cast
from xml.sax.saxutils import escape

import pendulum

from geonotes import time
from geonotes.error import FormatError, ValidationError
from geonotes.model.export import (
    BackupDocument,
    BackupNote,
    ExportDocument,
    ExportNote,
    ImportResult,
    RestoreResult,
)
from geonotes.model.note import Note
from geonotes.repository.note import generate_note_id
from geonotes.service.reminder import excerpt
from geonotes.version import __version__

logger = logging.getLogger(__name__)

APP_NAME = "Geo-Notes"
FILE_PREFIX = "geonotes"

TABULAR_HEADERS = [
    "ID",
    "Note Text",
    "Latitude",
    "Longitude",
    "Date",
    "Time",
    "Has Photo",
]

AddNoteFn: TypeAlias = Callable[[str, float, float], Awaitable[Any]]
ReplaceAllFn: TypeAlias = Callable[[list[Note]], Awaitable[None]]


def escape_markup(text: str) -> str:
    return escape(text, {"'": "&apos;", '"': "&quot;"})


def export_filename(
    kind: str, extension: str, today: Optional[pendulum.DateTime] = None
) -> str:
    """Build a name like ``geonotes-export-2024-05-01.json``."""
    day = today if today is not None else time.now_utc()
    return f"{FILE_PREFIX}-{kind}-{day.format('YYYY-MM-DD')}.{extension}"


def _envelope(notes: list[Note], now: pendulum.DateTime) -> dict[str, Any]:
    return {
        "appName": APP_NAME,
        "version": __version__,
        "exportDate": time.datetime_to_iso_str(now),
        "totalNotes": len(notes),
    }


def to_export_model(
    notes: list[Note], now: Optional[pendulum.DateTime] = None
) -> ExportDocument:
    """Export envelope with a projection of each note. Image data is left out."""
    document = _envelope(notes, now if now is not None else time.now_utc())
    document["notes"] = [
        ExportNote(
            id=note["id"],
            text=note["text"],
            lat=note["lat"],
            lng=note["lng"],
            timestamp=time.datetime_to_iso_str(note["timestamp"]),
            hasImage=bool(note["image_url"]),
        )
        for note in notes
    ]
    return cast(ExportDocument, document)


def to_backup_model(
    notes: list[Note], now: Optional[pendulum.DateTime] = None
) -> BackupDocument:
    """Lossless export that keeps image references for restore."""
    document = _envelope(notes, now if now is not None else time.now_utc())
    document["includesImages"] = True
    document["notes"] = [
        BackupNote(
            id=note["id"],
            text=note["text"],
            lat=note["lat"],
            lng=note["lng"],
            imageUrl=note["image_url"],
            timestamp=time.datetime_to_iso_str(note["timestamp"]),
        )
        for note in notes
    ]
    return cast(BackupDocument, document)


def serialize_tabular(notes: list[Note]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(TABULAR_HEADERS)
    for note in notes:
        writer.writerow(
            [
                note["id"],
                note["text"],
                note["lat"],
                note["lng"],
                time.datetime_to_local_date_str(note["timestamp"]),
                time.datetime_to_local_time_str(note["timestamp"]),
                "Yes" if note["image_url"] else "No",
            ]
        )
    return output.getvalue()


def serialize_waypoints(
    notes: list[Note], now: Optional[pendulum.DateTime] = None
) -> str:
    """GPX 1.1 document with one waypoint per note."""
    export_time = now if now is not None else time.now_utc()
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="Geo-Notes App">',
        "  <metadata>",
        "    <name>Geo-Notes Export</name>",
        "    <desc>Exported notes from Geo-Notes application</desc>",
        f"    <time>{time.datetime_to_iso_str(export_time)}</time>",
        "  </metadata>",
    ]
    for note in notes:
        lines += [
            f'  <wpt lat="{note["lat"]}" lon="{note["lng"]}">',
            f"    <time>{time.datetime_to_iso_str(note['timestamp'])}</time>",
            f"    <name>{escape_markup(excerpt(note['text']))}</name>",
            f"    <desc>{escape_markup(note['text'])}</desc>",
            "    <type>note</type>",
            "  </wpt>",
        ]
    lines.append("</gpx>")
    return "\n".join(lines) + "\n"


def dumps_document(document: ExportDocument | BackupDocument) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def loads_document(text: str) -> dict[str, Any]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid file format: {e}") from e
    if not isinstance(document, dict):
        raise FormatError("Invalid file format: expected a JSON object")
    return document


def _document_notes(document: dict[str, Any]) -> list[Any]:
    notes = document.get("notes")
    if not isinstance(notes, list):
        raise FormatError("Invalid file format: 'notes' must be a list")
    return notes


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _record_problem(record: Any) -> Optional[str]:
    if not isinstance(record, dict):
        return "record is not an object"
    text = record.get("text")
    if not isinstance(text, str) or text.strip() == "":
        return "missing text"
    if not _is_number(record.get("lat")) or not _is_number(record.get("lng")):
        return "lat/lng must be numbers"
    return None


async def import_from_document(
    document: dict[str, Any], add_note: AddNoteFn
) -> ImportResult:
    """
    Add every acceptable record through ``add_note``.

    Records without text or with non-numeric coordinates are skipped and
    counted. Only a document without a ``notes`` list fails as a whole.
    """
    records = _document_notes(document)

    imported_count = 0
    skipped_count = 0
    for record in records:
        problem = _record_problem(record)
        if problem is not None:
            logger.warning("Skipping import record: %s", problem)
            skipped_count += 1
            continue
        try:
            await add_note(record["text"], record["lat"], record["lng"])
        except ValidationError as e:
            logger.warning("Failed to import note %s: %s", record.get("id"), e)
            skipped_count += 1
            continue
        imported_count += 1

    return {
        "imported_count": imported_count,
        "skipped_count": skipped_count,
        "total": len(records),
    }


def _note_from_backup_record(record: dict[str, Any], seen_ids: set[str]) -> Note:
    id = record.get("id")
    if not isinstance(id, str) or id == "" or id in seen_ids:
        id = generate_note_id()
    seen_ids.add(id)

    timestamp = time.now_utc()
    raw_timestamp = record.get("timestamp")
    if isinstance(raw_timestamp, str):
        try:
            timestamp = time.datetime_from_str(raw_timestamp)
        except ValueError as e:
            raise FormatError(f"Invalid timestamp '{raw_timestamp}': {e}") from e
        # pendulum also parses dates, times and durations
        if not isinstance(timestamp, pendulum.DateTime):
            raise FormatError(f"Invalid timestamp '{raw_timestamp}': not a datetime")

    image_url = record.get("imageUrl")
    return {
        "id": id,
        "text": record["text"].strip(),
        "lat": float(record["lat"]),
        "lng": float(record["lng"]),
        "image_url": image_url if isinstance(image_url, str) else None,
        "timestamp": timestamp,
    }


async def restore_from_backup(
    document: dict[str, Any], replace_all: ReplaceAllFn
) -> RestoreResult:
    """
    Replace the whole collection with the backup's notes.

    Every record is validated before ``replace_all`` runs, so a bad backup
    changes nothing.
    """
    records = _document_notes(document)

    seen_ids: set[str] = set()
    notes: list[Note] = []
    for index, record in enumerate(records):
        problem = _record_problem(record)
        if problem is not None:
            raise FormatError(f"Invalid backup record {index}: {problem}")
        notes.append(_note_from_backup_record(record, seen_ids))

    await replace_all(notes)
    return {"restored_count": len(notes)}
