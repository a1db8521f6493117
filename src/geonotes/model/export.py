# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict


class ExportNote(TypedDict):
    id: str
    text: str
    lat: float
    lng: float
    timestamp: str
    hasImage: bool


class BackupNote(TypedDict):
    id: str
    text: str
    lat: float
    lng: float
    imageUrl: Optional[str]
    timestamp: str


class ExportDocument(TypedDict):
    appName: str
    version: str
    exportDate: str
    totalNotes: int
    notes: list[ExportNote]


class BackupDocument(TypedDict):
    appName: str
    version: str
    exportDate: str
    totalNotes: int
    includesImages: bool
    notes: list[BackupNote]


class ImportResult(TypedDict):
    imported_count: int
    skipped_count: int
    total: int


class RestoreResult(TypedDict):
    restored_count: int
