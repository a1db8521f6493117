# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from geonotes.model.reminder import PermissionState
from geonotes.service.notification import PendingNotification
from geonotes.time import datetime_to_display_local_datetime_str


def pending_notifications_report(notifications: list[PendingNotification]) -> None:
    console = Console()
    if len(notifications) == 0:
        console.print("No pending reminders")
        return

    table = Table(box=box.SIMPLE)
    table.add_column("id", justify="right")
    table.add_column("at")
    table.add_column("note")
    table.add_column("title")
    table.add_column("body", overflow="ellipsis")

    for notification in sorted(notifications, key=lambda n: n["at"]):
        note_id = notification["metadata"].get("noteId") or ""
        table.add_row(
            str(notification["id"]),
            datetime_to_display_local_datetime_str(notification["at"]),
            note_id[:8],
            notification["title"],
            notification["body"],
        )

    console.print(table)


def status_report(
    enabled: bool, permission: PermissionState, pending_count: int
) -> None:
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("property")
    table.add_column("value")
    table.add_row("enabled", "yes" if enabled else "no")
    table.add_row("permission", permission.value)
    table.add_row("pending", str(pending_count))
    Console().print(table)
