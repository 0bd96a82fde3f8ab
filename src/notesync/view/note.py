# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from notesync.model.local_note import LocalNote
from notesync.time import datetime_to_display_local_datetime_str
from notesync.view.header import header


def notes_report(
    vault_name: str,
    report_name: str,
    local_notes: list[LocalNote],
    no_wrap: bool = False,
) -> None:
    header(vault_name, report_name)

    table = Table(box=box.SIMPLE)
    table.add_column("path", no_wrap=no_wrap, overflow="ellipsis")
    table.add_column("modified")
    table.add_column("first_line", no_wrap=no_wrap, overflow="ellipsis")

    for local_note in local_notes:
        first_line = ""
        if local_note["content"].strip() != "":
            first_line = local_note["content"].strip().split("\n")[0].strip()
        table.add_row(
            local_note["path"],
            datetime_to_display_local_datetime_str(local_note["mtime"]),
            first_line,
        )

    console = Console()
    console.print(table)
    console.print(f"[dim]{len(local_notes)} notes[/dim]")
