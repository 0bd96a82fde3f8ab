# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from notesync.model.sync_type import SyncType
from notesync.service.sync import SyncResult
from notesync.view.header import header


def sync_report(
    vault_name: str,
    sync_type: SyncType,
    result: SyncResult,
    last_sync_time: str,
) -> None:
    header(vault_name, f"sync ({sync_type.value})")

    table = Table(box=box.SIMPLE)
    table.add_column("step")
    table.add_column("notes", justify="right")

    if sync_type.is_two_way:
        table.add_row("pushed", str(result["pushed"]))
    table.add_row("pulled", str(result["pulled"]))
    if sync_type == SyncType.ONE_WAY_DELETE:
        table.add_row("deleted remotely", str(result["deleted"]))
    if result["links"] is not None:
        table.add_row("links", str(result["links"]))

    console = Console()
    console.print(table)

    for error in result["errors"]:
        console.print(f"[red]{error}[/red]")
    if not result["errors"]:
        console.print(f"[green]Sync successful[/green] [dim]{last_sync_time}[/dim]")
