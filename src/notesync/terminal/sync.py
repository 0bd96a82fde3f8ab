# SPDX-License-Identifier: MIT

import asyncio
from typing import Annotated, Optional

import typer

from notesync.errors import NoteSyncError
from notesync.model.sync_type import SyncType
from notesync.repository.configuration import CONFIGURATION_REPO
from notesync.service.auto_sync import AutoSync
from notesync.terminal.services import console, get_sync_service
from notesync.time import datetime_to_display_local_datetime_str
from notesync.view.sync import sync_report


def sync(
    sync_type: Annotated[
        Optional[SyncType],
        typer.Option(
            "--type",
            "-t",
            help="Override the configured sync type for this run",
        ),
    ] = None,
) -> None:
    """Run one sync between the vault and the remote store."""
    config = CONFIGURATION_REPO.get_config()
    if sync_type is not None:
        config["sync_type"] = sync_type.value
    service = get_sync_service(config)

    ok = asyncio.run(service.sync())

    sync_report(
        service.local_repository.vault.root.name,
        service.sync_type,
        service.last_result,
        datetime_to_display_local_datetime_str(service.last_sync_time),
    )
    if not ok:
        raise typer.Exit(1)


def watch(
    auto_sync: Annotated[
        Optional[bool],
        typer.Option(
            "--auto-sync/--no-auto-sync",
            help="Also sync every sync_interval_minutes (default: sync_on_startup)",
        ),
    ] = None,
    interval: Annotated[
        Optional[float],
        typer.Option("--interval", "-i", help="Minutes between auto syncs"),
    ] = None,
) -> None:
    """Mirror changes in realtime and/or sync periodically until interrupted."""
    config = CONFIGURATION_REPO.get_config()
    if auto_sync is None:
        auto_sync = config["sync_on_startup"]
    sync_type = SyncType(config["sync_type"])
    if not sync_type.is_realtime and not auto_sync:
        console.print(
            f"[yellow]Nothing to watch for sync type {sync_type.value}.[/yellow] "
            "Use --auto-sync or a realtime sync type."
        )
        raise typer.Exit(1)

    service = get_sync_service(config)
    periodic = AutoSync(service, interval or config["sync_interval_minutes"])

    async def run() -> None:
        await service.init_realtime()
        if auto_sync:
            periodic.enable()
        console.print("[green]Watching for changes.[/green] Press Ctrl-C to stop.")
        try:
            await asyncio.Event().wait()
        finally:
            periodic.disable()
            await periodic.wait_for_running_sync()
            await service.stop_realtime()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("Stopped watching.")


def new() -> None:
    """Create an empty note in the remote store and write it to the vault."""
    config = CONFIGURATION_REPO.get_config()
    service = get_sync_service(config)

    async def run() -> str:
        note = await service.remote_repository.create_empty_note()
        await service.local_repository.get_all_notes()
        await service.local_repository.upsert_notes([note])
        local_note = service.local_repository.get_local_note(note["id"])
        return local_note["path"] if local_note is not None else note["id"]

    try:
        path = asyncio.run(run())
    except NoteSyncError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Created note[/green] {path}")
