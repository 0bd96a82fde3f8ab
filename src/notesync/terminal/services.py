# SPDX-License-Identifier: MIT

from pathlib import Path

import pendulum
import typer
from rich.console import Console

from notesync import configuration
from notesync.backend.supabase import SupabaseBackend
from notesync.repository.configuration import CONFIGURATION_REPO
from notesync.repository.local_note import LocalNoteRepository
from notesync.repository.remote_note import RemoteNoteRepository
from notesync.repository.vault import Vault
from notesync.service.sync import SyncService

console = Console()


def get_vault(config: configuration.Configuration) -> Vault:
    return Vault(Path(config["vault_path"] or Path.cwd()))


def get_backend(config: configuration.Configuration) -> SupabaseBackend:
    url = config["supabase_url"]
    key = config["supabase_key"]
    if not url or not key:
        console.print(
            "[red]No remote store configured.[/red] "
            "Use: notesync config set --supabase-url <url> --supabase-key <key>"
        )
        raise typer.Exit(1)
    return SupabaseBackend(url, key, config["email"], config["password"])


def save_last_sync_time(last_sync_time: pendulum.DateTime) -> None:
    CONFIGURATION_REPO.set_last_sync_time(last_sync_time)
    CONFIGURATION_REPO.flush()


def notify(message: str) -> None:
    console.print(f"[yellow]{message}[/yellow]")


def get_sync_service(config: configuration.Configuration) -> SyncService:
    vault = get_vault(config)
    return SyncService(
        LocalNoteRepository(vault, config),
        RemoteNoteRepository(get_backend(config), config),
        config,
        on_last_sync_time=save_last_sync_time,
        notify=notify,
    )
