# SPDX-License-Identifier: MIT

import asyncio
from typing import Annotated

import typer

from notesync.errors import NoteSyncError
from notesync.repository.configuration import CONFIGURATION_REPO
from notesync.service import account
from notesync.terminal.services import console, get_backend


def login(
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
    password: Annotated[
        str, typer.Option("--password", "-p", prompt=True, hide_input=True)
    ],
) -> None:
    """Sign in to the remote store and remember the account."""
    config = CONFIGURATION_REPO.get_config()
    backend = get_backend(config)

    try:
        settings = asyncio.run(account.login(backend, email, password))
    except NoteSyncError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    CONFIGURATION_REPO.update_config(**settings)
    console.print(f"[green]Logged in as {settings['email']}[/green]")


def logout() -> None:
    """Forget the stored account."""
    config = CONFIGURATION_REPO.get_config()
    backend = None
    if config["supabase_url"] and config["supabase_key"]:
        backend = get_backend(config)

    keys = asyncio.run(account.logout(backend))
    CONFIGURATION_REPO.clear_settings(*keys)
    console.print("[green]Logged out[/green]")
