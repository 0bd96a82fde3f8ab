# SPDX-License-Identifier: MIT

import asyncio
from typing import Annotated

import typer

from notesync.model.local_note import LocalNote
from notesync.repository.configuration import CONFIGURATION_REPO
from notesync.repository.local_note import LocalNoteRepository
from notesync.repository.vault import Vault
from notesync.service.links import (
    EMBEDDED_NOTE_TEMPLATE,
    UNPROCESSED_NOTE_TEMPLATE,
    embed_notes_to_string,
    get_markdown_paths,
    get_notes_with_text,
    get_unprocessed_notes,
)
from notesync.terminal.custom_typer import AliasedTyperGroup
from notesync.terminal.services import console, get_vault
from notesync.view.note import notes_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def __show(
    vault: Vault,
    report_name: str,
    local_notes: list[LocalNote],
    all_paths: list[str],
    template: str,
    table: bool,
) -> None:
    if table:
        notes_report(vault.root.name, report_name, local_notes)
        return
    # Plain output so it can be piped into another note
    console.print(
        embed_notes_to_string(local_notes, all_paths, template),
        end="",
        markup=False,
        highlight=False,
    )


@app.command("unprocessed, u")
def unprocessed(
    table: Annotated[
        bool, typer.Option("--table", help="Show a table instead of task lines")
    ] = False,
) -> None:
    """List synced notes that no checked task links to yet."""
    config = CONFIGURATION_REPO.get_config()
    vault = get_vault(config)
    local_repository = LocalNoteRepository(vault, config)

    async def run() -> tuple[list[LocalNote], list[str]]:
        local_notes = await get_unprocessed_notes(vault, local_repository)
        return local_notes, await get_markdown_paths(vault)

    local_notes, all_paths = asyncio.run(run())
    __show(
        vault,
        "unprocessed notes",
        local_notes,
        all_paths,
        UNPROCESSED_NOTE_TEMPLATE,
        table,
    )


@app.command("containing, c")
def containing(
    text: Annotated[str, typer.Argument(help="Text to look for")],
    table: Annotated[
        bool, typer.Option("--table", help="Show a table instead of embeds")
    ] = False,
) -> None:
    """List synced notes whose front-matter or body contains TEXT."""
    config = CONFIGURATION_REPO.get_config()
    vault = get_vault(config)
    local_repository = LocalNoteRepository(vault, config)

    async def run() -> tuple[list[LocalNote], list[str]]:
        local_notes = await get_notes_with_text(local_repository, text)
        return local_notes, await get_markdown_paths(vault)

    local_notes, all_paths = asyncio.run(run())
    __show(
        vault,
        f'notes containing "{text}"',
        local_notes,
        all_paths,
        EMBEDDED_NOTE_TEMPLATE,
        table,
    )
