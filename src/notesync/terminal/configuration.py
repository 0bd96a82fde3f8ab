# SPDX-License-Identifier: MIT

from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from notesync import configuration
from notesync.errors import TemplateError
from notesync.model.sync_type import SyncType
from notesync.repository.configuration import CONFIGURATION_REPO
from notesync.service.settings import prepare_settings
from notesync.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

SECRET_SETTINGS = ("password", "encryption_key", "supabase_key")


def __format_value(key: str, value: Any) -> str:
    if value is None or value == "":
        return "None"
    if key in SECRET_SETTINGS:
        return "********"
    if isinstance(value, bool):
        return "✓ Enabled" if value else "✗ Disabled"
    return str(value)


def __config_table(config: configuration.Configuration, title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    for key, value in config.items():
        if key == "note_template":
            continue
        table.add_row(key, __format_value(key, value))
    return table


@app.command("view, v")
def view(
    show_template: Annotated[
        bool, typer.Option("--template", help="Also print the note template")
    ] = False,
) -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    console.print(__config_table(config))
    console.print(f"Config file: {configuration.APP_CONFIG_PATH}")
    if show_template:
        console.print("\n[bold]Note Template[/bold]")
        console.print(config["note_template"], markup=False, highlight=False)


@app.command("set, s")
def set(
    vault_path: Annotated[
        Optional[str],
        typer.Option("--vault-path", help="Vault directory (None = current directory)"),
    ] = None,
    notes_folder: Annotated[
        Optional[str],
        typer.Option("--notes-folder", help='Vault folder for synced notes ("/" = root)'),
    ] = None,
    attachments_folder: Annotated[
        Optional[str],
        typer.Option("--attachments-folder", help="Vault folder for downloaded attachments"),
    ] = None,
    note_template_file: Annotated[
        Optional[typer.FileText],
        typer.Option("--note-template-file", help="File holding the note template"),
    ] = None,
    reset_note_template: Annotated[
        bool,
        typer.Option("--reset-note-template", help="Go back to the default note template"),
    ] = False,
    title_template: Annotated[
        Optional[str],
        typer.Option("--title-template", help='File name template, e.g. "${title}"'),
    ] = None,
    date_format: Annotated[
        Optional[str],
        typer.Option("--date-format", help="Date format for ${date} placeholders, e.g. YYYY-MM-DD"),
    ] = None,
    sync_type: Annotated[
        Optional[SyncType],
        typer.Option("--sync-type", help="Two-way types reset the note template"),
    ] = None,
    notes_filter: Annotated[
        Optional[str],
        typer.Option("--notes-filter", help="Only pull notes containing this text"),
    ] = None,
    auto_generate_title: Annotated[
        Optional[bool],
        typer.Option(
            "--auto-generate-title/--no-auto-generate-title",
            help="Name untitled notes after their content",
        ),
    ] = None,
    sync_on_startup: Annotated[
        Optional[bool],
        typer.Option(
            "--sync-on-startup/--no-sync-on-startup",
            help="Sync periodically while watching",
        ),
    ] = None,
    sync_interval_minutes: Annotated[
        Optional[int],
        typer.Option("--sync-interval-minutes", min=1, help="Minutes between auto syncs"),
    ] = None,
    sync_obsidian_links: Annotated[
        Optional[bool],
        typer.Option(
            "--sync-obsidian-links/--no-sync-obsidian-links",
            help="Push every vault link into one remote note",
        ),
    ] = None,
    sync_obsidian_links_title: Annotated[
        Optional[str],
        typer.Option("--sync-obsidian-links-title", help="Title of the links note"),
    ] = None,
    supabase_url: Annotated[
        Optional[str], typer.Option("--supabase-url", help="Remote store URL")
    ] = None,
    supabase_key: Annotated[
        Optional[str], typer.Option("--supabase-key", help="Remote store anon key")
    ] = None,
    encryption_key: Annotated[
        Optional[str],
        typer.Option("--encryption-key", help="Passphrase for encrypted notes"),
    ] = None,
    refetch_batch_size: Annotated[
        Optional[int],
        typer.Option(
            "--refetch-batch-size",
            min=1,
            help="Re-fetch pushed notes by id below this many notes",
        ),
    ] = None,
) -> None:
    """
    Update configuration settings.
    """
    note_template = None
    if note_template_file is not None:
        note_template = note_template_file.read()
    elif reset_note_template:
        note_template = configuration.DEFAULT_NOTE_TEMPLATE

    console = Console()
    try:
        settings = prepare_settings(
            vault_path=vault_path,
            notes_folder=notes_folder,
            attachments_folder=attachments_folder,
            note_template=note_template,
            title_template=title_template,
            date_format=date_format,
            sync_type=sync_type,
            notes_filter=notes_filter,
            auto_generate_title=auto_generate_title,
            sync_on_startup=sync_on_startup,
            sync_interval_minutes=sync_interval_minutes,
            sync_obsidian_links=sync_obsidian_links,
            sync_obsidian_links_title=sync_obsidian_links_title,
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            encryption_key=encryption_key,
            refetch_batch_size=refetch_batch_size,
        )
    except TemplateError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if sync_type is not None and sync_type.is_two_way and note_template is None:
        console.print("[yellow]Note template reset to the default for two-way sync[/yellow]")

    CONFIGURATION_REPO.update_config(**settings)

    console.print("[green]Configuration updated successfully![/green]\n")
    console.print(__config_table(CONFIGURATION_REPO.get_config(), "Updated Configuration"))
