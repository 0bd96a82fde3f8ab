# SPDX-License-Identifier: MIT

from typing import Annotated

import typer

from notesync.log import configure_logging
from notesync.terminal import configuration, note
from notesync.terminal.account import login, logout
from notesync.terminal.custom_typer import AliasedTyperGroup
from notesync.terminal.sync import new, sync, watch

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="notesync - Sync fleeting notes with a markdown vault",
    no_args_is_help=True,
)
app.command(name="sync, s")(sync)
app.command(name="watch, w")(watch)
app.command(name="new, n")(new)
app.add_typer(note.app, name="notes, no")
app.command(name="login")(login)
app.command(name="logout")(logout)
app.add_typer(configuration.app, name="config, c")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Print debug logs to stderr",
        ),
    ] = False,
) -> None:
    """
    notesync - Sync fleeting notes with a markdown vault

    Global options that apply to all commands.
    """
    configure_logging(verbose)


def run() -> None:
    app()
