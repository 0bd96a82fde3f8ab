# SPDX-License-Identifier: MIT

import re
from typing import Optional

import click
import typer.core

COMMAND_ORDER = (
    "sync, s",
    "watch, w",
    "new, n",
    "notes, no",
    "login",
    "logout",
    "config, c",
)


class AliasedTyperGroup(typer.core.TyperGroup):
    """
    Group whose command names may carry comma separated aliases.

    "sync, s" is registered once and can be invoked as "sync" or "s".
    """

    _ALIAS_SPLIT_P = re.compile(r" ?, ?")

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, self._full_name(cmd_name))

    def _full_name(self, alias: str) -> str:
        for name in self.commands:
            if alias in self._ALIAS_SPLIT_P.split(name):
                return name
        return alias

    def add_command(self, cmd: click.Command, name: Optional[str] = None) -> None:
        name = name or cmd.name
        full_name = self._full_name(name or "")
        # An alias of a command that is already registered
        if full_name in self.commands and full_name != name:
            return
        super().add_command(cmd, name)

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Known commands first in workflow order, then the rest as registered."""
        ordered = [name for name in COMMAND_ORDER if name in self.commands]
        return ordered + [name for name in self.commands if name not in ordered]
