# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding


def header(vault_name: str, sub_header: Optional[str] = None) -> None:
    """Print the application header.

    Args:
        vault_name: Name of the vault being synced
        sub_header: Optional sub-header text to display
    """
    additional = ""
    if sub_header is not None:
        additional = f"[sandy_brown]{sub_header}[/sandy_brown]"
    vault_name = f"[plum1]{vault_name}[/plum1]"

    print(Padding("[dark_orange]notesync[/dark_orange]", (1, 0, 0, 1)))
    print(Padding(additional, (0, 1)))
    print(Padding(vault_name, (0, 1)))
