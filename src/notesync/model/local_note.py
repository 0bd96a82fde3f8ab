# SPDX-License-Identifier: MIT

from typing import Any, TypedDict

import pendulum


class LocalNote(TypedDict):
    """A file in the vault bound to a note id through its front-matter."""

    path: str
    frontmatter: dict[str, Any]
    content: str
    mtime: pendulum.DateTime
