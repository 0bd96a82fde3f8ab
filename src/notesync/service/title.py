# SPDX-License-Identifier: MIT

import re
from collections.abc import Collection
from typing import Optional

from notesync import configuration
from notesync.model.note import Note
from notesync.service.template import render_title

MARKDOWN_EXTENSION = ".md"
TITLE_LENGTH = 40

ILLEGAL_TITLE_CHARACTERS_REGEX = re.compile(r"[\[\]#*:/\\^.]")


def escape_title(title: Optional[str]) -> str:
    """
    Make text usable as a file name stem.

    Rules:
    - Newlines become spaces
    - Brackets, #, *, :, /, \\, ^ and . are removed
    - Max 40 chars
    """
    if not title:
        return ""
    title = re.sub(r"[\n\r]", " ", title)
    title = ILLEGAL_TITLE_CHARACTERS_REGEX.sub("", title)
    return title[:TITLE_LENGTH]


def get_title_stem(note: Note, auto_generate_title: bool) -> str:
    """Note title > title from content > source title > note id."""
    title = escape_title(note.get("title"))
    if title:
        return title
    if auto_generate_title:
        title = escape_title(note.get("content"))
        if not title.strip():
            title = escape_title(note.get("source_title"))
        if title.strip():
            return title
    return note["id"]


def with_extension(filename: str) -> str:
    if filename.endswith(MARKDOWN_EXTENSION):
        return filename
    return filename + MARKDOWN_EXTENSION


def disambiguate(filename: str, existing_titles: Collection[str]) -> str:
    """Foo.md, Foo (1).md, Foo (2).md, ... whichever is free first."""
    if filename not in existing_titles:
        return filename
    stem = filename[: -len(MARKDOWN_EXTENSION)]
    i = 1
    while f"{stem} ({i}){MARKDOWN_EXTENSION}" in existing_titles:
        i += 1
    return f"{stem} ({i}){MARKDOWN_EXTENSION}"


def resolve_title(
    note: Note,
    existing_titles: Collection[str],
    config: configuration.Configuration,
) -> str:
    """
    Resolve the file name (with extension) a note is written to.

    `existing_titles` must be the names currently in the target folder,
    excluding the file already bound to this note.
    """
    stem = get_title_stem(note, config["auto_generate_title"])
    filename = render_title(
        config["title_template"] or configuration.DEFAULT_TITLE_TEMPLATE,
        stem,
        note,
        config["date_format"],
    )
    return disambiguate(with_extension(filename), existing_titles)
