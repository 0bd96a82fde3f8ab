# SPDX-License-Identifier: MIT

import asyncio
import posixpath
import re
from urllib.parse import unquote

from loguru import logger

from notesync.model.local_note import LocalNote
from notesync.repository.local_note import LocalNoteRepository
from notesync.repository.remote_note import RemoteNoteRepository
from notesync.repository.vault import Vault
from notesync.service.title import MARKDOWN_EXTENSION

WIKILINK_REGEX = re.compile(r"\[\[([^\]|#^]+)(?:[#^][^\]|]*)?(?:\|[^\]]*)?\]\]")
MARKDOWN_LINK_REGEX = re.compile(r"\[[^\]]*\]\(<?([^)<>\s]+\.md)>?\)")
CHECKED_TASK_REGEX = re.compile(r"^- \[x\] .*$", re.MULTILINE)

UNPROCESSED_NOTE_TEMPLATE = "- [ ] ![[${linkText}]]\n"
EMBEDDED_NOTE_TEMPLATE = "![[${linkText}]]\n\n"


def clean_link(link: str) -> str:
    """Last path segment of a link, without the markdown extension."""
    name = unquote(link).strip().split("/")[-1]
    if name.endswith(MARKDOWN_EXTENSION):
        name = name[: -len(MARKDOWN_EXTENSION)]
    return name


def extract_links(text: str) -> list[str]:
    links = [match.group(1) for match in WIKILINK_REGEX.finditer(text)]
    links += [match.group(1) for match in MARKDOWN_LINK_REGEX.finditer(text)]
    return links


def strip_extension(path: str) -> str:
    if path.endswith(MARKDOWN_EXTENSION):
        return path[: -len(MARKDOWN_EXTENSION)]
    return path


async def read_markdown_files(vault: Vault, paths: list[str]) -> dict[str, str]:
    """Read files concurrently. Unreadable files are left out."""

    async def read(path: str) -> tuple[str, str | None]:
        try:
            return path, await vault.read(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f'Failed to read "{path}": {e}')
            return path, None

    results = await asyncio.gather(*(read(path) for path in paths))
    return {path: text for path, text in results if text is not None}


async def get_markdown_paths(vault: Vault) -> list[str]:
    return [
        path for path in await vault.list_files() if path.endswith(MARKDOWN_EXTENSION)
    ]


async def get_all_links(vault: Vault) -> list[str]:
    """Every note name and every link target in the vault, resolved or not."""
    paths = await get_markdown_paths(vault)
    texts = await read_markdown_files(vault, paths)

    links: set[str] = set()
    for path in paths:
        links.add(clean_link(path))
        for link in extract_links(texts.get(path, "")):
            cleaned = clean_link(link)
            if cleaned:
                links.add(cleaned)
    return sorted(links)


async def sync_links(
    vault: Vault, remote_repository: RemoteNoteRepository, title: str
) -> int:
    """
    Overwrite the remote note called `title` with every link in the vault,
    creating that note first if needed.
    """
    links = await get_all_links(vault)
    content = "\n".join(f"[[{link}]]" for link in links)

    note = await remote_repository.get_note_by_title(title)
    if note is None:
        note = await remote_repository.create_empty_note()
    await remote_repository.update_notes(
        [{"id": note["id"], "title": title, "content": content}]
    )
    logger.info(f'Synced {len(links)} links to "{title}"')
    return len(links)


def get_link_text(path: str, all_paths: list[str]) -> str:
    """Shortest link that still points at exactly one file."""
    stem = strip_extension(posixpath.basename(path))
    same_name = [
        other
        for other in all_paths
        if strip_extension(posixpath.basename(other)) == stem
    ]
    if len(same_name) <= 1:
        return stem
    return strip_extension(path)


def embed_notes_to_string(
    local_notes: list[LocalNote], all_paths: list[str], template: str
) -> str:
    return "".join(
        template.replace("${linkText}", get_link_text(local_note["path"], all_paths))
        for local_note in local_notes
    )


async def get_unprocessed_notes(
    vault: Vault, local_repository: LocalNoteRepository
) -> list[LocalNote]:
    """
    Synced notes that no other file has ticked off yet.

    A note counts as processed once some file outside the notes folder has
    a checked task line linking to it, e.g. "- [x] done [[Note]]".
    """
    local_notes = await local_repository.get_all_notes()
    note_paths = {local_note["path"] for local_note in local_notes}
    other_paths = [
        path for path in await get_markdown_paths(vault) if path not in note_paths
    ]
    texts = await read_markdown_files(vault, other_paths)

    checked_links: set[str] = set()
    for text in texts.values():
        for line in CHECKED_TASK_REGEX.findall(text):
            for link in extract_links(line):
                checked_links.add(strip_extension(link.strip()))

    return [
        local_note
        for local_note in local_notes
        if strip_extension(local_note["path"]) not in checked_links
        and strip_extension(posixpath.basename(local_note["path"])) not in checked_links
    ]


async def get_notes_with_text(
    local_repository: LocalNoteRepository, text: str
) -> list[LocalNote]:
    """Synced notes with `text` in a front-matter value or in the body."""

    def text_in_metadata(local_note: LocalNote) -> bool:
        return any(
            value is not None and text in str(value)
            for value in local_note["frontmatter"].values()
        )

    return [
        local_note
        for local_note in await local_repository.get_all_notes()
        if text_in_metadata(local_note) or text in local_note["content"]
    ]
