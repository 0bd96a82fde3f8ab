# SPDX-License-Identifier: MIT

import re
from typing import Any

from loguru import logger
from yaml import YAMLError, load

try:
    from yaml import CSafeLoader as SafeLoader
except ImportError:
    from yaml import SafeLoader  # type: ignore[assignment]

from notesync.errors import TemplateError
from notesync.model.note import Note
from notesync.time import format_local_date

FRONTMATTER_REGEX = re.compile(r"^---\n([\s\S]*?)\n---\n", re.MULTILINE)
PLACEHOLDER_REGEX = re.compile(r"\$\{(\w+)\}")
DELETED_LINE_REGEX = re.compile(r"^deleted:.*$", re.MULTILINE)
TAG_REGEX = re.compile(
    r"(^|\B)#(?![0-9_]+(?![\w/]))([a-zA-Z0-9_/]{1,50})(\b|\r)", re.MULTILINE
)


def extract_all_tags(text: str) -> list[str]:
    """Inline #tags in text. Purely numeric tags are not tags."""
    return [match.group(2) for match in TAG_REGEX.finditer(text or "")]


def format_tags(tags: list[str]) -> str:
    return "[" + ", ".join(f'"{tag}"' for tag in tags) + "]"


def escape_frontmatter_value(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r\n", " ")
        .replace("\n", " ")
        .replace("\r", " ")
    )


def get_placeholder_values(
    template: str, note: Note, date_format: str
) -> dict[str, str]:
    values = {
        "id": note["id"],
        "title": note.get("title") or "",
        "content": note.get("content") or "",
        "source": note.get("source") or "",
        "source_title": note.get("source_title") or "",
        "source_description": note.get("source_description") or "",
        "source_image_url": note.get("source_image_url") or "",
        "datetime": note.get("created_at") or "",
        "created_date": format_local_date(note.get("created_at"), date_format),
        "last_modified_date": format_local_date(note.get("modified_at"), date_format),
    }
    # Scanning for tags is skipped unless the template asks for them
    if "${tags}" in template:
        values["tags"] = format_tags(extract_all_tags(values["content"]))
    return values


def fill_placeholders(text: str, values: dict[str, str], escape: bool = False) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        if escape and name != "tags":
            return escape_frontmatter_value(values[name])
        return values[name]

    return PLACEHOLDER_REGEX.sub(replace, text)


def mark_deleted(frontmatter: str) -> str:
    if DELETED_LINE_REGEX.search(frontmatter):
        return DELETED_LINE_REGEX.sub("deleted: true", frontmatter, count=1)
    return frontmatter + "\ndeleted: true"


def render_note(
    template: str, note: Note, date_format: str, add_deleted: bool = False
) -> str:
    """
    Render a note into file content.

    Front-matter values are escaped so they stay valid inside double quoted
    YAML scalars. The body gets the raw values.
    """
    values = get_placeholder_values(template, note, date_format)

    match = FRONTMATTER_REGEX.search(template)
    if match is None:
        return fill_placeholders(template, values)

    frontmatter = fill_placeholders(match.group(1), values, escape=True)
    if add_deleted:
        frontmatter = mark_deleted(frontmatter)

    body = fill_placeholders(template[match.end() :], values)
    return template[: match.start()] + f"---\n{frontmatter}\n---\n" + body


def render_title(title_template: str, title: str, note: Note, date_format: str) -> str:
    values = get_placeholder_values(title_template, note, date_format)
    values["title"] = title
    return fill_placeholders(title_template, values)


def parse_note_text(text: str, path: str = "") -> tuple[dict[str, Any], str]:
    """
    Split raw file text into its front-matter mapping and body.

    A file without front-matter is all body. Front-matter that does not
    parse is logged and treated as empty, so one malformed file never
    stops an indexing pass.
    """
    match = FRONTMATTER_REGEX.search(text)
    if match is None:
        return {}, text

    try:
        frontmatter = load(match.group(1), Loader=SafeLoader)
    except YAMLError as e:
        logger.warning(f'Failed to parse metadata for: "{path}": {e}')
        return {}, text

    if not isinstance(frontmatter, dict):
        frontmatter = {}
    content = text[: match.start()] + text[match.end() :]
    return frontmatter, content


def validate_note_template(template: str) -> None:
    if not template:
        raise TemplateError("Note template cannot be empty")

    match = FRONTMATTER_REGEX.search(template)
    if match is None:
        raise TemplateError("Note template 'id' field is required")
    try:
        frontmatter = load(match.group(1), Loader=SafeLoader)
    except YAMLError as e:
        raise TemplateError("Note template incorrect format") from e
    if not isinstance(frontmatter, dict) or not frontmatter.get("id"):
        raise TemplateError("Note template 'id' field is required")
