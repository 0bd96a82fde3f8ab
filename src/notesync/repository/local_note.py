# SPDX-License-Identifier: MIT

import posixpath
import re
from collections.abc import Awaitable, Callable
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx
import pendulum
from loguru import logger

from notesync import configuration
from notesync.errors import LocalStoreError, NoteSyncError, wrap_error
from notesync.model.local_note import LocalNote
from notesync.model.note import Note
from notesync.model.note_id import NoteId
from notesync.repository.vault import Vault, VaultSubscription
from notesync.service.template import parse_note_text, render_note
from notesync.service.title import MARKDOWN_EXTENSION, resolve_title

ATTACHMENT_URL_REGEX = re.compile(
    r"^https://[\w-]+\.supabase\.co/storage/v1/object/[^?#]+"
)

type NoteChangeCallback = Callable[[Note], Awaitable[None]]


def normalize_folder(folder: Optional[str]) -> str:
    """Vault folders are written with or without slashes; "/" means the root."""
    folder = (folder or "").strip().strip("/")
    return folder or "/"


def join_path(folder: str, name: str) -> str:
    if folder == "/":
        return name
    return posixpath.join(folder, name)


def is_in_folder(path: str, folder: str) -> bool:
    """
    The root folder only holds files without a path separator. Any other
    folder holds everything beneath it.
    """
    if folder == "/":
        return "/" not in path
    return path.startswith(folder + "/")


def get_attachment_name(source: Optional[str]) -> Optional[str]:
    if not source:
        return None
    match = ATTACHMENT_URL_REGEX.match(source)
    if match is None:
        return None
    name = unquote(posixpath.basename(urlparse(match.group(0)).path))
    return name or None


def and_more(failures: list[str]) -> str:
    return f" and {len(failures) - 1} more" if len(failures) > 1 else ""


def file_stem(path: str) -> str:
    name = posixpath.basename(path)
    if name.endswith(MARKDOWN_EXTENSION):
        return name[: -len(MARKDOWN_EXTENSION)]
    return name


class LocalNoteRepository:
    """
    Notes stored as markdown files in a vault folder.

    Keeps an index of note id to the file bound to it. The index is rebuilt
    by `get_all_notes` and patched by upserts and deletes. It is not safe
    to run two of these operations concurrently.
    """

    def __init__(
        self,
        vault: Vault,
        config: configuration.Configuration,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.vault = vault
        self.config = config
        self.http_client = http_client
        self._notes: dict[NoteId, LocalNote] = {}
        self._subscription: Optional[VaultSubscription] = None

    @property
    def folder(self) -> str:
        return normalize_folder(self.config["notes_folder"])

    @property
    def attachments_folder(self) -> Optional[str]:
        if not self.config["attachments_folder"]:
            return None
        return normalize_folder(self.config["attachments_folder"])

    def is_in_scope(self, path: str) -> bool:
        return path.endswith(MARKDOWN_EXTENSION) and is_in_folder(path, self.folder)

    def get_local_note(self, id: NoteId) -> Optional[LocalNote]:
        return self._notes.get(id)

    async def init(self) -> None:
        await self.get_all_notes()

    async def get_all_notes(self) -> list[LocalNote]:
        """
        Scan the notes folder and rebuild the index from scratch.

        Only one file is bound to an id. Copies of an already bound file
        are logged and left out.
        """
        try:
            paths = await self.vault.list_files()
        except OSError as e:
            wrap_error(e, "Failed to get existing notes from the vault")

        notes: dict[NoteId, LocalNote] = {}
        for path in paths:
            if not self.is_in_scope(path):
                continue
            local_note = await self.__read_local_note(path)
            if local_note is None:
                continue
            id = str(local_note["frontmatter"]["id"])
            if id in notes:
                logger.warning(
                    f'Skipped "{path}": note {id} is already in "{notes[id]["path"]}"'
                )
                continue
            notes[id] = local_note

        self._notes = notes
        return list(notes.values())

    async def get_modified_notes(
        self, last_sync_time: pendulum.DateTime
    ) -> list[LocalNote]:
        """Notes written after the last sync, or renamed away from their title."""
        modified_notes = []
        for local_note in await self.get_all_notes():
            is_content_modified = local_note["mtime"] > last_sync_time
            title = local_note["frontmatter"].get("title")
            is_title_changed = bool(title) and str(title) != file_stem(
                local_note["path"]
            )
            if is_content_modified or is_title_changed:
                modified_notes.append(local_note)
        return modified_notes

    async def upsert_notes(self, notes: list[Note], add_deleted: bool = False) -> None:
        """
        Write notes to the vault.

        A note that fails does not stop the others. Failures are reported
        together once every note has been processed.
        """
        try:
            await self.__ensure_folders()
        except OSError as e:
            wrap_error(e, "Failed to write notes to the vault")

        failed_paths: list[str] = []
        failed_downloads: list[str] = []
        for note in notes:
            try:
                await self.__upsert_note(note, add_deleted)
            except LocalStoreError as e:
                logger.opt(exception=e).error(str(e))
                failed_paths.append(e.path or note["id"])
                continue
            except Exception as e:
                logger.opt(exception=e).error(f'Failed to write note "{note["id"]}"')
                failed_paths.append(note["id"])
                continue

            try:
                await self.__download_attachment(note)
            except NoteSyncError as e:
                logger.error(str(e))
                failed_downloads.append(str(e))

        if failed_paths:
            raise LocalStoreError(
                f'Failed to write note "{failed_paths[0]}" to the vault'
                + and_more(failed_paths),
                path=failed_paths[0],
            )
        if failed_downloads:
            raise NoteSyncError(failed_downloads[0] + and_more(failed_downloads))

    async def delete_notes(self, notes: list[Note]) -> None:
        """Delete the files bound to notes. Notes without a file are skipped."""
        try:
            for note in notes:
                local_note = self._notes.get(note["id"])
                if local_note is None:
                    continue
                if await self.vault.exists(local_note["path"]):
                    await self.vault.delete(local_note["path"])
                del self._notes[note["id"]]
        except OSError as e:
            wrap_error(e, "Failed to delete notes from the vault")

    async def on_note_change(
        self, handle_note_change: NoteChangeCallback, include_delete: bool = False
    ) -> None:
        """Call back with notes changed on disk. Replaces any earlier subscription."""
        await self.off_note_change()

        async def handle_modify(path: str) -> None:
            if not self.is_in_scope(path):
                return
            local_note = await self.__read_local_note(path)
            if local_note is None:
                return
            self._notes[str(local_note["frontmatter"]["id"])] = local_note
            await handle_note_change(self.to_note(local_note))

        async def handle_delete(path: str) -> None:
            if not self.is_in_scope(path):
                return
            for id, local_note in list(self._notes.items()):
                if local_note["path"] == path:
                    del self._notes[id]
                    await handle_note_change({"id": id, "deleted": True})
                    return

        self._subscription = self.vault.subscribe(
            handle_modify, handle_delete if include_delete else None
        )

    async def off_note_change(self) -> None:
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.cancel()

    @staticmethod
    def to_note(local_note: LocalNote) -> Note:
        """The fields of a local file that are pushed to the remote store."""
        frontmatter = local_note["frontmatter"]
        note: Note = {"id": str(frontmatter["id"])}
        # A file renamed by hand keeps its old title in the front-matter
        if frontmatter.get("title"):
            note["title"] = file_stem(local_note["path"])
        if local_note["content"]:
            note["content"] = local_note["content"]
        if frontmatter.get("source"):
            note["source"] = str(frontmatter["source"])
        if frontmatter.get("deleted"):
            note["deleted"] = bool(frontmatter["deleted"])
        note["modified_at"] = local_note["mtime"].isoformat()
        return note

    async def __upsert_note(self, note: Note, add_deleted: bool) -> None:
        local_note = self._notes.get(note["id"])
        if local_note is not None and not await self.vault.exists(local_note["path"]):
            local_note = None

        folder = self.folder
        if local_note is not None:
            folder = normalize_folder(posixpath.dirname(local_note["path"]))

        # Resolved against what is on disk right now, not an earlier snapshot
        filenames = await self.__get_filenames_in_folder(folder)
        if local_note is not None:
            filenames.discard(posixpath.basename(local_note["path"]))
        path = join_path(folder, resolve_title(note, filenames, self.config))

        content = render_note(
            self.config["note_template"],
            note,
            self.config["date_format"],
            add_deleted,
        )

        try:
            if local_note is not None:
                if await self.vault.read(local_note["path"]) == content:
                    logger.debug(f"Skipped unchanged note {local_note['path']}")
                else:
                    await self.vault.modify(local_note["path"], content)
                if local_note["path"] != path:
                    await self.vault.rename(local_note["path"], path)
            else:
                if await self.vault.exists(path):
                    await self.vault.delete(path)
                await self.vault.create(path, content)
        except OSError as e:
            raise LocalStoreError(f'Failed to write note "{path}"', path=path) from e

        new_local_note = await self.__read_local_note(path)
        if new_local_note is not None:
            self._notes[note["id"]] = new_local_note

    async def __read_local_note(self, path: str) -> Optional[LocalNote]:
        """Parse a file. Returns None for files that are unreadable or carry no id."""
        try:
            text = await self.vault.read(path)
            mtime = await self.vault.mtime(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f'Failed to read "{path}": {e}')
            return None

        frontmatter, content = parse_note_text(text, path)
        if not frontmatter.get("id"):
            return None
        return {
            "path": path,
            "frontmatter": frontmatter,
            "content": content,
            "mtime": mtime,
        }

    async def __get_filenames_in_folder(self, folder: str) -> set[str]:
        paths = await self.vault.list_files()
        return {
            posixpath.basename(path)
            for path in paths
            if normalize_folder(posixpath.dirname(path)) == folder
        }

    async def __ensure_folders(self) -> None:
        if self.folder != "/" and not await self.vault.exists(self.folder):
            await self.vault.create_folder(self.folder)
        attachments_folder = self.attachments_folder
        if attachments_folder is not None and attachments_folder != "/":
            if not await self.vault.exists(attachments_folder):
                await self.vault.create_folder(attachments_folder)

    async def __download_attachment(self, note: Note) -> None:
        attachments_folder = self.attachments_folder
        name = get_attachment_name(note.get("source"))
        if attachments_folder is None or name is None:
            return

        path = join_path(attachments_folder, name)
        if await self.vault.exists(path):
            return

        source = note.get("source") or ""
        try:
            if self.http_client is not None:
                response = await self.http_client.get(source)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(source)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NoteSyncError(f'Failed to download attachment "{source}": {e}') from e

        try:
            await self.vault.create_binary(path, response.content)
        except OSError as e:
            raise NoteSyncError(f'Failed to save attachment "{path}": {e}') from e
        logger.info(f"Downloaded attachment {path}")
