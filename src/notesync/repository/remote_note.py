# SPDX-License-Identifier: MIT

from collections.abc import Awaitable, Callable
from typing import Optional

from loguru import logger

from notesync import configuration
from notesync.backend.base import NoteBackend
from notesync.errors import NoteSyncError, NotSignedInError, wrap_error
from notesync.model.note import Note, RemoteNote
from notesync.model.note_id import NoteId
from notesync.service.crypto import decrypt_note, encrypt_note
from notesync.template.note import get_note_template
from notesync.time import now_iso_str


class RemoteNoteRepository:
    """
    Notes in the remote store, decrypted on the way in and encrypted on the
    way out. Nothing is cached: every call reads the remote store again.
    """

    def __init__(self, backend: NoteBackend, config: configuration.Configuration) -> None:
        self.backend = backend
        self.config = config

    @property
    def encryption_key(self) -> str:
        return self.config["encryption_key"] or ""

    @property
    def refetch_batch_size(self) -> int:
        return self.config.get(
            "refetch_batch_size", configuration.DEFAULT_REFETCH_BATCH_SIZE
        )

    def __get_partitions(self) -> list[str]:
        partitions = configuration.get_partitions(self.config)
        if not partitions:
            raise NotSignedInError()
        return partitions

    def __decrypt_notes(self, remote_notes: list[RemoteNote]) -> list[RemoteNote]:
        """Decrypt notes, dropping any that cannot be decrypted."""
        notes = []
        for remote_note in remote_notes:
            try:
                notes.append(decrypt_note(remote_note, self.encryption_key))
            except NoteSyncError as e:
                logger.error(f'Skipped note "{remote_note["id"]}": {e}')
        return notes

    async def get_all_notes(self, notes_filter: Optional[str] = None) -> list[Note]:
        """
        All notes of the signed in user that are not deleted.

        Raises:
            NotSignedInError: If no user is signed in.
            NoteSyncError: If the remote store could not be read.
        """
        partitions = self.__get_partitions()
        try:
            remote_notes = await self.backend.select_notes(partitions)
        except Exception as e:
            wrap_error(
                e, "Failed to get notes from the remote store - check your credentials"
            )

        notes: list[Note] = list(self.__decrypt_notes(remote_notes))
        if notes_filter:
            notes = [
                note
                for note in notes
                if notes_filter in (note.get("title") or "")
                or notes_filter in (note.get("content") or "")
            ]
        return notes

    def is_update_note_similar(self, remote_note: RemoteNote, note: Note) -> bool:
        """
        Whether pushing `note` would change nothing.

        Only fields `note` sets are compared; an unset field never counts
        as a difference. `remote_note` must already be decrypted.
        """
        for field in ("title", "content", "source"):
            value = note.get(field)
            if isinstance(value, str) and value != remote_note.get(field):
                return False
        deleted = note.get("deleted")
        if isinstance(deleted, bool) and deleted != bool(remote_note.get("deleted")):
            return False
        return True

    def merge_note(self, remote_note: RemoteNote, note: Note) -> RemoteNote:
        """
        Lay the fields `note` provides over the decrypted remote record.

        Empty incoming fields keep the remote value. The result is encrypted
        again when the remote record was.
        """
        merged = decrypt_note(remote_note, self.encryption_key)
        merged = {
            **merged,
            "title": note.get("title") or merged.get("title"),
            "content": note.get("content") or merged.get("content"),
            "source": note.get("source") or merged.get("source"),
            "modified_at": now_iso_str(),
            "deleted": note.get("deleted") or merged.get("deleted") or False,
        }
        if remote_note.get("encrypted"):
            merged = encrypt_note(merged, self.encryption_key)
        return merged

    async def update_notes(self, notes: list[Note]) -> int:
        """
        Push changed fields of existing remote notes.

        Notes unknown to the remote store are dropped, as are notes that
        would not change anything. Returns the number of notes written.
        """
        partitions = self.__get_partitions()
        if not notes:
            return 0
        try:
            note_ids = list(dict.fromkeys(note["id"] for note in notes))
            # An id filter on a large batch makes the request too big
            ids = note_ids if len(note_ids) < self.refetch_batch_size else None
            remote_notes = await self.backend.select_notes(partitions, ids=ids)
            remote_notes_by_id = {
                remote_note["id"]: remote_note for remote_note in remote_notes
            }

            # One row per id, a batch upsert rejects repeated ids
            merged_notes: dict[NoteId, RemoteNote] = {}
            for note in notes:
                remote_note = remote_notes_by_id.get(note["id"])
                if remote_note is None:
                    continue
                try:
                    decrypted = decrypt_note(remote_note, self.encryption_key)
                    if self.is_update_note_similar(decrypted, note):
                        continue
                    merged_notes[note["id"]] = self.merge_note(remote_note, note)
                except NoteSyncError as e:
                    logger.error(f'Skipped note "{note["id"]}": {e}')

            if merged_notes:
                await self.backend.upsert_notes(list(merged_notes.values()))
                logger.info(f"Updated {len(merged_notes)} remote notes")
            return len(merged_notes)
        except Exception as e:
            wrap_error(e, "Failed to update notes in the remote store")

    async def update_note(self, note: Note) -> int:
        return await self.update_notes([note])

    async def delete_notes(self, notes: list[Note]) -> int:
        """Mark notes deleted in the remote store."""
        return await self.update_notes(
            [{"id": note["id"], "deleted": True} for note in notes]
        )

    async def create_empty_note(self) -> RemoteNote:
        partitions = self.__get_partitions()
        partition = self.config.get("supabase_id") or partitions[0]
        try:
            return await self.backend.insert_note(get_note_template(partition))
        except Exception as e:
            wrap_error(e, "Failed to create a note in the remote store")

    async def get_note_by_title(self, title: str) -> Optional[Note]:
        partitions = self.__get_partitions()
        try:
            remote_notes = await self.backend.select_notes(partitions, title=title)
            if not remote_notes and self.encryption_key:
                # Encrypted titles can only be matched once decrypted
                remote_notes = await self.backend.select_notes(partitions)
        except Exception as e:
            wrap_error(e, f'Failed to get note "{title}" from the remote store')

        for note in self.__decrypt_notes(remote_notes):
            if note.get("title") == title:
                return note
        return None

    async def on_note_change(
        self, handle_note_change: Callable[[Note], Awaitable[None]]
    ) -> None:
        """Stream remote changes. Replaces any earlier subscription."""
        partitions = configuration.get_partitions(self.config)
        if not partitions:
            return
        await self.remove_all_channels()

        async def handle_remote_change(remote_note: RemoteNote) -> None:
            try:
                note = decrypt_note(remote_note, self.encryption_key)
            except NoteSyncError as e:
                logger.error(f'Skipped realtime note "{remote_note.get("id")}": {e}')
                return
            await handle_note_change(note)

        await self.backend.subscribe(partitions, handle_remote_change)

    async def remove_all_channels(self) -> None:
        await self.backend.unsubscribe()
