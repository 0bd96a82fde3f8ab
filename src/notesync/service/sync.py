# SPDX-License-Identifier: MIT

from collections.abc import Callable
from typing import Optional, TypedDict

import pendulum
from loguru import logger

from notesync import configuration, time
from notesync.errors import NoteSyncError, NotSignedInError
from notesync.model.note import Note
from notesync.model.sync_type import SyncType
from notesync.repository.local_note import LocalNoteRepository
from notesync.repository.remote_note import RemoteNoteRepository
from notesync.service.links import sync_links

SYNC_FAILED_MESSAGE = "Sync failed - please check settings"


class SyncResult(TypedDict):
    pushed: int
    pulled: int
    deleted: int
    links: Optional[int]
    errors: list[str]


def get_sync_result_template() -> SyncResult:
    return {"pushed": 0, "pulled": 0, "deleted": 0, "links": None, "errors": []}


def user_message(error: Exception, fallback: str) -> str:
    """The message to show for an error. Unexpected errors are logged in full."""
    if isinstance(error, NoteSyncError):
        return str(error)
    logger.opt(exception=error).error(fallback)
    return fallback


class SyncService:
    """
    Moves notes between the vault and the remote store.

    Runs must not overlap; callers schedule them one at a time.
    """

    def __init__(
        self,
        local_repository: LocalNoteRepository,
        remote_repository: RemoteNoteRepository,
        config: configuration.Configuration,
        on_last_sync_time: Optional[Callable[[pendulum.DateTime], None]] = None,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.local_repository = local_repository
        self.remote_repository = remote_repository
        self.config = config
        self.on_last_sync_time = on_last_sync_time
        self.notify = notify
        self.last_result: SyncResult = get_sync_result_template()

    @property
    def sync_type(self) -> SyncType:
        return SyncType(self.config["sync_type"])

    @property
    def last_sync_time(self) -> pendulum.DateTime:
        last_sync_time = self.config.get("last_sync_time")
        if last_sync_time is None:
            return time.EPOCH
        return time.datetime_from_str(last_sync_time)

    @property
    def links_note_title(self) -> Optional[str]:
        if not self.config["sync_obsidian_links"]:
            return None
        return self.config["sync_obsidian_links_title"]

    def __notify(self, message: str) -> None:
        logger.info(message)
        if self.notify is not None:
            self.notify(message)

    def __set_last_sync_time(self, last_sync_time: pendulum.DateTime) -> None:
        self.config["last_sync_time"] = time.datetime_to_iso_str(last_sync_time)
        if self.on_last_sync_time is not None:
            self.on_last_sync_time(last_sync_time)

    async def sync(self) -> bool:
        """
        Run one sync for the configured sync type.

        Never raises. Failures are reported through `notify` and the return
        value is False.
        """
        self.last_result = get_sync_result_template()
        if not configuration.is_signed_in(self.config):
            self.__notify(str(NotSignedInError()))
            self.last_result["errors"].append(str(NotSignedInError()))
            return False

        try:
            self.last_result = await self.sync_notes()
        except Exception as e:
            message = user_message(e, SYNC_FAILED_MESSAGE)
            self.last_result["errors"].append(message)
            self.__notify(message)
            return False

        for error in self.last_result["errors"]:
            self.__notify(error)
        return len(self.last_result["errors"]) == 0

    async def sync_notes(self) -> SyncResult:
        """
        Push (two-way only), then pull, then sync links.

        A failed push is reported but the pull still runs. The last sync
        time only moves forward when nothing failed before the pull
        finished, so a retry pushes the same notes again.
        """
        result = get_sync_result_template()

        push_succeeded = True
        if self.sync_type.is_two_way:
            try:
                result["pushed"] = await self.push_notes()
            except Exception as e:
                push_succeeded = False
                result["errors"].append(
                    user_message(e, "Failed to push notes to the remote store")
                )

        pulled_notes = await self.pull_notes()
        result["pulled"] = len(pulled_notes)
        if self.sync_type == SyncType.ONE_WAY_DELETE:
            result["deleted"] = await self.remote_repository.delete_notes(pulled_notes)

        if push_succeeded:
            self.__set_last_sync_time(time.now_utc())

        if self.links_note_title is not None:
            try:
                result["links"] = await sync_links(
                    self.local_repository.vault,
                    self.remote_repository,
                    self.links_note_title,
                )
            except Exception as e:
                result["errors"].append(
                    user_message(e, "Failed to sync links to the remote store")
                )

        return result

    async def push_notes(self) -> int:
        """Push notes written or renamed locally since the last sync."""
        modified_notes = await self.local_repository.get_modified_notes(
            self.last_sync_time
        )
        notes = [LocalNoteRepository.to_note(local_note) for local_note in modified_notes]
        if not notes:
            return 0
        return await self.remote_repository.update_notes(notes)

    async def pull_notes(self) -> list[Note]:
        """Write every remote note into the vault."""
        notes = await self.remote_repository.get_all_notes(self.config["notes_filter"])
        notes = [note for note in notes if not note.get("deleted")]
        if self.links_note_title is not None:
            notes = [note for note in notes if note.get("title") != self.links_note_title]

        await self.local_repository.get_all_notes()
        await self.local_repository.upsert_notes(
            notes, add_deleted=self.sync_type == SyncType.ONE_WAY_DELETE
        )
        return notes

    async def init_realtime(self, sync_type: Optional[SyncType] = None) -> None:
        """
        Reset the change subscriptions for a sync type.

        Realtime one-way listens to the remote store, realtime two-way also
        listens to the vault. Other sync types listen to nothing.
        """
        if sync_type is not None:
            self.config["sync_type"] = sync_type.value
        await self.stop_realtime()

        if not self.sync_type.is_realtime:
            return
        if not configuration.is_signed_in(self.config):
            self.__notify(str(NotSignedInError()))
            return

        await self.local_repository.init()
        await self.remote_repository.on_note_change(self.handle_remote_note_change)
        if self.sync_type.is_two_way:
            await self.local_repository.on_note_change(
                self.handle_local_note_change, include_delete=True
            )

    async def stop_realtime(self) -> None:
        await self.local_repository.off_note_change()
        await self.remote_repository.remove_all_channels()

    async def handle_remote_note_change(self, note: Note) -> None:
        try:
            if note.get("deleted"):
                await self.local_repository.delete_notes([note])
                return
            if self.links_note_title is not None and (
                note.get("title") == self.links_note_title
            ):
                return
            notes_filter = self.config["notes_filter"]
            if notes_filter and not (
                notes_filter in (note.get("title") or "")
                or notes_filter in (note.get("content") or "")
            ):
                return
            await self.local_repository.upsert_notes([note])
        except Exception as e:
            self.__notify(user_message(e, "Failed to write realtime note to the vault"))

    async def handle_local_note_change(self, note: Note) -> None:
        try:
            await self.remote_repository.update_note(note)
        except Exception as e:
            self.__notify(
                user_message(e, "Failed to push realtime note to the remote store")
            )
