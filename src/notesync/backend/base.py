# SPDX-License-Identifier: MIT

from collections.abc import Awaitable, Callable, Sequence
from typing import Optional, Protocol, TypedDict

from notesync.model.note import RemoteNote

type RemoteNoteCallback = Callable[[RemoteNote], Awaitable[None]]


class Session(TypedDict):
    user_id: str
    firebase_id: Optional[str]
    email: Optional[str]


class NoteBackend(Protocol):
    """
    The remote note table.

    Every query is scoped to a set of tenant partitions. Failures raise
    RemoteStoreError (or AuthenticationError for sign in).
    """

    async def sign_in(self, email: str, password: str) -> Session: ...

    async def sign_out(self) -> None: ...

    async def select_notes(
        self,
        partitions: Sequence[str],
        ids: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
    ) -> list[RemoteNote]:
        """Non-deleted notes, optionally narrowed by id list or exact title."""
        ...

    async def upsert_notes(self, notes: Sequence[RemoteNote]) -> None: ...

    async def insert_note(self, note: RemoteNote) -> RemoteNote: ...

    async def subscribe(
        self, partitions: Sequence[str], callback: RemoteNoteCallback
    ) -> None:
        """Feed every inserted or updated note in the partitions to `callback`."""
        ...

    async def unsubscribe(self) -> None: ...
