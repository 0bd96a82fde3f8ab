# SPDX-License-Identifier: MIT

import asyncio
from collections.abc import Sequence
from typing import Any, Optional

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import AsyncClient, AuthError, acreate_client

from notesync.backend.base import RemoteNoteCallback, Session
from notesync.errors import AuthenticationError, RemoteStoreError
from notesync.model.note import RemoteNote

NOTES_TABLE = "notes"
NOTES_CHANNEL = "public:notes"


class SupabaseBackend:
    """
    Note table hosted on Supabase.

    One client is created on first use and reused. When credentials are
    given the client signs in before its first query, so row level
    security sees the user.
    """

    def __init__(
        self,
        url: str,
        key: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self.url = url
        self.key = key
        self.email = email
        self.password = password
        self._client: Optional[AsyncClient] = None
        self._signed_in = False

    async def __get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.url, self.key)
        if not self._signed_in and self.email and self.password:
            await self.sign_in(self.email, self.password)
        return self._client

    async def sign_in(self, email: str, password: str) -> Session:
        if self._client is None:
            self._client = await acreate_client(self.url, self.key)
        try:
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except (AuthError, httpx.HTTPError) as e:
            raise AuthenticationError(f"Login failed - {e}") from e

        user = response.user
        if user is None:
            raise AuthenticationError("Login failed - no user returned")
        self._signed_in = True
        self.email = email
        self.password = password
        metadata = user.user_metadata or {}
        return {
            "user_id": user.id,
            "firebase_id": metadata.get("firebaseUid"),
            "email": user.email,
        }

    async def sign_out(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign out failed: {e}")
        self._signed_in = False

    async def select_notes(
        self,
        partitions: Sequence[str],
        ids: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
    ) -> list[RemoteNote]:
        client = await self.__get_client()
        query = (
            client.table(NOTES_TABLE)
            .select("*")
            .in_("_partition", list(partitions))
            .eq("deleted", False)
        )
        if ids is not None:
            query = query.in_("id", list(ids))
        if title is not None:
            query = query.eq("title", title)
        try:
            response = await query.execute()
        except (APIError, httpx.HTTPError) as e:
            raise RemoteStoreError(_error_message(e)) from e
        return list(response.data or [])

    async def upsert_notes(self, notes: Sequence[RemoteNote]) -> None:
        client = await self.__get_client()
        try:
            await (
                client.table(NOTES_TABLE)
                .upsert([dict(note) for note in notes], on_conflict="id")
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise RemoteStoreError(_error_message(e)) from e

    async def insert_note(self, note: RemoteNote) -> RemoteNote:
        client = await self.__get_client()
        try:
            response = await client.table(NOTES_TABLE).insert(dict(note)).execute()
        except (APIError, httpx.HTTPError) as e:
            raise RemoteStoreError(_error_message(e)) from e
        return response.data[0] if response.data else note

    async def subscribe(
        self, partitions: Sequence[str], callback: RemoteNoteCallback
    ) -> None:
        client = await self.__get_client()
        await client.remove_all_channels()
        loop = asyncio.get_running_loop()
        allowed = set(partitions)

        def handle_change(payload: dict[str, Any]) -> None:
            data = payload.get("data", payload)
            record = data.get("record") or data.get("new")
            # The feed is table wide, so other tenants are dropped here
            if not record or record.get("_partition") not in allowed:
                return
            asyncio.run_coroutine_threadsafe(callback(record), loop)

        channel = client.channel(NOTES_CHANNEL)
        channel.on_postgres_changes(
            "*", schema="public", table=NOTES_TABLE, callback=handle_change
        )
        await channel.subscribe()

    async def unsubscribe(self) -> None:
        if self._client is not None:
            await self._client.remove_all_channels()


def _error_message(error: Exception) -> str:
    if isinstance(error, APIError) and error.message:
        return error.message
    return str(error)
