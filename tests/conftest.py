"""
Shared fixtures: a temporary vault, an in-memory remote store and the
repositories and services wired on top of them.
"""

from collections.abc import Sequence
from copy import deepcopy
from pathlib import Path
from typing import Optional

import pytest

from notesync.backend.base import RemoteNoteCallback, Session
from notesync.errors import AuthenticationError, RemoteStoreError
from notesync.model.note import RemoteNote
from notesync.repository.local_note import LocalNoteRepository
from notesync.repository.remote_note import RemoteNoteRepository
from notesync.repository.vault import Vault
from notesync.service.sync import SyncService
from notesync.template.configuration import get_configuration_template

PARTITION = "user-1"
OTHER_PARTITION = "user-2"


class FakeBackend:
    """In-memory note table that records every write."""

    def __init__(self) -> None:
        self.notes: dict[str, RemoteNote] = {}
        self.upsert_calls: list[list[RemoteNote]] = []
        self.select_calls: list[dict] = []
        self.callback: Optional[RemoteNoteCallback] = None
        self.subscribed_partitions: list[str] = []
        self.fail_select = False
        self.fail_upsert = False
        self.signed_out = False

    def add(self, id: str, partition: str = PARTITION, **fields) -> RemoteNote:
        note: RemoteNote = {
            "id": id,
            "title": "",
            "content": "",
            "source": "",
            "created_at": "2024-03-15T12:00:00+00:00",
            "modified_at": "2024-03-15T12:00:00+00:00",
            "deleted": False,
            "encrypted": False,
            "_partition": partition,
        }
        note.update(fields)  # type: ignore[typeddict-item]
        self.notes[id] = note
        return note

    async def sign_in(self, email: str, password: str) -> Session:
        if password != "secret":
            raise AuthenticationError("Login failed - Invalid login credentials")
        return {"user_id": PARTITION, "firebase_id": "firebase-1", "email": email}

    async def sign_out(self) -> None:
        self.signed_out = True

    async def select_notes(
        self,
        partitions: Sequence[str],
        ids: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
    ) -> list[RemoteNote]:
        self.select_calls.append({"partitions": list(partitions), "ids": ids, "title": title})
        if self.fail_select:
            raise RemoteStoreError("Service unavailable")
        return [
            deepcopy(note)
            for note in self.notes.values()
            if note.get("_partition") in partitions
            and not note.get("deleted")
            and (ids is None or note["id"] in ids)
            and (title is None or note.get("title") == title)
        ]

    async def upsert_notes(self, notes: Sequence[RemoteNote]) -> None:
        if self.fail_upsert:
            raise RemoteStoreError("Service unavailable")
        self.upsert_calls.append([deepcopy(note) for note in notes])
        for note in notes:
            self.notes[note["id"]] = {**self.notes.get(note["id"], {}), **deepcopy(note)}  # type: ignore[typeddict-item]

    async def insert_note(self, note: RemoteNote) -> RemoteNote:
        self.notes[note["id"]] = deepcopy(note)
        return deepcopy(note)

    async def subscribe(
        self, partitions: Sequence[str], callback: RemoteNoteCallback
    ) -> None:
        self.subscribed_partitions = list(partitions)
        self.callback = callback

    async def unsubscribe(self) -> None:
        self.callback = None
        self.subscribed_partitions = []


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def vault(vault_dir: Path) -> Vault:
    return Vault(vault_dir)


@pytest.fixture
def config(vault_dir: Path):
    config = get_configuration_template()
    config["vault_path"] = str(vault_dir)
    config["notes_folder"] = "Notes"
    config["supabase_id"] = PARTITION
    return config


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def local_repository(vault: Vault, config) -> LocalNoteRepository:
    return LocalNoteRepository(vault, config)


@pytest.fixture
def remote_repository(backend: FakeBackend, config) -> RemoteNoteRepository:
    return RemoteNoteRepository(backend, config)


@pytest.fixture
def saved_sync_times() -> list:
    return []


@pytest.fixture
def notifications() -> list[str]:
    return []


@pytest.fixture
def sync_service(
    local_repository, remote_repository, config, saved_sync_times, notifications
) -> SyncService:
    return SyncService(
        local_repository,
        remote_repository,
        config,
        on_last_sync_time=saved_sync_times.append,
        notify=notifications.append,
    )


def write_note(vault_dir: Path, path: str, id: str, body: str = "", **frontmatter) -> Path:
    """Write a markdown file with a minimal front-matter block."""
    lines = ["---", f'id: "{id}"']
    lines += [f'{key}: "{value}"' for key, value in frontmatter.items()]
    lines += ["---", body]
    full_path = vault_dir / path
    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_text("\n".join(lines), encoding="utf-8")
    return full_path


@pytest.fixture
def note_file(vault_dir: Path):
    def _write(path: str, id: str, body: str = "", **frontmatter) -> Path:
        return write_note(vault_dir, path, id, body, **frontmatter)

    return _write
