"""
test_vault.py
Tests for the file store and its change events
"""
import asyncio

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from notesync.repository.vault import VaultEventHandler


class TestVault:
    @pytest.mark.asyncio
    async def test_list_files_skips_hidden_folders(self, vault, vault_dir):
        (vault_dir / "A.md").write_text("a")
        (vault_dir / "Sub").mkdir()
        (vault_dir / "Sub" / "B.md").write_text("b")
        (vault_dir / ".obsidian").mkdir()
        (vault_dir / ".obsidian" / "app.json").write_text("{}")

        assert await vault.list_files() == ["A.md", "Sub/B.md"]

    @pytest.mark.asyncio
    async def test_create_never_overwrites(self, vault):
        await vault.create("A.md", "first")

        with pytest.raises(FileExistsError):
            await vault.create("A.md", "second")
        assert await vault.read("A.md") == "first"

    @pytest.mark.asyncio
    async def test_rename_creates_parent(self, vault, vault_dir):
        await vault.create("A.md", "a")

        await vault.rename("A.md", "Deep/Folder/B.md")

        assert (vault_dir / "Deep" / "Folder" / "B.md").read_text() == "a"
        assert not await vault.exists("A.md")

    @pytest.mark.asyncio
    async def test_delete_folder(self, vault, vault_dir):
        await vault.create_folder("Folder/Sub")
        await vault.create("Folder/Sub/A.md", "a")

        await vault.delete("Folder")

        assert not (vault_dir / "Folder").exists()

    @pytest.mark.asyncio
    async def test_cancel_stops_observer(self, vault):
        async def on_modify(path):
            pass

        subscription = vault.subscribe(on_modify)
        await subscription.cancel()

        assert not subscription.observer.is_alive()

    def test_relative_path(self, vault, vault_dir, tmp_path):
        assert vault.relative_path(str(vault_dir / "Sub" / "A.md")) == "Sub/A.md"
        assert vault.relative_path(str(tmp_path / "outside.md")) is None


class TestVaultEventHandler:
    @pytest.mark.asyncio
    async def test_events_are_forwarded(self, vault, vault_dir):
        modified, deleted = [], []

        async def on_modify(path):
            modified.append(path)

        async def on_delete(path):
            deleted.append(path)

        handler = VaultEventHandler(vault, asyncio.get_running_loop(), on_modify, on_delete)
        handler.on_modified(FileModifiedEvent(str(vault_dir / "A.md")))
        handler.on_moved(FileMovedEvent(str(vault_dir / "B.md"), str(vault_dir / "Sub" / "C.md")))
        handler.on_deleted(FileDeletedEvent(str(vault_dir / "D.md")))
        handler.on_modified(DirModifiedEvent(str(vault_dir / "Sub")))
        await asyncio.sleep(0.01)

        # A move is reported as a change of the destination only
        assert modified == ["A.md", "Sub/C.md"]
        assert deleted == ["D.md"]

    @pytest.mark.asyncio
    async def test_delete_events_without_handler(self, vault, vault_dir):
        modified = []

        async def on_modify(path):
            modified.append(path)

        handler = VaultEventHandler(vault, asyncio.get_running_loop(), on_modify, None)
        handler.on_deleted(FileDeletedEvent(str(vault_dir / "A.md")))
        await asyncio.sleep(0.01)

        assert modified == []
