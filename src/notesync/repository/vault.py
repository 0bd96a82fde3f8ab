# SPDX-License-Identifier: MIT

import asyncio
import os
import shutil
from collections.abc import Awaitable, Callable
from pathlib import Path, PurePosixPath
from typing import Optional

import pendulum
from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from notesync.time import datetime_from_timestamp

type VaultCallback = Callable[[str], Awaitable[None]]


class VaultEventHandler(FileSystemEventHandler):
    """Forwards watchdog events from the observer thread onto the event loop."""

    def __init__(
        self,
        vault: "Vault",
        loop: asyncio.AbstractEventLoop,
        on_modify: VaultCallback,
        on_delete: Optional[VaultCallback],
    ) -> None:
        self.vault = vault
        self.loop = loop
        self.on_modify = on_modify
        self.on_delete = on_delete

    def __dispatch(self, callback: Optional[VaultCallback], src_path: bytes | str) -> None:
        if callback is None:
            return
        path = self.vault.relative_path(os.fsdecode(src_path))
        if path is None:
            return
        asyncio.run_coroutine_threadsafe(callback(path), self.loop)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.__dispatch(self.on_modify, event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.__dispatch(self.on_modify, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # A rename is a modification of the destination, never a delete
        if not event.is_directory:
            self.__dispatch(self.on_modify, event.dest_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.__dispatch(self.on_delete, event.src_path)


class VaultSubscription:
    def __init__(self, observer: BaseObserver) -> None:
        self.observer = observer

    async def cancel(self) -> None:
        self.observer.stop()
        await asyncio.to_thread(self.observer.join)


class Vault:
    """
    File store rooted at a directory.

    Paths are POSIX style and relative to the root, e.g. "Notes/Foo.md".
    Blocking file system calls run in a worker thread so they never stall
    the event loop.
    """

    def __init__(self, root: Path) -> None:
        self.root = root.expanduser().resolve()

    def full_path(self, path: str) -> Path:
        return self.root / PurePosixPath(path)

    def relative_path(self, full_path: str) -> Optional[str]:
        try:
            return Path(full_path).resolve().relative_to(self.root).as_posix()
        except ValueError:
            return None

    def __list_files(self) -> list[str]:
        files = []
        for directory, directory_names, file_names in os.walk(self.root):
            # Skip hidden folders like .obsidian and .git
            directory_names[:] = [d for d in directory_names if not d.startswith(".")]
            for file_name in file_names:
                files.append(
                    (Path(directory) / file_name).relative_to(self.root).as_posix()
                )
        return sorted(files)

    async def list_files(self) -> list[str]:
        return await asyncio.to_thread(self.__list_files)

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self.full_path(path).read_text, encoding="utf-8")

    async def create(self, path: str, text: str) -> None:
        def create() -> None:
            with self.full_path(path).open("x", encoding="utf-8") as file:
                file.write(text)

        await asyncio.to_thread(create)
        logger.debug(f"Created {path}")

    async def create_binary(self, path: str, data: bytes) -> None:
        def create() -> None:
            with self.full_path(path).open("xb") as file:
                file.write(data)

        await asyncio.to_thread(create)
        logger.debug(f"Created {path}")

    async def modify(self, path: str, text: str) -> None:
        await asyncio.to_thread(self.full_path(path).write_text, text, encoding="utf-8")
        logger.debug(f"Modified {path}")

    async def rename(self, path: str, new_path: str) -> None:
        target = self.full_path(new_path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(self.full_path(path).rename, target)
        logger.debug(f"Renamed {path} to {new_path}")

    async def delete(self, path: str) -> None:
        full_path = self.full_path(path)
        if full_path.is_dir():
            await asyncio.to_thread(shutil.rmtree, full_path)
        else:
            await asyncio.to_thread(full_path.unlink)
        logger.debug(f"Deleted {path}")

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self.full_path(path).exists)

    async def create_folder(self, path: str) -> None:
        await asyncio.to_thread(self.full_path(path).mkdir, parents=True, exist_ok=True)

    async def mtime(self, path: str) -> pendulum.DateTime:
        stat = await asyncio.to_thread(self.full_path(path).stat)
        return datetime_from_timestamp(stat.st_mtime)

    def subscribe(
        self, on_modify: VaultCallback, on_delete: Optional[VaultCallback] = None
    ) -> VaultSubscription:
        """
        Watch the vault for file changes.

        Must be called from a running event loop; callbacks run on it.
        """
        handler = VaultEventHandler(
            self, asyncio.get_running_loop(), on_modify, on_delete
        )
        observer = Observer()
        observer.schedule(handler, str(self.root), recursive=True)
        observer.start()
        return VaultSubscription(observer)
