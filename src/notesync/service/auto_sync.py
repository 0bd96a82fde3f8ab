# SPDX-License-Identifier: MIT

import asyncio
from typing import Optional

from loguru import logger

from notesync.service.sync import SyncService


class AutoSync:
    """
    Runs a sync now and then every `interval_minutes`.

    Disabling only stops future runs; a run already in flight finishes.
    A run is never started while another one is still going.
    """

    def __init__(self, sync_service: SyncService, interval_minutes: float = 30) -> None:
        self.sync_service = sync_service
        self.interval_minutes = interval_minutes
        self.sync_in_progress = False
        self._task: Optional[asyncio.Task[None]] = None
        self._running_sync: Optional[asyncio.Task[bool]] = None

    @property
    def is_enabled(self) -> bool:
        return self._task is not None and not self._task.done()

    def enable(self) -> None:
        self.disable()
        self._task = asyncio.create_task(self.__sync_loop())
        logger.info(f"Auto sync every {self.interval_minutes} minutes")

    def disable(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Auto sync disabled")

    async def trigger_sync(self) -> Optional[bool]:
        """Run a sync now unless one is already running. None means skipped."""
        if self.sync_in_progress:
            logger.debug("Sync already in progress, skipped")
            return None
        self.sync_in_progress = True
        try:
            self._running_sync = asyncio.create_task(self.sync_service.sync())
            # Shielded so cancelling the loop never interrupts a run midway
            return await asyncio.shield(self._running_sync)
        finally:
            if self._running_sync is not None and self._running_sync.done():
                self.sync_in_progress = False
                self._running_sync = None
            elif self._running_sync is not None:
                self._running_sync.add_done_callback(self.__on_sync_done)

    def __on_sync_done(self, task: "asyncio.Task[bool]") -> None:
        self.sync_in_progress = False
        self._running_sync = None

    async def wait_for_running_sync(self) -> None:
        if self._running_sync is not None:
            await asyncio.wait({self._running_sync})

    async def __sync_loop(self) -> None:
        while True:
            await self.trigger_sync()
            await asyncio.sleep(self.interval_minutes * 60)
