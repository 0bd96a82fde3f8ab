"""
test_auto_sync.py
Tests for the periodic sync timer
"""
import asyncio

import pytest

from notesync.service.auto_sync import AutoSync


class SlowSyncService:
    """Sync that only finishes once released."""

    def __init__(self):
        self.calls = 0
        self.finished = 0
        self.release = asyncio.Event()

    async def sync(self):
        self.calls += 1
        await self.release.wait()
        self.finished += 1
        return True


class TestAutoSync:
    @pytest.mark.asyncio
    async def test_overlapping_runs_are_skipped(self):
        service = SlowSyncService()
        auto_sync = AutoSync(service)

        first = asyncio.create_task(auto_sync.trigger_sync())
        await asyncio.sleep(0)

        assert auto_sync.sync_in_progress is True
        assert await auto_sync.trigger_sync() is None

        service.release.set()
        assert await first is True
        assert service.calls == 1
        assert auto_sync.sync_in_progress is False

    @pytest.mark.asyncio
    async def test_enable_syncs_immediately(self):
        service = SlowSyncService()
        service.release.set()
        auto_sync = AutoSync(service, interval_minutes=30)

        auto_sync.enable()
        await asyncio.sleep(0.01)

        assert auto_sync.is_enabled
        assert service.finished == 1

        auto_sync.disable()
        await asyncio.sleep(0)
        assert not auto_sync.is_enabled

    @pytest.mark.asyncio
    async def test_disable_lets_running_sync_finish(self):
        service = SlowSyncService()
        auto_sync = AutoSync(service, interval_minutes=30)

        auto_sync.enable()
        await asyncio.sleep(0.01)
        assert service.calls == 1

        auto_sync.disable()
        await asyncio.sleep(0)
        service.release.set()
        await auto_sync.wait_for_running_sync()

        assert service.finished == 1
        assert auto_sync.sync_in_progress is False

    @pytest.mark.asyncio
    async def test_runs_repeat_on_interval(self):
        service = SlowSyncService()
        service.release.set()
        auto_sync = AutoSync(service, interval_minutes=0.01 / 60)

        auto_sync.enable()
        await asyncio.sleep(0.1)
        auto_sync.disable()

        assert service.finished >= 2
