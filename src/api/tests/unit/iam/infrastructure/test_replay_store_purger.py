"""Unit tests for the background replay store purger."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from iam.infrastructure.observability import ReplayStorePurgeProbe
from iam.infrastructure.replay_store_purger import ReplayStorePurger
from shared_kernel.auth import (
    InMemoryReplayStore,
    ReplayStore,
    ReplayStoreUnavailableError,
)


@pytest.fixture
def mock_probe():
    return Mock(spec=ReplayStorePurgeProbe)


class TestPurgeOnce:
    """Tests for a single purge pass."""

    @pytest.mark.asyncio
    async def test_drops_only_entries_past_retention(self, mock_probe):
        now = datetime.now(UTC)
        store = InMemoryReplayStore()
        await store.record_issued("long-gone", now - timedelta(hours=1))
        await store.revoke("still-valid", now + timedelta(minutes=5))
        purger = ReplayStorePurger(store, probe=mock_probe)

        removed = await purger.purge_once()

        assert removed == 1
        assert len(store) == 1
        assert await store.is_revoked_or_consumed("still-valid")
        mock_probe.purge_completed.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_unreachable_store_is_reported_not_raised(self, mock_probe):
        store = AsyncMock(spec=ReplayStore)
        error = ReplayStoreUnavailableError("database unreachable")
        store.purge_expired.side_effect = error
        purger = ReplayStorePurger(store, probe=mock_probe)

        assert await purger.purge_once() == 0
        mock_probe.purge_failed.assert_called_once_with(error)
        mock_probe.purge_completed.assert_not_called()


class TestLifecycle:
    """Tests for starting and stopping the purge loop."""

    @pytest.mark.asyncio
    async def test_start_runs_a_pass_and_stop_cancels(self, mock_probe):
        store = AsyncMock(spec=ReplayStore)
        store.purge_expired.return_value = 0
        purger = ReplayStorePurger(store, interval_seconds=3600, probe=mock_probe)

        await purger.start()
        await asyncio.sleep(0)

        assert purger.running
        store.purge_expired.assert_awaited_once()
        mock_probe.worker_started.assert_called_once_with(interval_seconds=3600)

        await purger.stop()

        assert not purger.running
        mock_probe.worker_stopped.assert_called_once()

    @pytest.mark.asyncio
    async def test_second_start_is_ignored(self, mock_probe):
        store = AsyncMock(spec=ReplayStore)
        store.purge_expired.return_value = 0
        purger = ReplayStorePurger(store, interval_seconds=3600, probe=mock_probe)

        await purger.start()
        await purger.start()
        await purger.stop()

        mock_probe.worker_started.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_without_start_is_a_no_op(self, mock_probe):
        purger = ReplayStorePurger(AsyncMock(spec=ReplayStore), probe=mock_probe)

        await purger.stop()

        mock_probe.worker_stopped.assert_not_called()

    @pytest.mark.asyncio
    async def test_loop_survives_store_outage(self, mock_probe):
        store = AsyncMock(spec=ReplayStore)
        outcomes = [ReplayStoreUnavailableError("down")]

        async def purge_expired() -> int:
            if outcomes:
                raise outcomes.pop()
            return 3

        store.purge_expired.side_effect = purge_expired
        purger = ReplayStorePurger(store, interval_seconds=0.01, probe=mock_probe)

        await purger.start()
        for _ in range(50):
            if store.purge_expired.await_count >= 2:
                break
            await asyncio.sleep(0.01)
        await purger.stop()

        mock_probe.purge_failed.assert_called_once()
        mock_probe.purge_completed.assert_any_call(3)
