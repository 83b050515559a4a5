"""Unit tests for the in-memory replay store."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from shared_kernel.auth import InMemoryReplayStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryReplayStore:
    return InMemoryReplayStore(default_revocation_ttl=timedelta(hours=2), clock=clock)


class TestRevocation:
    """Tests for revoke and is_revoked_or_consumed."""

    @pytest.mark.asyncio
    async def test_unknown_token_is_not_revoked(self, store):
        assert await store.is_revoked_or_consumed("t-1") is False

    @pytest.mark.asyncio
    async def test_issued_token_is_not_revoked(self, store, clock):
        await store.record_issued("t-1", clock.now + timedelta(minutes=10))

        assert await store.is_revoked_or_consumed("t-1") is False

    @pytest.mark.asyncio
    async def test_revoked_token_is_reported(self, store, clock):
        await store.record_issued("t-1", clock.now + timedelta(minutes=10))

        await store.revoke("t-1")

        assert await store.is_revoked_or_consumed("t-1") is True

    @pytest.mark.asyncio
    async def test_revoking_unknown_token_uses_default_ttl(self, store, clock):
        await store.revoke("t-1")

        clock.advance(timedelta(hours=1))
        assert await store.is_revoked_or_consumed("t-1") is True

        clock.advance(timedelta(hours=2))
        assert await store.is_revoked_or_consumed("t-1") is False

    @pytest.mark.asyncio
    async def test_revocation_cannot_be_undone_by_reissue(self, store, clock):
        expires_at = clock.now + timedelta(minutes=10)
        await store.revoke("t-1", expires_at)

        await store.record_issued("t-1", expires_at)

        assert await store.is_revoked_or_consumed("t-1") is True


class TestConsumeOnce:
    """Tests for single-use redemption."""

    @pytest.mark.asyncio
    async def test_first_redemption_succeeds(self, store, clock):
        assert await store.consume_once("t-1", clock.now + timedelta(minutes=5))

    @pytest.mark.asyncio
    async def test_second_redemption_fails(self, store, clock):
        expires_at = clock.now + timedelta(minutes=5)
        await store.consume_once("t-1", expires_at)

        assert await store.consume_once("t-1", expires_at) is False
        assert await store.is_revoked_or_consumed("t-1") is True

    @pytest.mark.asyncio
    async def test_revoked_token_cannot_be_redeemed(self, store, clock):
        await store.revoke("t-1", clock.now + timedelta(minutes=5))

        assert await store.consume_once("t-1") is False

    @pytest.mark.asyncio
    async def test_concurrent_redemptions_succeed_exactly_once(self, store, clock):
        expires_at = clock.now + timedelta(minutes=5)

        results = await asyncio.gather(
            *(store.consume_once("t-1", expires_at) for _ in range(20))
        )

        assert results.count(True) == 1


class TestPurge:
    """Tests for eviction of expired entries."""

    @pytest.mark.asyncio
    async def test_purge_removes_only_expired_entries(self, store, clock):
        await store.record_issued("short", clock.now + timedelta(minutes=1))
        await store.record_issued("long", clock.now + timedelta(hours=1))

        clock.advance(timedelta(minutes=5))
        removed = await store.purge_expired()

        assert removed == 1
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_forgotten_on_lookup(self, store, clock):
        await store.consume_once("t-1", clock.now + timedelta(minutes=1))

        clock.advance(timedelta(minutes=2))

        assert await store.is_revoked_or_consumed("t-1") is False
        assert len(store) == 0


class TestRetentionGrace:
    """Entries outlive expiry for as long as the validator's leeway."""

    @pytest.mark.asyncio
    async def test_consumed_token_stays_consumed_within_grace(self, store, clock):
        expires_at = clock.now + timedelta(minutes=1)
        assert await store.consume_once("t-1", expires_at)

        clock.advance(timedelta(minutes=1, seconds=20))

        assert await store.is_revoked_or_consumed("t-1") is True
        assert await store.consume_once("t-1", expires_at) is False

    @pytest.mark.asyncio
    async def test_revoked_token_stays_revoked_within_grace(self, store, clock):
        await store.revoke("t-1", clock.now + timedelta(minutes=1))

        clock.advance(timedelta(minutes=1, seconds=29))

        assert await store.is_revoked_or_consumed("t-1") is True
        assert await store.purge_expired() == 0

    @pytest.mark.asyncio
    async def test_entry_is_dropped_once_grace_has_passed(self, store, clock):
        await store.revoke("t-1", clock.now + timedelta(minutes=1))

        clock.advance(timedelta(minutes=1, seconds=30))

        assert await store.purge_expired() == 1
        assert await store.is_revoked_or_consumed("t-1") is False

    @pytest.mark.asyncio
    async def test_grace_is_configurable(self, clock):
        store = InMemoryReplayStore(retention_grace=timedelta(minutes=5), clock=clock)
        await store.revoke("t-1", clock.now + timedelta(minutes=1))

        clock.advance(timedelta(minutes=4))

        assert await store.is_revoked_or_consumed("t-1") is True
