"""Replay and revocation store for token identifiers.

Tracks ``token_id -> {expires_at, revoked, consumed}``. Entries are evicted
once the token they describe has expired and the retention grace has
passed, which bounds storage growth. The grace must cover the validator's
clock-skew leeway: the validator still accepts a token for that long after
``exp``, so its revoked or consumed state has to outlive ``exp`` as well.

``consume_once`` is the atomic check-and-set used by single-use flows
(refresh token rotation, sensitive operations). Two concurrent redemptions
of the same token id never both succeed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class ReplayStoreUnavailableError(Exception):
    """Raised when the replay store cannot answer.

    The token validator treats this as an authentication failure so that an
    outage never lets a revoked token through.
    """

    pass


class ReplayStore(Protocol):
    """Port for replay and revocation tracking."""

    async def record_issued(self, token_id: str, expires_at: datetime) -> None:
        """Start tracking a freshly issued token until it expires."""
        ...

    async def revoke(self, token_id: str, expires_at: datetime | None = None) -> None:
        """Mark a token as revoked.

        Args:
            token_id: The token identifier
            expires_at: When the token expires; unknown tokens without an
                expiry are tracked for the store's default revocation TTL
        """
        ...

    async def is_revoked_or_consumed(self, token_id: str) -> bool:
        """Whether the token was revoked or already redeemed."""
        ...

    async def consume_once(
        self, token_id: str, expires_at: datetime | None = None
    ) -> bool:
        """Atomically redeem a single-use token.

        Returns:
            True for the first caller only; False if the token was already
            consumed or has been revoked
        """
        ...

    async def purge_expired(self) -> int:
        """Drop entries whose tokens expired longer ago than the retention grace.

        Returns:
            Number of entries removed
        """
        ...


@dataclass
class TokenRecord:
    """Replay-store entry for one token id."""

    token_id: str
    expires_at: datetime
    revoked: bool = False
    consumed: bool = False


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InMemoryReplayStore:
    """Process-local replay store guarded by a single asyncio lock.

    Suitable for a single API process and for tests. Multi-process
    deployments use the database-backed store.
    """

    def __init__(
        self,
        default_revocation_ttl: timedelta = timedelta(hours=24),
        retention_grace: timedelta = timedelta(seconds=30),
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the store.

        Args:
            default_revocation_ttl: How long to remember revocations of
                tokens whose expiry is unknown
            retention_grace: How long past expiry entries are kept; at least
                the validator's leeway
            clock: Source of the current time, injectable for tests
        """
        self._records: dict[str, TokenRecord] = {}
        self._lock = asyncio.Lock()
        self._default_revocation_ttl = default_revocation_ttl
        self._retention_grace = retention_grace
        self._clock = clock

    def _is_stale(self, record: TokenRecord, now: datetime) -> bool:
        return record.expires_at + self._retention_grace <= now

    def _live_record(self, token_id: str, now: datetime) -> TokenRecord | None:
        record = self._records.get(token_id)
        if record is None:
            return None
        if self._is_stale(record, now):
            del self._records[token_id]
            return None
        return record

    async def record_issued(self, token_id: str, expires_at: datetime) -> None:
        async with self._lock:
            now = self._clock()
            if self._live_record(token_id, now) is None:
                self._records[token_id] = TokenRecord(
                    token_id=token_id, expires_at=expires_at
                )

    async def revoke(self, token_id: str, expires_at: datetime | None = None) -> None:
        async with self._lock:
            now = self._clock()
            record = self._live_record(token_id, now)
            if record is None:
                record = TokenRecord(
                    token_id=token_id,
                    expires_at=expires_at or now + self._default_revocation_ttl,
                )
                self._records[token_id] = record
            record.revoked = True

    async def is_revoked_or_consumed(self, token_id: str) -> bool:
        async with self._lock:
            record = self._live_record(token_id, self._clock())
            return record is not None and (record.revoked or record.consumed)

    async def consume_once(
        self, token_id: str, expires_at: datetime | None = None
    ) -> bool:
        async with self._lock:
            now = self._clock()
            record = self._live_record(token_id, now)
            if record is None:
                self._records[token_id] = TokenRecord(
                    token_id=token_id,
                    expires_at=expires_at or now + self._default_revocation_ttl,
                    consumed=True,
                )
                return True
            if record.revoked or record.consumed:
                return False
            record.consumed = True
            return True

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [
                token_id
                for token_id, record in self._records.items()
                if self._is_stale(record, now)
            ]
            for token_id in expired:
                del self._records[token_id]
            return len(expired)

    def __len__(self) -> int:
        return len(self._records)
