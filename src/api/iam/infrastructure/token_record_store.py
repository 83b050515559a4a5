"""Database-backed replay and revocation store.

Shares token state between API processes through the ``token_records``
table. Every operation runs in its own short transaction on a plain
(unbound) session: token records are consulted before an AuthContext
exists and are not tenant-isolated.

``consume_once`` is a single ``INSERT ... ON CONFLICT DO UPDATE ... WHERE
... RETURNING`` statement, so the database decides atomically which of two
concurrent redemptions wins.

Rows stay authoritative for ``retention_grace`` past their expiry so that a
token the validator still accepts under its clock-skew leeway cannot be
redeemed or used again after revocation.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import and_, case, delete, false, or_, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iam.infrastructure.models import TokenRecordModel
from iam.infrastructure.observability import (
    DefaultTokenRecordStoreProbe,
    TokenRecordStoreProbe,
)
from shared_kernel.auth.replay_store import ReplayStoreUnavailableError


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _epoch(moment: datetime) -> int:
    return int(moment.timestamp())


class SqlTokenRecordStore:
    """ReplayStore implementation on the token_records table."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        default_revocation_ttl: timedelta = timedelta(hours=24),
        retention_grace: timedelta = timedelta(seconds=30),
        probe: TokenRecordStoreProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the store.

        Args:
            sessionmaker: Factory for short-lived sessions
            default_revocation_ttl: How long to remember revocations of
                tokens whose expiry is unknown
            retention_grace: How long past expiry rows are kept; at least
                the validator's leeway
            probe: Optional domain probe for observability
            clock: Source of the current time, injectable for tests
        """
        self._sessionmaker = sessionmaker
        self._default_revocation_ttl = default_revocation_ttl
        self._retention_grace = retention_grace
        self._probe = probe or DefaultTokenRecordStoreProbe()
        self._clock = clock

    def _insert(self, session: AsyncSession) -> Any:
        """Pick the dialect's insert construct supporting ON CONFLICT."""
        if session.bind is not None and session.bind.dialect.name == "sqlite":
            return sqlite_insert(TokenRecordModel)
        return postgresql_insert(TokenRecordModel)

    def _horizon(self, now: datetime) -> int:
        """Rows expiring at or before this epoch second are stale."""
        return _epoch(now - self._retention_grace)

    def _expiry(self, expires_at: datetime | None, now: datetime) -> int:
        return _epoch(expires_at or now + self._default_revocation_ttl)

    async def record_issued(self, token_id: str, expires_at: datetime) -> None:
        now = self._clock()
        stale = TokenRecordModel.expires_at <= self._horizon(now)

        async def run(session: AsyncSession) -> None:
            stmt = self._insert(session).values(
                token_id=token_id,
                expires_at=_epoch(expires_at),
                revoked=False,
                consumed=False,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[TokenRecordModel.token_id],
                set_={
                    "expires_at": stmt.excluded.expires_at,
                    "revoked": False,
                    "consumed": False,
                },
                where=stale,
            )
            await session.execute(stmt)

        await self._run("record_issued", run)

    async def revoke(self, token_id: str, expires_at: datetime | None = None) -> None:
        now = self._clock()
        stale = TokenRecordModel.expires_at <= self._horizon(now)

        async def run(session: AsyncSession) -> None:
            stmt = self._insert(session).values(
                token_id=token_id,
                expires_at=self._expiry(expires_at, now),
                revoked=True,
                consumed=False,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[TokenRecordModel.token_id],
                set_={
                    "revoked": True,
                    "consumed": case(
                        (stale, false()), else_=TokenRecordModel.consumed
                    ),
                    "expires_at": case(
                        (stale, stmt.excluded.expires_at),
                        else_=TokenRecordModel.expires_at,
                    ),
                },
            )
            await session.execute(stmt)

        await self._run("revoke", run)
        self._probe.token_revoked(token_id)

    async def is_revoked_or_consumed(self, token_id: str) -> bool:
        now = self._clock()

        async def run(session: AsyncSession) -> bool:
            stmt = select(TokenRecordModel.token_id).where(
                TokenRecordModel.token_id == token_id,
                TokenRecordModel.expires_at > self._horizon(now),
                or_(TokenRecordModel.revoked, TokenRecordModel.consumed),
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none() is not None

        return await self._run("is_revoked_or_consumed", run)

    async def consume_once(
        self, token_id: str, expires_at: datetime | None = None
    ) -> bool:
        now = self._clock()
        stale = TokenRecordModel.expires_at <= self._horizon(now)
        redeemable = or_(
            stale,
            and_(
                TokenRecordModel.consumed == false(),
                TokenRecordModel.revoked == false(),
            ),
        )

        async def run(session: AsyncSession) -> bool:
            stmt = self._insert(session).values(
                token_id=token_id,
                expires_at=self._expiry(expires_at, now),
                revoked=False,
                consumed=True,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[TokenRecordModel.token_id],
                set_={
                    "consumed": True,
                    "revoked": case(
                        (stale, false()), else_=TokenRecordModel.revoked
                    ),
                    "expires_at": case(
                        (stale, stmt.excluded.expires_at),
                        else_=TokenRecordModel.expires_at,
                    ),
                },
                where=redeemable,
            ).returning(TokenRecordModel.token_id)
            result = await session.execute(stmt)
            return result.scalar_one_or_none() is not None

        succeeded = await self._run("consume_once", run)
        self._probe.token_consumed(token_id, succeeded)
        return succeeded

    async def purge_expired(self) -> int:
        now = self._clock()

        async def run(session: AsyncSession) -> int:
            stmt = (
                delete(TokenRecordModel)
                .where(TokenRecordModel.expires_at <= self._horizon(now))
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            return result.rowcount or 0

        count = await self._run("purge_expired", run)
        if count:
            self._probe.expired_records_purged(count)
        return count

    async def _run(self, operation: str, work: Callable[[AsyncSession], Any]) -> Any:
        """Run one unit of work in its own transaction.

        Raises:
            ReplayStoreUnavailableError: If the database cannot be reached
        """
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    return await work(session)
        except SQLAlchemyError as e:
            self._probe.store_unavailable(operation, e)
            raise ReplayStoreUnavailableError(
                f"Token record store failed during {operation}"
            ) from e
