"""SQL-backed audit recorder.

Each call writes through its own tenant-scoped session and transaction.
A decision recorded while the caller's transaction is still open
therefore survives that transaction being rolled back, which is exactly
what happens to a request that was denied.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audit.infrastructure.models import AuditEventModel
from infrastructure.database.tenant_session import tenant_scoped_session
from shared_kernel.audit import AuditEvent, AuditProbe, DefaultAuditProbe
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.exceptions import AuditWriteError, ShieldedError


class SqlAuditRecorder:
    """AuditRecorder writing to the audit_events table.

    Write failures are logged and swallowed: auditing must never block
    the operation being audited.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        probe: AuditProbe | None = None,
    ):
        """Initialize the recorder.

        Args:
            sessionmaker: Factory for the recorder's own sessions
            probe: Optional domain probe for observability
        """
        self._sessionmaker = sessionmaker
        self._probe = probe or DefaultAuditProbe()

    async def record(self, context: AuthContext, event: AuditEvent) -> None:
        """Append a single event on behalf of the given context."""
        await self.record_many(context, [event])

    async def record_many(
        self, context: AuthContext, events: Sequence[AuditEvent]
    ) -> None:
        """Append several events in one transaction.

        The rows' tenant is always the context's tenant, whatever the
        events carry.
        """
        if not events:
            return

        try:
            async with tenant_scoped_session(self._sessionmaker, context) as session:
                async with session.begin():
                    session.add_all(
                        [AuditEventModel.from_event(event) for event in events]
                    )
        except (SQLAlchemyError, ShieldedError, OSError) as e:
            error = AuditWriteError(f"Failed to write {len(events)} audit event(s)")
            error.__cause__ = e
            self._probe.audit_write_failed(
                tenant_id=context.tenant_id,
                actions=[event.action for event in events],
                error=error,
            )
            return

        self._probe.events_recorded(tenant_id=context.tenant_id, count=len(events))
