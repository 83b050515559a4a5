"""SQLAlchemy implementation of IAuditEventRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from audit.infrastructure.models import AuditEventModel
from audit.ports.repositories import AuditEventFilter, IAuditEventRepository
from shared_kernel.audit import AuditEvent


class AuditEventRepository(IAuditEventRepository):
    """Reads the audit trail of the session's tenant, newest first."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a tenant-scoped session."""
        self._session = session

    async def list_events(self, criteria: AuditEventFilter) -> list[AuditEvent]:
        stmt = select(AuditEventModel)
        if criteria.action is not None:
            stmt = stmt.where(AuditEventModel.action == criteria.action)
        if criteria.resource_type is not None:
            stmt = stmt.where(AuditEventModel.resource_type == criteria.resource_type)
        if criteria.resource_id is not None:
            stmt = stmt.where(AuditEventModel.resource_id == criteria.resource_id)
        if criteria.user_id is not None:
            stmt = stmt.where(AuditEventModel.user_id == criteria.user_id)
        stmt = stmt.order_by(
            AuditEventModel.occurred_at.desc(), AuditEventModel.id.desc()
        ).limit(criteria.limit)

        result = await self._session.execute(stmt)
        return [model.to_event() for model in result.scalars().all()]
