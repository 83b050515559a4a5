"""Audit trail query service."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from audit.ports.repositories import AuditEventFilter, IAuditEventRepository
from shared_kernel.audit import AuditEvent
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.authorization import Action, AuthorizationEngine, ResourceType


class AuditQueryService:
    """Lists the caller's tenant audit trail.

    Reading the trail is itself an authorized, and therefore audited,
    operation; only tenant admins are permitted.
    """

    def __init__(
        self,
        repository: IAuditEventRepository,
        session: AsyncSession,
        authz: AuthorizationEngine,
    ):
        self._repository = repository
        self._session = session
        self._authz = authz

    async def list_events(
        self, context: AuthContext, criteria: AuditEventFilter
    ) -> list[AuditEvent]:
        """List audit events of the caller's tenant.

        Raises:
            ForbiddenError: If the caller's role may not read the trail
        """
        async with self._session.begin():
            await self._authz.require(context, Action.LIST, ResourceType.AUDIT_EVENT)
            return await self._repository.list_events(criteria)
