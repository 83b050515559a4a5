"""Tenant application service for IAM bounded context.

Handles the caller's own tenant: reading it and renaming it. Tenants are
never listed, created or deleted through a request.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultTenantServiceProbe, TenantServiceProbe
from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId
from iam.ports.repositories import ITenantRepository
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.authorization import Action, AuthorizationEngine, ResourceType


class TenantService:
    """Application service for the caller's tenant."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        session: AsyncSession,
        authz: AuthorizationEngine,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            session: Tenant-scoped session for transaction management
            authz: Authorization engine deciding every operation
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._session = session
        self._authz = authz
        self._probe = probe or DefaultTenantServiceProbe()

    async def get_current(self, context: AuthContext) -> Tenant:
        """Retrieve the tenant the caller belongs to.

        Raises:
            ResourceNotFoundError: If the tenant row is not visible
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(
                TenantId(value=context.tenant_id)
            )
            await self._authz.require(
                context,
                Action.READ,
                ResourceType.TENANT,
                resource=tenant,
                resource_id=context.tenant_id,
            )
        assert tenant is not None

        self._probe.tenant_retrieved(tenant_id=tenant.id.value)
        return tenant

    async def rename(self, context: AuthContext, name: str) -> Tenant:
        """Rename the caller's tenant.

        Raises:
            ForbiddenError: If the caller's role may not update the tenant
            ValueError: If the name is empty
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(
                TenantId(value=context.tenant_id)
            )
            await self._authz.require(
                context,
                Action.UPDATE,
                ResourceType.TENANT,
                resource=tenant,
                resource_id=context.tenant_id,
            )
            assert tenant is not None

            tenant.rename(name)
            await self._tenant_repository.save(tenant)

        self._probe.tenant_renamed(tenant_id=tenant.id.value, name=name)
        return tenant
