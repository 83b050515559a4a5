"""SQLAlchemy implementation of ITenantRepository.

Runs on a tenant-scoped session: the row isolation events confine every
statement to the caller's own tenant row, so a lookup of any other tenant
id finds nothing.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId, TenantStatus
from iam.infrastructure.models import TenantModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.repositories import ITenantRepository
from shared_kernel.exceptions import ResourceNotFoundError


class TenantRepository(ITenantRepository):
    """Repository managing storage for Tenant aggregates.

    Tenants are simple aggregates with no relationships to reconstitute.
    Creation is an administrative concern (see TenantBootstrapService), so
    ``save`` only ever updates the caller's own tenant.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: Tenant-scoped AsyncSession
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist changes to an existing tenant.

        Args:
            tenant: The Tenant aggregate to persist

        Raises:
            ResourceNotFoundError: If the tenant row is not visible
        """
        model = await self._get_model(tenant.id)
        if model is None:
            self._probe.tenant_not_found(tenant.id.value)
            raise ResourceNotFoundError()

        model.name = tenant.name
        model.plan = tenant.plan
        model.status = tenant.status.value
        await self._session.flush()

        self._probe.tenant_saved(tenant.id.value)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch tenant metadata.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found or not visible
        """
        model = await self._get_model(tenant_id)
        if model is None:
            self._probe.tenant_not_found(tenant_id.value)
            return None

        self._probe.tenant_retrieved(tenant_id.value)
        return self._to_domain(model)

    async def _get_model(self, tenant_id: TenantId) -> TenantModel | None:
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            plan=model.plan,
            status=TenantStatus(model.status),
        )
