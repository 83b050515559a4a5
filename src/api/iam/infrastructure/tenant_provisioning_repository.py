"""Administrative tenant writer.

Inserts a tenant and its first administrator with Core statements on a
session that carries no AuthContext. Core inserts against the tables do
not involve any mapper, so the row isolation events let them through;
everything else on such a session that touches an isolated model fails.

On PostgreSQL the connection must belong to a role with BYPASSRLS. The
transaction still publishes the new tenant id, because the ``tenant_id``
insert triggers read it.
"""

from __future__ import annotations

from sqlalchemy import insert, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iam.domain.aggregates import Tenant, User
from iam.infrastructure.models import TenantModel, UserModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.ports.repositories import ITenantProvisioningRepository

_SET_TENANT = text("SELECT set_config('app.tenant_id', :tenant_id, true)")


class TenantProvisioningRepository(ITenantProvisioningRepository):
    """Creates tenants on an administrative connection."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            sessionmaker: Factory for sessions on an administrative connection
            probe: Optional domain probe for observability
        """
        self._sessionmaker = sessionmaker
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def provision(self, tenant: Tenant, admin: User) -> None:
        """Insert the tenant row and its administrator in one transaction.

        Raises:
            DuplicateTenantSlugError: If the slug is already taken
        """
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    connection = await session.connection()
                    if connection.dialect.name == "postgresql":
                        await connection.execute(
                            _SET_TENANT, {"tenant_id": tenant.id.value}
                        )
                    await session.execute(
                        insert(TenantModel.__table__).values(
                            id=tenant.id.value,
                            name=tenant.name,
                            slug=tenant.slug,
                            plan=tenant.plan,
                            status=tenant.status.value,
                        )
                    )
                    await session.execute(
                        insert(UserModel.__table__).values(
                            id=admin.id.value,
                            tenant_id=tenant.id.value,
                            email=admin.email,
                            name=admin.name,
                            role=admin.role.value,
                            status=admin.status.value,
                        )
                    )
        except IntegrityError as e:
            if "slug" in str(e.orig):
                raise DuplicateTenantSlugError(
                    f"Tenant slug '{tenant.slug}' already exists"
                ) from e
            raise

        self._probe.tenant_saved(tenant.id.value)
