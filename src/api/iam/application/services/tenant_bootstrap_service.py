"""Tenant bootstrap service for IAM bounded context.

Creates a tenant together with its first tenant administrator. This is
the only way tenants come into existence: request-scoped sessions refuse
to insert tenant rows, and on PostgreSQL the ``tenants`` insert policy
rejects every row. Provisioning therefore runs through an administrative
repository, outside of any AuthContext.
"""

from __future__ import annotations

from iam.application.observability import DefaultTenantServiceProbe, TenantServiceProbe
from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import UserId
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.ports.repositories import ITenantProvisioningRepository
from shared_kernel.authorization.types import Role


class TenantBootstrapService:
    """Administrative provisioning of tenants.

    Unlike TenantService, this service:
    - Does not take an AuthContext or consult the authorization engine
    - Writes through an administrative connection, not a tenant-scoped session
    - Is meant for operator tooling, never for request handlers
    """

    def __init__(
        self,
        provisioning_repository: ITenantProvisioningRepository,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantBootstrapService.

        Args:
            provisioning_repository: Administrative tenant writer
            probe: Optional domain probe for observability
        """
        self._provisioning_repository = provisioning_repository
        self._probe = probe or DefaultTenantServiceProbe()

    async def provision_tenant(
        self,
        name: str,
        slug: str,
        admin_user_id: UserId,
        admin_email: str,
        plan: str = "free",
    ) -> tuple[Tenant, User]:
        """Create a tenant and its first tenant administrator atomically.

        Args:
            name: Display name of the tenant
            slug: Globally unique short name
            admin_user_id: Identity provider subject of the administrator
            admin_email: Email of the administrator
            plan: Subscription plan

        Returns:
            The new Tenant and its administrator

        Raises:
            DuplicateTenantSlugError: If the slug is already taken
            ValueError: If name or slug is empty
        """
        tenant = Tenant.create(name=name, slug=slug, plan=plan)
        admin = User(
            id=admin_user_id,
            tenant_id=tenant.id,
            email=admin_email,
            role=Role.TENANT_ADMIN,
        )

        try:
            await self._provisioning_repository.provision(tenant, admin)
        except DuplicateTenantSlugError:
            self._probe.duplicate_tenant_slug(slug=slug)
            raise

        self._probe.tenant_provisioned(
            tenant_id=tenant.id.value, slug=slug, admin_user_id=admin.id.value
        )
        return tenant, admin
