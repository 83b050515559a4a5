"""Tenant aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass

from iam.domain.value_objects import TenantId, TenantStatus


@dataclass
class Tenant:
    """Tenant aggregate representing an organization in the system.

    Tenants are the top-level isolation boundary in the system. Each tenant
    has its own users, projects and audit trail, and nothing is ever shared
    across tenants.

    Business rules:
    - Tenant slugs are globally unique
    - Tenants are created administratively, never by a tenant's own users
    - The id never changes
    """

    id: TenantId
    name: str
    slug: str
    plan: str = "free"
    status: TenantStatus = TenantStatus.ACTIVE

    @classmethod
    def create(cls, name: str, slug: str, plan: str = "free") -> Tenant:
        """Factory method for creating a new tenant.

        Args:
            name: Display name of the tenant
            slug: Globally unique short name
            plan: Subscription plan

        Returns:
            A new, active Tenant aggregate
        """
        if not name or not slug:
            raise ValueError("Tenant name and slug are required")
        return cls(id=TenantId.generate(), name=name, slug=slug, plan=plan)

    def rename(self, name: str) -> None:
        """Change the tenant's display name."""
        if not name:
            raise ValueError("Tenant name is required")
        self.name = name

    @property
    def is_active(self) -> bool:
        """Whether the tenant may be used."""
        return self.status is TenantStatus.ACTIVE

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """A tenant belongs only to itself."""
        return self.id.value == tenant_id

    def is_owned_by(self, user_id: str) -> bool:
        """Tenants have no individual owner."""
        return False

    def is_assigned_to(self, user_id: str) -> bool:
        """Every member of the tenant is assigned to it.

        Membership itself is established by the tenant boundary check,
        which runs before ownership is considered.
        """
        return True
