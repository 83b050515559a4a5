"""Repository protocols (ports) for IAM bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. Implementations run on a tenant-scoped session, so every
lookup is already confined to the caller's tenant: a row of another
tenant is indistinguishable from a missing one.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import TenantId, UserId


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found or not visible
        """
        ...

    async def save(self, tenant: Tenant) -> None:
        """Persist changes to an existing tenant.

        Tenants are never created through this repository.

        Args:
            tenant: The Tenant aggregate to persist
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence."""

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserEmailError: If the email is taken in the tenant
            DuplicateUserIdError: If a new user's id belongs to a user the
                session cannot see
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found or not visible
        """
        ...

    async def list_all(self) -> list[User]:
        """List the users visible to the session.

        Returns:
            User aggregates ordered by email
        """
        ...

    async def delete(self, user: User) -> bool:
        """Delete a user.

        Args:
            user: The User aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class ITenantProvisioningRepository(Protocol):
    """Administrative writer creating tenants outside of any AuthContext."""

    async def provision(self, tenant: Tenant, admin: User) -> None:
        """Create a tenant together with its first administrator.

        Args:
            tenant: The new Tenant aggregate
            admin: Its first tenant administrator

        Raises:
            DuplicateTenantSlugError: If the slug is already taken
        """
        ...
