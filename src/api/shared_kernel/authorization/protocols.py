"""Capability protocol for resources protected by the authorization engine.

Each resource variant answers the tenancy, ownership and assignment
questions itself; the engine resolves them polymorphically instead of
branching on the resource type.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ProtectedResource(Protocol):
    """A tenant-owned resource that can answer access questions.

    Implemented by the Project, User and Tenant aggregates.
    """

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Whether this resource lives inside the given tenant."""
        ...

    def is_owned_by(self, user_id: str) -> bool:
        """Whether the user created or owns this resource."""
        ...

    def is_assigned_to(self, user_id: str) -> bool:
        """Whether the user has been assigned to this resource."""
        ...
