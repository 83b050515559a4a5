"""Pydantic models for user API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.domain.aggregates import User
from iam.domain.value_objects import UserStatus
from shared_kernel.authorization import Role


class CreateUserRequest(BaseModel):
    """Request model for adding a user to the caller's tenant.

    The tenant comes from the caller's credential; there is no tenant
    field to supply.
    """

    id: str = Field(
        ...,
        description="Identity provider subject of the user",
        min_length=1,
        max_length=255,
    )
    email: str = Field(..., description="Email address", min_length=3, max_length=255)
    name: str | None = Field(default=None, description="Display name", max_length=255)
    role: Role = Field(default=Role.MEMBER, description="Tenant-scoped role")


class UpdateUserRequest(BaseModel):
    """Request model for updating a user; omitted fields stay unchanged.

    Role and status changes are reserved for tenant admins.
    """

    email: str | None = Field(
        default=None, description="New email address", min_length=3, max_length=255
    )
    name: str | None = Field(
        default=None, description="New display name", max_length=255
    )
    role: Role | None = Field(default=None, description="New tenant-scoped role")
    status: UserStatus | None = Field(
        default=None, description="New account status (active or disabled)"
    )


class UserResponse(BaseModel):
    """Response model for user."""

    id: str = Field(..., description="User ID (identity provider subject)")
    tenant_id: str = Field(..., description="Tenant ID (ULID format)")
    email: str = Field(..., description="Email address")
    name: str | None = Field(default=None, description="Display name")
    role: Role = Field(..., description="Tenant-scoped role")
    status: str = Field(..., description="Account status (active or disabled)")

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        """Convert domain User aggregate to API response.

        Args:
            user: User domain aggregate

        Returns:
            UserResponse
        """
        return cls(
            id=user.id.value,
            tenant_id=user.tenant_id.value,
            email=user.email,
            name=user.name,
            role=user.role,
            status=user.status.value,
        )
