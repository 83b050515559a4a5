"""User aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass

from iam.domain.value_objects import TenantId, UserId, UserStatus
from shared_kernel.authorization.types import Role


@dataclass
class User:
    """User aggregate representing a person in exactly one tenant.

    Users are provisioned by the identity provider; ``id`` is the subject
    claim of their tokens. The stored role is informational: the role used
    for authorization always comes from the validated credential.
    """

    id: UserId
    tenant_id: TenantId
    email: str
    name: str | None = None
    role: Role = Role.MEMBER
    status: UserStatus = UserStatus.ACTIVE

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.email})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)

    def update(
        self,
        email: str | None = None,
        name: str | None = None,
        role: Role | None = None,
        status: UserStatus | None = None,
    ) -> None:
        """Change the given attributes; None leaves an attribute unchanged.

        Raises:
            ValueError: If the new email is blank
        """
        if email is not None:
            if not email.strip():
                raise ValueError("User email cannot be empty")
            self.email = email
        if name is not None:
            self.name = name
        if role is not None:
            self.role = role
        if status is not None:
            self.status = status

    @property
    def is_active(self) -> bool:
        """Whether the account may be used."""
        return self.status is UserStatus.ACTIVE

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Whether the user is a member of the given tenant."""
        return self.tenant_id.value == tenant_id

    def is_owned_by(self, user_id: str) -> bool:
        """A user record is owned by the user it describes."""
        return self.id.value == user_id

    def is_assigned_to(self, user_id: str) -> bool:
        """Users are never assigned to other users."""
        return False
