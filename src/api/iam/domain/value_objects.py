"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Args:
            value: ULID string

        Returns:
            TenantId instance with the canonical (upper case) spelling

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            canonical = str(ULID.from_str(value))
        except ValueError as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=canonical)


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate.

    Holds the identity provider's subject claim, which is opaque to this
    service (UUIDs, Auth0 ids and so on), so only its length is checked.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from a subject claim.

        Raises:
            ValueError: If value is empty or longer than 255 characters
        """
        if not value or len(value) > 255:
            raise ValueError(f"Invalid UserId: {value!r}")
        return cls(value=value)


class TenantStatus(StrEnum):
    """Lifecycle state of a tenant."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserStatus(StrEnum):
    """Lifecycle state of a user account."""

    ACTIVE = "active"
    DISABLED = "disabled"
