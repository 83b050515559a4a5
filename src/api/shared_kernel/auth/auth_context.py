"""Authenticated request context.

The AuthContext is the only legitimate source of tenant and user identity
for anything downstream of the token validator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared_kernel.authorization.types import Role


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Validated identity and tenant binding derived from a credential.

    Ephemeral and request-scoped: never persisted and never shared between
    concurrently handled requests.

    Attributes:
        tenant_id: Tenant the caller belongs to (canonical ULID string)
        user_id: Subject of the credential
        role: The caller's single tenant-scoped role
        token_id: Credential identifier used for replay tracking
        expires_at: Credential expiry (UTC)
    """

    tenant_id: str
    user_id: str
    role: Role
    token_id: str | None
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the underlying credential has expired."""
        current = now or datetime.now(UTC)
        return current >= self.expires_at
