"""Audit event value type.

The allow-list of audit fields is enforced by construction: AuditEvent is a
slotted, keyword-only dataclass with exactly those fields, so passing a
request body, a raw token or any other unlisted field fails with TypeError
at the call site instead of being filtered later.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum


class AuditDecision(StrEnum):
    """What happened to the audited operation."""

    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    COMMITTED = "committed"


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditEvent:
    """One append-only audit record.

    Attributes:
        tenant_id: Tenant the event belongs to
        user_id: Acting user
        action: Dotted action name (e.g. "project.read", "project.update")
        resource_type: Type of the resource acted on
        resource_id: Identifier of the resource, if the action targeted one
        decision: Outcome of the operation
        timestamp: When the event happened (UTC)
        request_id: Correlation identifier of the originating request
        error_code: Stable error code for denied operations
    """

    tenant_id: str
    user_id: str | None
    action: str
    resource_type: str
    resource_id: str | None
    decision: AuditDecision
    timestamp: datetime
    request_id: str | None
    error_code: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "decision", AuditDecision(self.decision))
        if self.timestamp.tzinfo is None:
            raise ValueError("Audit timestamps must be timezone-aware")
        if not self.tenant_id:
            raise ValueError("Audit events must carry a tenant_id")


def utc_now() -> datetime:
    """Current time for audit timestamps."""
    return datetime.now(UTC)
