"""Repository protocols (ports) for the Audit bounded context.

The write side is the shared kernel's AuditRecorder port; this module
only covers reading the trail back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from shared_kernel.audit import AuditEvent


@dataclass(frozen=True)
class AuditEventFilter:
    """Optional constraints on an audit trail listing."""

    action: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    user_id: str | None = None
    limit: int = 100


@runtime_checkable
class IAuditEventRepository(Protocol):
    """Read access to the tenant's audit trail."""

    async def list_events(self, criteria: AuditEventFilter) -> list[AuditEvent]:
        """List matching events of the session's tenant, newest first."""
        ...
