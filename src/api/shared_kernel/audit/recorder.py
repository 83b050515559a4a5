"""Audit recorder port."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shared_kernel.audit.events import AuditEvent
    from shared_kernel.auth.auth_context import AuthContext


class AuditRecorder(Protocol):
    """Append-only sink for audit events.

    Implementations must not raise on write failures. A failed write is
    surfaced through observability and the primary operation continues.
    """

    async def record(self, context: AuthContext, event: AuditEvent) -> None:
        """Append a single event on behalf of the given context."""
        ...

    async def record_many(
        self, context: AuthContext, events: Sequence[AuditEvent]
    ) -> None:
        """Append several events on behalf of the given context."""
        ...
