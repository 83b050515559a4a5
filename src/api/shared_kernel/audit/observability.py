"""Domain probe for audit recording.

Following Domain-Oriented Observability patterns, this probe captures
audit pipeline health. Write failures are logged at error level so that
a degraded audit sink is visible without blocking user-facing operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuditProbe(Protocol):
    """Domain probe for audit recording operations."""

    def events_recorded(self, tenant_id: str, count: int) -> None:
        """Record that audit events were persisted."""
        ...

    def audit_write_failed(
        self, tenant_id: str, actions: list[str], error: Exception
    ) -> None:
        """Record that persisting audit events failed."""
        ...

    def with_context(self, context: ObservationContext) -> AuditProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditProbe:
    """Default implementation of AuditProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuditProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditProbe(logger=self._logger, context=context)

    def events_recorded(self, tenant_id: str, count: int) -> None:
        """Record that audit events were persisted."""
        self._logger.debug(
            "audit_events_recorded",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def audit_write_failed(
        self, tenant_id: str, actions: list[str], error: Exception
    ) -> None:
        """Record that persisting audit events failed."""
        self._logger.error(
            "audit_write_failed",
            tenant_id=tenant_id,
            actions=actions,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
