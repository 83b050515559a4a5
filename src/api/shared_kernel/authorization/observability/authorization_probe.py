"""Domain probe for authorization decisions.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to authorization decisions. The internal
reason for a denial is only ever logged here, never returned to callers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization operations."""

    def decision_made(
        self,
        tenant_id: str,
        user_id: str,
        role: str,
        action: str,
        resource_type: str,
        resource_id: str | None,
        outcome: str,
        reason: str,
    ) -> None:
        """Record the outcome of an authorization decision."""
        ...

    def expired_context_rejected(self, tenant_id: str, user_id: str) -> None:
        """Record that a decision was requested with an expired context."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def decision_made(
        self,
        tenant_id: str,
        user_id: str,
        role: str,
        action: str,
        resource_type: str,
        resource_id: str | None,
        outcome: str,
        reason: str,
    ) -> None:
        """Record the outcome of an authorization decision."""
        log = self._logger.info if outcome == "allowed" else self._logger.warning
        log(
            "authorization_decision",
            tenant_id=tenant_id,
            user_id=user_id,
            role=role,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            outcome=outcome,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def expired_context_rejected(self, tenant_id: str, user_id: str) -> None:
        """Record that a decision was requested with an expired context."""
        self._logger.warning(
            "authorization_expired_context_rejected",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )
