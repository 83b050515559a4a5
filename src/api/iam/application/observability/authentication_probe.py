"""Protocol for authentication observability.

Defines the interface for domain probes that capture authentication events
for the get_auth_context dependency.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Domain probe for authentication operations."""

    def request_authenticated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record that a request was bound to an AuthContext."""
        ...

    def authentication_failed(self, reason: str) -> None:
        """Record authentication failure."""
        ...

    def request_throttled(self, scope: str, retry_after_seconds: int) -> None:
        """Record that a request was rejected by the rate limiter.

        Args:
            scope: Identity namespace that hit its limit (ip, user, tenant)
            retry_after_seconds: Hint returned to the client
        """
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthenticationProbe:
    """Default implementation of AuthenticationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthenticationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthenticationProbe(logger=self._logger, context=context)

    def request_authenticated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record that a request was bound to an AuthContext."""
        self._logger.info(
            "request_authenticated",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def authentication_failed(self, reason: str) -> None:
        """Record authentication failure."""
        self._logger.warning(
            "authentication_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def request_throttled(self, scope: str, retry_after_seconds: int) -> None:
        """Record that a request was rejected by the rate limiter."""
        self._logger.warning(
            "request_throttled",
            scope=scope,
            retry_after_seconds=retry_after_seconds,
            **self._get_context_kwargs(),
        )
