"""Domain probe for request context propagation.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events in the lifecycle of a request's AuthContext:
binding, release, invalidation on expiry, and attempts to smuggle tenant
or user identity through request payloads.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ContextPropagationProbe(Protocol):
    """Domain probe for context propagation operations."""

    def context_bound(self, request_id: str, tenant_id: str, user_id: str) -> None:
        """Record that an AuthContext was bound to a request."""
        ...

    def context_released(self, request_id: str) -> None:
        """Record that a request's AuthContext binding was released."""
        ...

    def rebind_rejected(self, request_id: str) -> None:
        """Record an attempt to bind a second AuthContext to a request."""
        ...

    def context_missing(self) -> None:
        """Record that an operation required an AuthContext but none was bound."""
        ...

    def context_invalidated(self, request_id: str, reason: str) -> None:
        """Record that a bound AuthContext was invalidated mid-request."""
        ...

    def with_context(self, context: ObservationContext) -> ContextPropagationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultContextPropagationProbe:
    """Default implementation of ContextPropagationProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultContextPropagationProbe:
        """Create a new probe with observation context bound."""
        return DefaultContextPropagationProbe(logger=self._logger, context=context)

    def context_bound(self, request_id: str, tenant_id: str, user_id: str) -> None:
        """Record that an AuthContext was bound to a request."""
        self._logger.debug(
            "auth_context_bound",
            request_id=request_id,
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def context_released(self, request_id: str) -> None:
        """Record that a request's AuthContext binding was released."""
        self._logger.debug(
            "auth_context_released",
            request_id=request_id,
            **self._get_context_kwargs(),
        )

    def rebind_rejected(self, request_id: str) -> None:
        """Record an attempt to bind a second AuthContext to a request."""
        self._logger.error(
            "auth_context_rebind_rejected",
            request_id=request_id,
            **self._get_context_kwargs(),
        )

    def context_missing(self) -> None:
        """Record that an operation required an AuthContext but none was bound."""
        self._logger.error(
            "auth_context_missing",
            **self._get_context_kwargs(),
        )

    def context_invalidated(self, request_id: str, reason: str) -> None:
        """Record that a bound AuthContext was invalidated mid-request."""
        self._logger.warning(
            "auth_context_invalidated",
            request_id=request_id,
            reason=reason,
            **self._get_context_kwargs(),
        )
