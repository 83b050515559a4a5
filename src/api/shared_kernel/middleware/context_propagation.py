"""Request-scoped propagation of the AuthContext.

Each logical request carries exactly one AuthContext in a ContextVar, so
concurrently handled requests (separate asyncio tasks) can never observe
each other's identity. The binding is acquired and released through a
context manager, which guarantees release on every exit path.

``ContextPropagator.current`` is the narrow accessor for the ambient
context. It fails closed: no binding is a configuration fault, and an
expired credential invalidates the binding for the rest of the request.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from ulid import ULID

from shared_kernel.exceptions import AuthenticationFailedError, ConfigurationFaultError
from shared_kernel.middleware.observability import (
    ContextPropagationProbe,
    DefaultContextPropagationProbe,
)

if TYPE_CHECKING:
    from shared_kernel.auth.auth_context import AuthContext


@dataclass
class _RequestBinding:
    context: AuthContext
    request_id: str
    invalidated: bool = False
    released: bool = False


_current_binding: ContextVar[_RequestBinding | None] = ContextVar(
    "shielded_request_binding", default=None
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ContextPropagator:
    """Binds, exposes and releases the AuthContext of the current request."""

    def __init__(
        self,
        probe: ContextPropagationProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the propagator.

        Args:
            probe: Optional domain probe for observability
            clock: Source of the current time, injectable for tests
        """
        self._probe = probe or DefaultContextPropagationProbe()
        self._clock = clock

    @contextmanager
    def bind(
        self, context: AuthContext, request_id: str | None = None
    ) -> Iterator[AuthContext]:
        """Bind an AuthContext to the current request for the block's duration.

        Args:
            context: The validated AuthContext
            request_id: Correlation id; generated when not supplied

        Yields:
            The bound AuthContext

        Raises:
            ConfigurationFaultError: If a context is already bound to this
                request. Late overrides are never allowed.
        """
        existing = _current_binding.get()
        if existing is not None and not existing.released:
            self._probe.rebind_rejected(request_id=existing.request_id)
            raise ConfigurationFaultError(
                "An AuthContext is already bound to this request"
            )

        binding = _RequestBinding(
            context=context,
            request_id=request_id or str(ULID()),
        )
        _current_binding.set(binding)
        structlog.contextvars.bind_contextvars(
            request_id=binding.request_id,
            tenant_id=context.tenant_id,
            user_id=context.user_id,
        )
        self._probe.context_bound(
            request_id=binding.request_id,
            tenant_id=context.tenant_id,
            user_id=context.user_id,
        )
        try:
            yield context
        finally:
            binding.released = True
            _current_binding.set(None)
            structlog.contextvars.unbind_contextvars(
                "request_id", "tenant_id", "user_id"
            )
            self._probe.context_released(request_id=binding.request_id)

    def current(self) -> AuthContext:
        """Get the AuthContext bound to the current request.

        Raises:
            ConfigurationFaultError: If no context is bound
            AuthenticationFailedError: If the context has expired or was
                invalidated earlier in this request
        """
        binding = _current_binding.get()
        if binding is None or binding.released:
            self._probe.context_missing()
            raise ConfigurationFaultError("No AuthContext bound to this request")

        if binding.invalidated:
            raise AuthenticationFailedError()

        if binding.context.is_expired(self._clock()):
            binding.invalidated = True
            self._probe.context_invalidated(
                request_id=binding.request_id, reason="credential_expired"
            )
            raise AuthenticationFailedError()

        return binding.context

    def current_request_id(self) -> str | None:
        """Get the correlation id of the current request, if one is bound."""
        return current_request_id()

    def invalidate(self, reason: str) -> None:
        """Invalidate the current binding for the rest of the request."""
        binding = _current_binding.get()
        if binding is None or binding.released:
            return
        binding.invalidated = True
        self._probe.context_invalidated(request_id=binding.request_id, reason=reason)


def current_request_id() -> str | None:
    """Get the correlation id of the current request without a propagator."""
    binding = _current_binding.get()
    if binding is None or binding.released:
        return None
    return binding.request_id
