"""Transaction-scoped binding of an AuthContext to a database session.

A session obtained through ``tenant_scoped_session`` carries exactly one
AuthContext in ``session.info`` for its whole lifetime. The row isolation
events read it through ``require_context``, the only accessor for the
bound context at the data layer. The binding is removed on every exit
path before the session is closed and its connection returns to the pool.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from infrastructure.observability import DefaultRowIsolationProbe
from shared_kernel.exceptions import AuthenticationFailedError, ConfigurationFaultError

if TYPE_CHECKING:
    from shared_kernel.audit import AuditEvent, AuditRecorder
    from shared_kernel.auth.auth_context import AuthContext

BINDING_KEY = "shielded.auth_binding"
PENDING_EVENTS_KEY = "shielded.pending_audit_events"
COMMITTED_EVENTS_KEY = "shielded.committed_audit_events"

_probe = DefaultRowIsolationProbe()


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SessionBinding:
    """AuthContext bound to one session, plus its correlation id."""

    context: AuthContext
    request_id: str | None
    invalidated: bool = False


def bind_context(
    session: Session | AsyncSession,
    context: AuthContext,
    request_id: str | None = None,
) -> None:
    """Bind an AuthContext to a session before any statement runs.

    Raises:
        ConfigurationFaultError: If a different context is already bound
    """
    existing: SessionBinding | None = session.info.get(BINDING_KEY)
    if existing is not None:
        if existing.context != context:
            raise ConfigurationFaultError(
                "A different AuthContext is already bound to this session"
            )
        return
    session.info[BINDING_KEY] = SessionBinding(context=context, request_id=request_id)


def unbind_context(session: Session | AsyncSession) -> list[AuditEvent]:
    """Remove the binding and hand back mutation events that were committed.

    Events of transactions that never committed are discarded.
    """
    session.info.pop(BINDING_KEY, None)
    session.info.pop(PENDING_EVENTS_KEY, None)
    return session.info.pop(COMMITTED_EVENTS_KEY, [])


def get_binding(session: Session | AsyncSession) -> SessionBinding | None:
    """Get the session's binding without validating it."""
    return session.info.get(BINDING_KEY)


def require_context(
    session: Session | AsyncSession,
    clock: Callable[[], datetime] = _utc_now,
) -> AuthContext:
    """Get the AuthContext bound to a session, failing closed.

    Raises:
        ConfigurationFaultError: If no context is bound
        AuthenticationFailedError: If the context expired; the binding
            stays invalidated for the rest of the session
    """
    binding = get_binding(session)
    if binding is None:
        raise ConfigurationFaultError("No AuthContext bound to this session")

    if binding.invalidated:
        raise AuthenticationFailedError()

    if binding.context.is_expired(clock()):
        binding.invalidated = True
        _probe.context_expired(
            tenant_id=binding.context.tenant_id, user_id=binding.context.user_id
        )
        raise AuthenticationFailedError()

    return binding.context


@asynccontextmanager
async def tenant_scoped_session(
    sessionmaker: async_sessionmaker[AsyncSession],
    context: AuthContext,
    *,
    request_id: str | None = None,
    recorder: AuditRecorder | None = None,
) -> AsyncIterator[AsyncSession]:
    """Open a session bound to one AuthContext.

    Usage:
        async with tenant_scoped_session(factory, ctx, recorder=recorder) as session:
            async with session.begin():
                session.add(project)

    On exit the binding is removed before the session closes, and the
    mutation audit events of committed transactions are handed to the
    recorder.

    Args:
        sessionmaker: Factory for new sessions
        context: The AuthContext every statement is scoped to
        request_id: Correlation id written to mutation audit events
        recorder: Audit sink for committed mutation events

    Yields:
        The bound AsyncSession
    """
    session = sessionmaker()
    bind_context(session, context, request_id)
    try:
        yield session
    finally:
        events = unbind_context(session)
        await session.close()
        if recorder is not None and events:
            await recorder.record_many(context, events)
