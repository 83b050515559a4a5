"""Tenant-scoped database session for request handlers.

Every repository used while handling a request runs on this session. It
is bound to the AuthContext the propagator holds for the request before
any statement can run, and the mutation audit events of its committed
transactions are delivered to the audit recorder when the request
finishes.
"""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audit.dependencies.recorder import get_audit_recorder
from iam.dependencies.authentication import get_auth_context, get_context_propagator
from infrastructure.database.dependencies import get_sessionmaker
from infrastructure.database.tenant_session import tenant_scoped_session
from shared_kernel.audit import AuditRecorder
from shared_kernel.auth import AuthContext
from shared_kernel.middleware.context_propagation import ContextPropagator


async def get_tenant_session(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    propagator: Annotated[ContextPropagator, Depends(get_context_propagator)],
    sessionmaker: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_sessionmaker)
    ],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> AsyncIterator[AsyncSession]:
    """Provide a session bound to the request's AuthContext.

    Callers must explicitly manage transactions using `async with session.begin()`.

    Args:
        context: Authenticates the request and binds its context first
        propagator: Source of the bound context and request id
        sessionmaker: Factory for the session
        recorder: Audit sink for committed mutation events

    Yields:
        AsyncSession scoped to the caller's tenant

    Raises:
        AuthenticationFailedError: If the bound context expired or was
            invalidated before the session was opened
    """
    async with tenant_scoped_session(
        sessionmaker,
        propagator.current(),
        request_id=propagator.current_request_id(),
        recorder=recorder,
    ) as session:
        yield session
