"""Audit trail query providers."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from audit.application import AuditQueryService
from audit.infrastructure.audit_event_repository import AuditEventRepository
from iam.dependencies.authorization import get_authorization_engine
from iam.dependencies.session import get_tenant_session
from shared_kernel.authorization import AuthorizationEngine


def get_audit_event_repository(
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> AuditEventRepository:
    """Get AuditEventRepository instance.

    Args:
        session: Tenant-scoped session

    Returns:
        AuditEventRepository instance
    """
    return AuditEventRepository(session=session)


def get_audit_query_service(
    repository: Annotated[AuditEventRepository, Depends(get_audit_event_repository)],
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
    authz: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
) -> AuditQueryService:
    """Get AuditQueryService instance.

    Args:
        repository: Audit event repository (shares session via dependency caching)
        session: Tenant-scoped session for transaction management
        authz: Authorization engine

    Returns:
        AuditQueryService instance
    """
    return AuditQueryService(repository=repository, session=session, authz=authz)
