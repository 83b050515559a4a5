from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from iam.application.services import TenantService
from iam.dependencies.authorization import get_authorization_engine
from iam.dependencies.session import get_tenant_session
from iam.infrastructure.tenant_repository import TenantRepository
from shared_kernel.authorization import AuthorizationEngine


def get_tenant_service_probe() -> TenantServiceProbe:
    """Get TenantServiceProbe instance.

    Returns:
        DefaultTenantServiceProbe instance for observability
    """
    return DefaultTenantServiceProbe()


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> TenantRepository:
    """Get TenantRepository instance.

    Args:
        session: Tenant-scoped session

    Returns:
        TenantRepository instance
    """
    return TenantRepository(session=session)


def get_tenant_service(
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repository)],
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
    authz: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    tenant_service_probe: Annotated[
        TenantServiceProbe, Depends(get_tenant_service_probe)
    ],
) -> TenantService:
    """Get TenantService instance.

    Args:
        tenant_repo: Tenant repository (shares session via FastAPI dependency caching)
        session: Tenant-scoped session for transaction management
        authz: Authorization engine
        tenant_service_probe: Tenant service probe for observability

    Returns:
        TenantService instance
    """
    return TenantService(
        tenant_repository=tenant_repo,
        session=session,
        authz=authz,
        probe=tenant_service_probe,
    )
