from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)
from iam.application.services import UserService
from iam.dependencies.authorization import get_authorization_engine
from iam.dependencies.session import get_tenant_session
from iam.dependencies.tenant import get_tenant_repository
from iam.infrastructure.tenant_repository import TenantRepository
from iam.infrastructure.user_repository import UserRepository
from shared_kernel.authorization import AuthorizationEngine


def get_user_service_probe() -> UserServiceProbe:
    """Get UserServiceProbe instance.

    Returns:
        DefaultUserServiceProbe instance for observability
    """
    return DefaultUserServiceProbe()


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> UserRepository:
    """Get UserRepository instance.

    Args:
        session: Tenant-scoped session

    Returns:
        UserRepository instance
    """
    return UserRepository(session=session)


def get_user_service(
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repository)],
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
    authz: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    probe: Annotated[UserServiceProbe, Depends(get_user_service_probe)],
) -> UserService:
    """Get UserService instance.

    Args:
        user_repo: User repository (shares session via FastAPI dependency caching)
        tenant_repo: Tenant repository for role and status changes
        session: Tenant-scoped session for transaction management
        authz: Authorization engine
        probe: User service probe for observability

    Returns:
        UserService instance
    """
    return UserService(
        user_repository=user_repo,
        tenant_repository=tenant_repo,
        session=session,
        authz=authz,
        probe=probe,
    )
