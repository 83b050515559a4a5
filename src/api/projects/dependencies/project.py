"""Dependency injection providers for project services."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.dependencies.authorization import get_authorization_engine
from iam.dependencies.session import get_tenant_session
from projects.application.observability import (
    DefaultProjectServiceProbe,
    ProjectServiceProbe,
)
from projects.application.services import ProjectService
from projects.infrastructure.project_repository import ProjectRepository
from shared_kernel.authorization import AuthorizationEngine


def get_project_service_probe() -> ProjectServiceProbe:
    """Get ProjectServiceProbe instance.

    Returns:
        DefaultProjectServiceProbe instance for observability
    """
    return DefaultProjectServiceProbe()


def get_project_repository(
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> ProjectRepository:
    """Get ProjectRepository instance.

    Args:
        session: Tenant-scoped session

    Returns:
        ProjectRepository instance
    """
    return ProjectRepository(session=session)


def get_project_service(
    project_repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
    authz: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    probe: Annotated[ProjectServiceProbe, Depends(get_project_service_probe)],
) -> ProjectService:
    """Get ProjectService instance.

    Args:
        project_repo: Project repository (shares session via FastAPI dependency caching)
        session: Tenant-scoped session for transaction management
        authz: Authorization engine
        probe: Project service probe for observability

    Returns:
        ProjectService instance
    """
    return ProjectService(
        project_repository=project_repo,
        session=session,
        authz=authz,
        probe=probe,
    )
