"""HTTP routes for projects of the caller's tenant."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.dependencies.authentication import get_auth_context
from projects.application.services import ProjectService
from projects.dependencies.project import get_project_service
from projects.domain.value_objects import ProjectId
from projects.presentation.models import (
    CreateProjectRequest,
    ProjectResponse,
    UpdateProjectRequest,
)
from shared_kernel.auth import AuthContext
from shared_kernel.exceptions import ResourceNotFoundError

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


def _parse_project_id(project_id: str) -> ProjectId:
    """Parse a path id; a malformed id is just another unknown project."""
    try:
        return ProjectId.from_string(project_id)
    except ValueError as e:
        raise ResourceNotFoundError() from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> ProjectResponse:
    """Create a project owned by the caller.

    Args:
        request: Project creation request
        context: The request's AuthContext
        service: Project service

    Returns:
        ProjectResponse with created project details

    Raises:
        HTTPException: 422 if the name is invalid
    """
    try:
        project = await service.create_project(
            context, name=request.name, description=request.description
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return ProjectResponse.from_domain(project)


@router.get("")
async def list_projects(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> list[ProjectResponse]:
    """List the projects the caller may see.

    Args:
        context: The request's AuthContext
        service: Project service

    Returns:
        List of ProjectResponse objects
    """
    projects = await service.list_projects(context)
    return [ProjectResponse.from_domain(project) for project in projects]


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> ProjectResponse:
    """Get one project.

    Args:
        project_id: Project ID (ULID format)
        context: The request's AuthContext
        service: Project service

    Returns:
        ProjectResponse with project details
    """
    project = await service.get_project(context, _parse_project_id(project_id))
    return ProjectResponse.from_domain(project)


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> ProjectResponse:
    """Update a project's name, description or status.

    Args:
        project_id: Project ID (ULID format)
        request: Fields to change
        context: The request's AuthContext
        service: Project service

    Returns:
        ProjectResponse with updated project details

    Raises:
        HTTPException: 422 if the new name is invalid
    """
    try:
        project = await service.update_project(
            context,
            _parse_project_id(project_id),
            name=request.name,
            description=request.description,
            status=request.status,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return ProjectResponse.from_domain(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_project(
    project_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> None:
    """Delete a project and its assignments.

    Args:
        project_id: Project ID (ULID format)
        context: The request's AuthContext
        service: Project service
    """
    await service.delete_project(context, _parse_project_id(project_id))


@router.put("/{project_id}/assignees/{user_id}")
async def assign_user(
    project_id: str,
    user_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> ProjectResponse:
    """Assign a user of the caller's tenant to a project.

    Args:
        project_id: Project ID (ULID format)
        user_id: User to assign
        context: The request's AuthContext
        service: Project service

    Returns:
        ProjectResponse with the updated assignees
    """
    project = await service.assign_user(
        context, _parse_project_id(project_id), user_id
    )
    return ProjectResponse.from_domain(project)


@router.delete("/{project_id}/assignees/{user_id}")
async def unassign_user(
    project_id: str,
    user_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[ProjectService, Depends(get_project_service)],
) -> ProjectResponse:
    """Remove a user's assignment from a project.

    Args:
        project_id: Project ID (ULID format)
        user_id: User to unassign
        context: The request's AuthContext
        service: Project service

    Returns:
        ProjectResponse with the updated assignees
    """
    project = await service.unassign_user(
        context, _parse_project_id(project_id), user_id
    )
    return ProjectResponse.from_domain(project)
