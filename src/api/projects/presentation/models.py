"""Pydantic models for project API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from projects.domain.aggregates import Project
from projects.domain.value_objects import ProjectStatus


class CreateProjectRequest(BaseModel):
    """Request model for creating a project.

    There is no tenant or owner field: both come from the caller's
    credential. A client-supplied tenant_id is ignored like any other
    unknown field.
    """

    name: str = Field(..., description="Project name", min_length=1, max_length=255)
    description: str | None = Field(
        default=None, description="Free-form description", max_length=10000
    )


class UpdateProjectRequest(BaseModel):
    """Request model for updating a project; omitted fields stay unchanged."""

    name: str | None = Field(
        default=None, description="New project name", min_length=1, max_length=255
    )
    description: str | None = Field(
        default=None, description="New description", max_length=10000
    )
    status: ProjectStatus | None = Field(
        default=None, description="New status (active or archived)"
    )


class ProjectResponse(BaseModel):
    """Response model for project."""

    id: str = Field(..., description="Project ID (ULID format)")
    tenant_id: str = Field(..., description="Tenant ID (ULID format)")
    owner_id: str | None = Field(default=None, description="Creating user")
    name: str = Field(..., description="Project name")
    description: str | None = Field(default=None, description="Description")
    status: ProjectStatus = Field(..., description="Project status")
    assignee_ids: list[str] = Field(..., description="Assigned user IDs")

    @classmethod
    def from_domain(cls, project: Project) -> ProjectResponse:
        """Convert domain Project aggregate to API response.

        Args:
            project: Project domain aggregate

        Returns:
            ProjectResponse with assignees in a stable order
        """
        return cls(
            id=project.id.value,
            tenant_id=project.tenant_id,
            owner_id=project.owner_id,
            name=project.name,
            description=project.description,
            status=project.status,
            assignee_ids=sorted(project.assignee_ids),
        )
