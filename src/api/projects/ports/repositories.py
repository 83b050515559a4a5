"""Repository protocols (ports) for the Projects bounded context.

Implementations run on a tenant-scoped session: a project of another
tenant is indistinguishable from a missing one.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from projects.domain.aggregates import Project
from projects.domain.value_objects import ProjectId


@runtime_checkable
class IProjectRepository(Protocol):
    """Repository for Project aggregate persistence."""

    async def save(self, project: Project) -> None:
        """Persist a project aggregate, including its assignees.

        Creates a new project or updates an existing one.

        Args:
            project: The Project aggregate to persist
        """
        ...

    async def get_by_id(self, project_id: ProjectId) -> Project | None:
        """Retrieve a project by its ID.

        Args:
            project_id: The unique identifier of the project

        Returns:
            The Project aggregate, or None if not found or not visible
        """
        ...

    async def list_all(self) -> list[Project]:
        """List the projects of the session's tenant.

        Returns:
            Project aggregates ordered by name
        """
        ...

    async def delete(self, project: Project) -> bool:
        """Delete a project and its assignments.

        Args:
            project: The Project aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        ...

    async def is_tenant_member(self, user_id: str) -> bool:
        """Whether a user exists in the session's tenant.

        Args:
            user_id: Candidate assignee

        Returns:
            False for unknown users and users of other tenants alike
        """
        ...
