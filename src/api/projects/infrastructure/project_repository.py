"""SQLAlchemy implementation of IProjectRepository.

Runs on a tenant-scoped session. Assignments are loaded eagerly with the
project, and the row isolation loader criteria apply to that load too.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.infrastructure.models import UserModel
from projects.domain.aggregates import Project
from projects.domain.value_objects import ProjectId, ProjectStatus
from projects.infrastructure.models import ProjectAssignmentModel, ProjectModel
from projects.infrastructure.observability import (
    DefaultProjectRepositoryProbe,
    ProjectRepositoryProbe,
)
from projects.ports.repositories import IProjectRepository


class ProjectRepository(IProjectRepository):
    """Repository managing storage for Project aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: ProjectRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: Tenant-scoped AsyncSession
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultProjectRepositoryProbe()

    async def save(self, project: Project) -> None:
        """Persist a project and synchronize its assignments.

        The tenant of a new row always comes from the session's
        AuthContext.

        Args:
            project: The Project aggregate to persist
        """
        model = await self._get_model(project.id.value)

        if model:
            model.name = project.name
            model.description = project.description
            model.status = project.status.value
            model.owner_id = project.owner_id
        else:
            model = ProjectModel(
                id=project.id.value,
                tenant_id=project.tenant_id,
                owner_id=project.owner_id,
                name=project.name,
                description=project.description,
                status=project.status.value,
                assignments=[],
            )
            self._session.add(model)

        await self._sync_assignments(model, project)
        await self._session.flush()
        self._probe.project_saved(project.id.value, model.tenant_id)

    async def get_by_id(self, project_id: ProjectId) -> Project | None:
        """Retrieve a project by its ID.

        Args:
            project_id: The unique identifier of the project

        Returns:
            The Project aggregate, or None if not found or not visible
        """
        model = await self._get_model(project_id.value)
        if model is None:
            self._probe.project_not_found(project_id.value)
            return None

        self._probe.project_retrieved(project_id.value)
        return self._to_domain(model)

    async def list_all(self) -> list[Project]:
        """List the projects of the session's tenant.

        Returns:
            Project aggregates ordered by name
        """
        stmt = select(ProjectModel).order_by(ProjectModel.name, ProjectModel.id)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete(self, project: Project) -> bool:
        """Delete a project and, by cascade, its assignments.

        Args:
            project: The Project aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        model = await self._get_model(project.id.value)
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.project_deleted(project.id.value)
        return True

    async def is_tenant_member(self, user_id: str) -> bool:
        """Whether a user exists in the session's tenant."""
        stmt = select(UserModel.id).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _get_model(self, project_id: str) -> ProjectModel | None:
        stmt = select(ProjectModel).where(ProjectModel.id == project_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _sync_assignments(self, model: ProjectModel, project: Project) -> None:
        current = {assignment.user_id for assignment in model.assignments}

        for assignment in list(model.assignments):
            if assignment.user_id not in project.assignee_ids:
                model.assignments.remove(assignment)
                # Explicit so the removal is visible to before_flush
                await self._session.delete(assignment)

        for user_id in sorted(project.assignee_ids - current):
            model.assignments.append(
                ProjectAssignmentModel(
                    project_id=project.id.value,
                    user_id=user_id,
                    tenant_id=project.tenant_id,
                )
            )

    @staticmethod
    def _to_domain(model: ProjectModel) -> Project:
        return Project(
            id=ProjectId(value=model.id),
            tenant_id=model.tenant_id,
            owner_id=model.owner_id,
            name=model.name,
            description=model.description,
            status=ProjectStatus(model.status),
            assignee_ids={assignment.user_id for assignment in model.assignments},
        )
