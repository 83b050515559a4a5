"""Project application service.

Every operation runs in one transaction on the tenant-scoped session and
is decided by the authorization engine before anything is returned or
changed. Lookups happen first so that a project of another tenant, an
absent project and one the caller may not see all produce the same
ResourceNotFoundError.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from projects.application.observability import (
    DefaultProjectServiceProbe,
    ProjectServiceProbe,
)
from projects.domain.aggregates import Project
from projects.domain.value_objects import ProjectId, ProjectStatus
from projects.ports.repositories import IProjectRepository
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.authorization import Action, AuthorizationEngine, ResourceType
from shared_kernel.exceptions import ResourceNotFoundError


class ProjectService:
    """Application service for project management within one tenant."""

    def __init__(
        self,
        project_repository: IProjectRepository,
        session: AsyncSession,
        authz: AuthorizationEngine,
        probe: ProjectServiceProbe | None = None,
    ):
        """Initialize ProjectService with dependencies.

        Args:
            project_repository: Repository for project persistence
            session: Tenant-scoped session for transaction management
            authz: Authorization engine deciding every operation
            probe: Optional domain probe for observability
        """
        self._project_repository = project_repository
        self._session = session
        self._authz = authz
        self._probe = probe or DefaultProjectServiceProbe()

    async def create_project(
        self,
        context: AuthContext,
        name: str,
        description: str | None = None,
    ) -> Project:
        """Create a project owned by the caller in the caller's tenant.

        Raises:
            ForbiddenError: If the caller's role may not create projects
            ValueError: If the name is invalid
        """
        async with self._session.begin():
            await self._authz.require(context, Action.CREATE, ResourceType.PROJECT)
            project = Project.create(
                tenant_id=context.tenant_id,
                owner_id=context.user_id,
                name=name,
                description=description,
            )
            await self._project_repository.save(project)

        self._probe.project_created(
            project_id=project.id.value,
            tenant_id=context.tenant_id,
            owner_id=context.user_id,
        )
        return project

    async def get_project(self, context: AuthContext, project_id: ProjectId) -> Project:
        """Retrieve one project.

        Raises:
            ResourceNotFoundError: If the project is absent or not visible
        """
        async with self._session.begin():
            project = await self._load(context, Action.READ, project_id)
        return project

    async def list_projects(self, context: AuthContext) -> list[Project]:
        """List the projects of the caller's tenant that the caller may see.

        Tenant admins see every project; other roles only those they own
        or are assigned to.
        """
        async with self._session.begin():
            await self._authz.require(context, Action.LIST, ResourceType.PROJECT)
            projects = await self._project_repository.list_all()

        visible = self._authz.filter_visible(context, projects)
        self._probe.projects_listed(total=len(projects), visible=len(visible))
        return visible

    async def update_project(
        self,
        context: AuthContext,
        project_id: ProjectId,
        name: str | None = None,
        description: str | None = None,
        status: ProjectStatus | None = None,
    ) -> Project:
        """Change a project's name, description or status.

        Raises:
            ResourceNotFoundError: If the project is absent or not visible
            ForbiddenError: If the caller's role may not update projects
            ValueError: If the new name is invalid
        """
        async with self._session.begin():
            project = await self._load(context, Action.UPDATE, project_id)
            project.update(name=name, description=description, status=status)
            await self._project_repository.save(project)

        self._probe.project_updated(
            project_id=project_id.value, tenant_id=context.tenant_id
        )
        return project

    async def delete_project(self, context: AuthContext, project_id: ProjectId) -> None:
        """Delete a project and its assignments.

        Raises:
            ResourceNotFoundError: If the project is absent or not visible
            ForbiddenError: If the caller's role may not delete projects
        """
        async with self._session.begin():
            project = await self._load(context, Action.DELETE, project_id)
            deleted = await self._project_repository.delete(project)
            if not deleted:
                raise ResourceNotFoundError()

        self._probe.project_deleted(
            project_id=project_id.value, tenant_id=context.tenant_id
        )

    async def assign_user(
        self, context: AuthContext, project_id: ProjectId, user_id: str
    ) -> Project:
        """Assign a user of the caller's tenant to a project.

        Assigning an already assigned user changes nothing.

        Raises:
            ResourceNotFoundError: If the project is not visible, or the
                user is not a member of the caller's tenant
            ForbiddenError: If the caller's role may not assign users
        """
        async with self._session.begin():
            project = await self._load(context, Action.ASSIGN, project_id)
            if not await self._project_repository.is_tenant_member(user_id):
                self._probe.assignee_not_in_tenant(
                    project_id=project_id.value, user_id=user_id
                )
                raise ResourceNotFoundError()

            if project.assign(user_id):
                await self._project_repository.save(project)
                self._probe.assignee_added(
                    project_id=project_id.value, user_id=user_id
                )
        return project

    async def unassign_user(
        self, context: AuthContext, project_id: ProjectId, user_id: str
    ) -> Project:
        """Remove a user's assignment from a project.

        Removing a user that is not assigned changes nothing.

        Raises:
            ResourceNotFoundError: If the project is absent or not visible
            ForbiddenError: If the caller's role may not assign users
        """
        async with self._session.begin():
            project = await self._load(context, Action.ASSIGN, project_id)
            if project.unassign(user_id):
                await self._project_repository.save(project)
                self._probe.assignee_removed(
                    project_id=project_id.value, user_id=user_id
                )
        return project

    async def _load(
        self, context: AuthContext, action: Action, project_id: ProjectId
    ) -> Project:
        project = await self._project_repository.get_by_id(project_id)
        await self._authz.require(
            context,
            action,
            ResourceType.PROJECT,
            resource=project,
            resource_id=project_id.value,
        )
        assert project is not None
        return project
