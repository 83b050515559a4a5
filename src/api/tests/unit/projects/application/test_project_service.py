"""Unit tests for ProjectService."""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from projects.application.observability import ProjectServiceProbe
from projects.application.services import ProjectService
from projects.domain.aggregates import Project
from projects.domain.value_objects import ProjectId, ProjectStatus
from projects.ports.repositories import IProjectRepository
from shared_kernel.authorization import AuthorizationEngine, Role
from shared_kernel.exceptions import ForbiddenError, ResourceNotFoundError

TENANT_ID = str(ULID())


def _project(owner_id: str = "alice", tenant_id: str = TENANT_ID) -> Project:
    return Project.create(tenant_id=tenant_id, owner_id=owner_id, name="Apollo")


@pytest.fixture
def mock_project_repo():
    """Mock ProjectRepository."""
    repo = Mock(spec=IProjectRepository)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.list_all = AsyncMock(return_value=[])
    repo.save = AsyncMock()
    repo.delete = AsyncMock(return_value=True)
    repo.is_tenant_member = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_session():
    """Mock AsyncSession."""
    session = Mock(spec=AsyncSession)

    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=None)

    session.begin = Mock(return_value=ctx_manager)
    return session


@pytest.fixture
def mock_probe():
    return Mock(spec=ProjectServiceProbe)


@pytest.fixture
def project_service(mock_project_repo, mock_session, audit_recorder, mock_probe):
    return ProjectService(
        project_repository=mock_project_repo,
        session=mock_session,
        authz=AuthorizationEngine(recorder=audit_recorder),
        probe=mock_probe,
    )


@pytest.fixture
def member(make_context):
    return make_context(tenant_id=TENANT_ID, user_id="alice", role=Role.MEMBER)


class TestCreateProject:
    """Tests for ProjectService.create_project."""

    @pytest.mark.asyncio
    async def test_caller_owns_project_in_own_tenant(
        self, project_service, mock_project_repo, member, audit_recorder
    ):
        project = await project_service.create_project(member, name="Apollo")

        assert project.tenant_id == TENANT_ID
        assert project.owner_id == "alice"
        mock_project_repo.save.assert_awaited_once_with(project)
        assert audit_recorder.actions() == ["project.create"]

    @pytest.mark.asyncio
    async def test_viewer_is_forbidden(
        self, project_service, mock_project_repo, make_context
    ):
        viewer = make_context(tenant_id=TENANT_ID, role=Role.VIEWER)

        with pytest.raises(ForbiddenError):
            await project_service.create_project(viewer, name="Apollo")

        mock_project_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_name(self, project_service, mock_project_repo, member):
        with pytest.raises(ValueError):
            await project_service.create_project(member, name=" ")

        mock_project_repo.save.assert_not_called()


class TestGetProject:
    """Tests for ProjectService.get_project."""

    @pytest.mark.asyncio
    async def test_owner_reads(self, project_service, mock_project_repo, member):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        assert await project_service.get_project(member, project.id) is project

    @pytest.mark.asyncio
    async def test_assignee_reads(
        self, project_service, mock_project_repo, make_context
    ):
        project = _project()
        project.assign("bob")
        mock_project_repo.get_by_id.return_value = project
        bob = make_context(tenant_id=TENANT_ID, user_id="bob", role=Role.VIEWER)

        assert await project_service.get_project(bob, project.id) is project

    @pytest.mark.asyncio
    async def test_unrelated_member_gets_not_found(
        self, project_service, mock_project_repo, make_context, audit_recorder
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project
        carol = make_context(tenant_id=TENANT_ID, user_id="carol")

        with pytest.raises(ResourceNotFoundError):
            await project_service.get_project(carol, project.id)

        assert audit_recorder.events[0].decision == "not_found"

    @pytest.mark.asyncio
    async def test_other_tenant_project_is_not_found(
        self, project_service, mock_project_repo, make_context
    ):
        project = _project(tenant_id=str(ULID()))
        mock_project_repo.get_by_id.return_value = project
        admin = make_context(tenant_id=TENANT_ID, role=Role.TENANT_ADMIN)

        with pytest.raises(ResourceNotFoundError):
            await project_service.get_project(admin, project.id)

    @pytest.mark.asyncio
    async def test_absent_project_is_not_found(self, project_service, member):
        with pytest.raises(ResourceNotFoundError):
            await project_service.get_project(member, ProjectId.generate())


class TestListProjects:
    """Tests for ProjectService.list_projects."""

    @pytest.mark.asyncio
    async def test_member_sees_owned_and_assigned(
        self, project_service, mock_project_repo, member, mock_probe
    ):
        owned = _project()
        assigned = _project(owner_id="bob")
        assigned.assign("alice")
        unrelated = _project(owner_id="bob")
        mock_project_repo.list_all.return_value = [owned, assigned, unrelated]

        result = await project_service.list_projects(member)

        assert result == [owned, assigned]
        mock_probe.projects_listed.assert_called_once_with(total=3, visible=2)

    @pytest.mark.asyncio
    async def test_tenant_admin_sees_all(
        self, project_service, mock_project_repo, make_context
    ):
        projects = [_project(), _project(owner_id="bob")]
        mock_project_repo.list_all.return_value = projects
        admin = make_context(tenant_id=TENANT_ID, role=Role.TENANT_ADMIN)

        assert await project_service.list_projects(admin) == projects


class TestUpdateProject:
    """Tests for ProjectService.update_project."""

    @pytest.mark.asyncio
    async def test_owner_updates(self, project_service, mock_project_repo, member):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        result = await project_service.update_project(
            member, project.id, name="Artemis", status=ProjectStatus.ARCHIVED
        )

        assert result.name == "Artemis"
        assert result.is_archived
        mock_project_repo.save.assert_awaited_once_with(project)

    @pytest.mark.asyncio
    async def test_viewer_assignee_is_forbidden(
        self, project_service, mock_project_repo, make_context
    ):
        project = _project()
        project.assign("bob")
        mock_project_repo.get_by_id.return_value = project
        bob = make_context(tenant_id=TENANT_ID, user_id="bob", role=Role.VIEWER)

        with pytest.raises(ForbiddenError):
            await project_service.update_project(bob, project.id, name="Artemis")

        assert project.name == "Apollo"
        mock_project_repo.save.assert_not_called()


class TestDeleteProject:
    """Tests for ProjectService.delete_project."""

    @pytest.mark.asyncio
    async def test_owner_deletes(
        self, project_service, mock_project_repo, member, mock_probe
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        await project_service.delete_project(member, project.id)

        mock_project_repo.delete.assert_awaited_once_with(project)
        mock_probe.project_deleted.assert_called_once_with(
            project_id=project.id.value, tenant_id=TENANT_ID
        )

    @pytest.mark.asyncio
    async def test_concurrently_deleted_is_not_found(
        self, project_service, mock_project_repo, member
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project
        mock_project_repo.delete.return_value = False

        with pytest.raises(ResourceNotFoundError):
            await project_service.delete_project(member, project.id)


class TestAssignment:
    """Tests for assigning and unassigning users."""

    @pytest.fixture
    def project_admin(self, make_context):
        return make_context(
            tenant_id=TENANT_ID, user_id="alice", role=Role.PROJECT_ADMIN
        )

    @pytest.mark.asyncio
    async def test_assigns_tenant_member(
        self, project_service, mock_project_repo, project_admin
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        result = await project_service.assign_user(project_admin, project.id, "bob")

        assert result.assignee_ids == {"bob"}
        mock_project_repo.is_tenant_member.assert_awaited_once_with("bob")
        mock_project_repo.save.assert_awaited_once_with(project)

    @pytest.mark.asyncio
    async def test_assign_is_idempotent(
        self, project_service, mock_project_repo, project_admin
    ):
        project = _project()
        project.assign("bob")
        mock_project_repo.get_by_id.return_value = project

        await project_service.assign_user(project_admin, project.id, "bob")

        mock_project_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_member_is_not_found(
        self, project_service, mock_project_repo, project_admin, mock_probe
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project
        mock_project_repo.is_tenant_member.return_value = False

        with pytest.raises(ResourceNotFoundError):
            await project_service.assign_user(project_admin, project.id, "mallory")

        assert project.assignee_ids == set()
        mock_probe.assignee_not_in_tenant.assert_called_once_with(
            project_id=project.id.value, user_id="mallory"
        )

    @pytest.mark.asyncio
    async def test_member_cannot_assign(
        self, project_service, mock_project_repo, member
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        with pytest.raises(ForbiddenError):
            await project_service.assign_user(member, project.id, "bob")

        mock_project_repo.is_tenant_member.assert_not_called()

    @pytest.mark.asyncio
    async def test_unassign(self, project_service, mock_project_repo, project_admin):
        project = _project()
        project.assign("bob")
        mock_project_repo.get_by_id.return_value = project

        result = await project_service.unassign_user(project_admin, project.id, "bob")

        assert result.assignee_ids == set()
        mock_project_repo.save.assert_awaited_once_with(project)

    @pytest.mark.asyncio
    async def test_unassign_unknown_user_changes_nothing(
        self, project_service, mock_project_repo, project_admin
    ):
        project = _project()
        mock_project_repo.get_by_id.return_value = project

        await project_service.unassign_user(project_admin, project.id, "bob")

        mock_project_repo.save.assert_not_called()
