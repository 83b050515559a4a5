"""Unit tests for the user HTTP routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from ulid import ULID

from iam.application.services import UserService
from iam.dependencies.authentication import get_auth_context
from iam.dependencies.user import get_user_service
from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId, UserStatus
from iam.ports.exceptions import DuplicateUserEmailError, DuplicateUserIdError
from main import app
from shared_kernel.authorization import Role
from shared_kernel.exceptions import ForbiddenError, ResourceNotFoundError

TENANT_ID = str(ULID())


def _user(user_id: str, role: Role = Role.MEMBER) -> User:
    return User(
        id=UserId(value=user_id),
        tenant_id=TenantId(value=TENANT_ID),
        email=f"{user_id}@acme.example",
        role=role,
    )


@pytest.fixture
def mock_service() -> AsyncMock:
    """Mock UserService for testing."""
    return AsyncMock(spec=UserService)


@pytest.fixture
def context(make_context):
    return make_context(tenant_id=TENANT_ID, user_id="alice", role=Role.TENANT_ADMIN)


@pytest.fixture
def test_client(mock_service, context):
    """TestClient on the application with mocked dependencies."""
    app.dependency_overrides[get_user_service] = lambda: mock_service
    app.dependency_overrides[get_auth_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListUsers:
    """Tests for GET /users."""

    def test_returns_visible_users(self, test_client, mock_service):
        mock_service.list_users.return_value = [_user("alice"), _user("bob")]

        response = test_client.get("/users")

        assert response.status_code == status.HTTP_200_OK
        assert [user["id"] for user in response.json()] == ["alice", "bob"]


class TestGetUser:
    """Tests for GET /users/{user_id}."""

    def test_returns_user(self, test_client, mock_service, context):
        mock_service.get_user.return_value = _user("bob")

        response = test_client.get("/users/bob")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["tenant_id"] == TENANT_ID
        mock_service.get_user.assert_called_once_with(context, UserId(value="bob"))

    def test_invisible_user_is_404(self, test_client, mock_service):
        mock_service.get_user.side_effect = ResourceNotFoundError()

        response = test_client.get("/users/mallory")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_oversized_id_is_404_without_lookup(self, test_client, mock_service):
        response = test_client.get(f"/users/{'x' * 256}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        mock_service.get_user.assert_not_called()


class TestCreateUser:
    """Tests for POST /users."""

    def test_creates_user(self, test_client, mock_service, context):
        mock_service.create_user.return_value = _user("carol", Role.VIEWER)

        response = test_client.post(
            "/users",
            json={"id": "carol", "email": "carol@acme.example", "role": "viewer"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["role"] == "viewer"
        mock_service.create_user.assert_called_once_with(
            context,
            user_id=UserId(value="carol"),
            email="carol@acme.example",
            name=None,
            role=Role.VIEWER,
        )

    def test_tenant_field_is_ignored(self, test_client, mock_service, context):
        mock_service.create_user.return_value = _user("carol")

        response = test_client.post(
            "/users",
            json={
                "id": "carol",
                "email": "carol@acme.example",
                "tenant_id": str(ULID()),
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert mock_service.create_user.call_args.args == (context,)

    def test_duplicate_email_is_409(self, test_client, mock_service):
        mock_service.create_user.side_effect = DuplicateUserEmailError("taken")

        response = test_client.post(
            "/users", json={"id": "carol", "email": "alice@acme.example"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_role_is_422(self, test_client, mock_service):
        response = test_client.post(
            "/users",
            json={"id": "carol", "email": "carol@acme.example", "role": "owner"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_service.create_user.assert_not_called()

    def test_id_conflict_matches_email_conflict(self, test_client, mock_service):
        mock_service.create_user.side_effect = DuplicateUserEmailError("taken")
        email_conflict = test_client.post(
            "/users", json={"id": "carol", "email": "alice@acme.example"}
        )
        mock_service.create_user.side_effect = DuplicateUserIdError("taken")
        id_conflict = test_client.post(
            "/users", json={"id": "globex-admin", "email": "new@acme.example"}
        )

        assert id_conflict.status_code == status.HTTP_409_CONFLICT
        assert id_conflict.json() == email_conflict.json()


class TestUpdateUser:
    """Tests for PATCH /users/{user_id}."""

    def test_updates_user(self, test_client, mock_service, context):
        bob = _user("bob", Role.VIEWER)
        bob.status = UserStatus.DISABLED
        mock_service.update_user.return_value = bob

        response = test_client.patch(
            "/users/bob", json={"role": "viewer", "status": "disabled"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "disabled"
        mock_service.update_user.assert_called_once_with(
            context,
            UserId(value="bob"),
            email=None,
            name=None,
            role=Role.VIEWER,
            status=UserStatus.DISABLED,
        )

    def test_forbidden_role_change_is_403(self, test_client, mock_service):
        mock_service.update_user.side_effect = ForbiddenError()

        response = test_client.patch("/users/alice", json={"role": "tenant_admin"})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invisible_user_is_404(self, test_client, mock_service):
        mock_service.update_user.side_effect = ResourceNotFoundError()

        response = test_client.patch("/users/mallory", json={"name": "M"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_duplicate_email_is_409(self, test_client, mock_service):
        mock_service.update_user.side_effect = DuplicateUserEmailError("taken")

        response = test_client.patch(
            "/users/alice", json={"email": "bob@acme.example"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_blank_email_is_422(self, test_client, mock_service):
        mock_service.update_user.side_effect = ValueError("User email cannot be empty")

        response = test_client.patch("/users/alice", json={"email": "   "})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestDeleteUser:
    """Tests for DELETE /users/{user_id}."""

    def test_deletes_user(self, test_client, mock_service, context):
        mock_service.delete_user.return_value = None

        response = test_client.delete("/users/bob")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        mock_service.delete_user.assert_called_once_with(context, UserId(value="bob"))

    def test_self_deletion_is_403(self, test_client, mock_service):
        mock_service.delete_user.side_effect = ForbiddenError()

        response = test_client.delete("/users/alice")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_other_tenant_user_is_404(self, test_client, mock_service):
        mock_service.delete_user.side_effect = ResourceNotFoundError()

        response = test_client.delete("/users/globex-admin")

        assert response.status_code == status.HTTP_404_NOT_FOUND
