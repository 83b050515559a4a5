"""Unit tests for the audit trail HTTP routes."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from audit.application import AuditQueryService
from audit.ports import AuditEventFilter
from shared_kernel.audit import AuditDecision, AuditEvent
from shared_kernel.authorization import Role


@pytest.fixture
def mock_service() -> AsyncMock:
    """Mock AuditQueryService for testing."""
    return AsyncMock(spec=AuditQueryService)


@pytest.fixture
def admin_context(make_context):
    return make_context(role=Role.TENANT_ADMIN)


@pytest.fixture
def test_client(mock_service, admin_context) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from audit.dependencies.query import get_audit_query_service
    from audit.presentation import router
    from iam.dependencies.authentication import get_auth_context

    app = FastAPI()
    app.dependency_overrides[get_audit_query_service] = lambda: mock_service
    app.dependency_overrides[get_auth_context] = lambda: admin_context
    app.include_router(router)

    return TestClient(app)


class TestListAuditEvents:
    """Tests for GET /audit-events."""

    def test_returns_events(self, test_client, mock_service, admin_context):
        mock_service.list_events.return_value = [
            AuditEvent(
                tenant_id=admin_context.tenant_id,
                user_id="u1",
                action="project.read",
                resource_type="project",
                resource_id="p-1",
                decision=AuditDecision.NOT_FOUND,
                timestamp=datetime(2026, 1, 1, tzinfo=UTC),
                request_id="req-1",
                error_code="not_found",
            )
        ]

        response = test_client.get("/audit-events")

        assert response.status_code == status.HTTP_200_OK
        [body] = response.json()
        assert body["action"] == "project.read"
        assert body["decision"] == "not_found"
        assert body["error_code"] == "not_found"
        assert "tenant_id" not in body

    def test_passes_filters(self, test_client, mock_service, admin_context):
        mock_service.list_events.return_value = []

        response = test_client.get(
            "/audit-events",
            params={"resource_type": "project", "user_id": "u1", "limit": 5},
        )

        assert response.status_code == status.HTTP_200_OK
        mock_service.list_events.assert_called_once_with(
            admin_context,
            AuditEventFilter(resource_type="project", user_id="u1", limit=5),
        )

    @pytest.mark.parametrize("limit", [0, 1001])
    def test_rejects_out_of_range_limit(self, test_client, mock_service, limit):
        response = test_client.get("/audit-events", params={"limit": limit})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_service.list_events.assert_not_called()
