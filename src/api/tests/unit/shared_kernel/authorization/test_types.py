"""Unit tests for authorization types."""

import pytest

from shared_kernel.authorization.types import (
    Action,
    DecisionOutcome,
    ResourceType,
    Role,
)


class TestRole:
    """Tests for Role enum."""

    def test_roles_are_closed_set(self):
        assert {role.value for role in Role} == {
            "tenant_admin",
            "project_admin",
            "member",
            "viewer",
        }

    def test_unknown_role_is_rejected(self):
        with pytest.raises(ValueError):
            Role("superuser")

    def test_only_tenant_admin_bypasses_ownership(self):
        assert [role for role in Role if role.bypasses_ownership] == [
            Role.TENANT_ADMIN
        ]


class TestAction:
    """Tests for Action enum."""

    @pytest.mark.parametrize("action", [Action.LIST, Action.CREATE])
    def test_collection_actions(self, action):
        assert action.is_collection_action

    @pytest.mark.parametrize(
        "action", [Action.READ, Action.UPDATE, Action.DELETE, Action.ASSIGN]
    )
    def test_targeted_actions(self, action):
        assert not action.is_collection_action


class TestResourceType:
    """Tests for ResourceType enum."""

    def test_resource_types_are_lowercase(self):
        """Audit action names are built from these values."""
        for resource_type in ResourceType:
            assert resource_type.islower()
            assert isinstance(resource_type, str)

    def test_audit_action_name(self):
        assert f"{ResourceType.AUDIT_EVENT}.{Action.LIST}" == "audit_event.list"


class TestDecisionOutcome:
    """Tests for DecisionOutcome enum."""

    def test_values(self):
        assert [outcome.value for outcome in DecisionOutcome] == [
            "allowed",
            "forbidden",
            "not_found",
        ]
