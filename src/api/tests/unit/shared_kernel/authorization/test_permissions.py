"""Unit tests for the role permission table."""

import pytest

from shared_kernel.authorization import (
    DEFAULT_PERMISSIONS,
    Action,
    PermissionPolicy,
    ResourceType,
    Role,
)
from shared_kernel.exceptions import ConfigurationFaultError


class TestPermissionTableValidation:
    """The table must name every (role, resource type) pair."""

    def test_default_table_is_complete(self):
        PermissionPolicy(DEFAULT_PERMISSIONS)

    def test_missing_role_fails(self):
        table = {
            role: entries
            for role, entries in DEFAULT_PERMISSIONS.items()
            if role is not Role.VIEWER
        }

        with pytest.raises(ConfigurationFaultError, match="viewer"):
            PermissionPolicy(table)

    def test_missing_resource_type_fails(self):
        table = dict(DEFAULT_PERMISSIONS)
        table[Role.MEMBER] = {
            rt: actions
            for rt, actions in DEFAULT_PERMISSIONS[Role.MEMBER].items()
            if rt is not ResourceType.AUDIT_EVENT
        }

        with pytest.raises(ConfigurationFaultError, match="audit_event"):
            PermissionPolicy(table)

    def test_empty_entry_is_explicit_denial(self):
        """An empty action set is a valid, deliberate entry."""
        policy = PermissionPolicy()

        assert not any(
            policy.permits(Role.MEMBER, action, ResourceType.AUDIT_EVENT)
            for action in Action
        )

    def test_table_is_copied_on_construction(self):
        table = {role: dict(entries) for role, entries in DEFAULT_PERMISSIONS.items()}
        policy = PermissionPolicy(table)

        table[Role.VIEWER][ResourceType.PROJECT] = frozenset(Action)

        assert not policy.permits(Role.VIEWER, Action.DELETE, ResourceType.PROJECT)


class TestDefaultPermissions:
    """The shipped table's grants."""

    @pytest.fixture
    def policy(self) -> PermissionPolicy:
        return PermissionPolicy()

    @pytest.mark.parametrize("action", list(Action))
    def test_project_admin_has_every_project_action(self, policy, action):
        assert policy.permits(Role.PROJECT_ADMIN, action, ResourceType.PROJECT)

    def test_member_cannot_assign(self, policy):
        assert not policy.permits(Role.MEMBER, Action.ASSIGN, ResourceType.PROJECT)
        assert policy.permits(Role.MEMBER, Action.UPDATE, ResourceType.PROJECT)

    def test_viewer_is_read_only(self, policy):
        granted = {
            action
            for action in Action
            if policy.permits(Role.VIEWER, action, ResourceType.PROJECT)
        }
        assert granted == {Action.READ, Action.LIST}

    @pytest.mark.parametrize(
        "role", [Role.PROJECT_ADMIN, Role.MEMBER, Role.VIEWER]
    )
    def test_only_tenant_admin_reads_audit_events(self, policy, role):
        assert not policy.permits(role, Action.LIST, ResourceType.AUDIT_EVENT)
        assert policy.permits(
            Role.TENANT_ADMIN, Action.LIST, ResourceType.AUDIT_EVENT
        )

    def test_nobody_writes_audit_events(self, policy):
        for role in Role:
            for action in (Action.CREATE, Action.UPDATE, Action.DELETE):
                assert not policy.permits(role, action, ResourceType.AUDIT_EVENT)

    def test_only_tenant_admin_manages_users(self, policy):
        assert policy.permits(Role.TENANT_ADMIN, Action.CREATE, ResourceType.USER)
        assert not policy.permits(Role.PROJECT_ADMIN, Action.CREATE, ResourceType.USER)

    @pytest.mark.parametrize("role", list(Role))
    def test_every_role_may_update_users(self, policy, role):
        """Non-admins are limited to their own record by the ownership check."""
        assert policy.permits(role, Action.UPDATE, ResourceType.USER)

    @pytest.mark.parametrize(
        "role", [Role.PROJECT_ADMIN, Role.MEMBER, Role.VIEWER]
    )
    def test_only_tenant_admin_deletes_users(self, policy, role):
        assert not policy.permits(role, Action.DELETE, ResourceType.USER)
        assert policy.permits(Role.TENANT_ADMIN, Action.DELETE, ResourceType.USER)
