"""Static role permission table.

Maps (role, resource type) to the set of permitted actions. The table is
validated exhaustively when a PermissionPolicy is constructed: every Role
must carry an explicit entry for every ResourceType, even if that entry is
empty. Adding a Role or ResourceType without updating the table therefore
fails at startup instead of silently denying or allowing.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from shared_kernel.authorization.types import Action, ResourceType, Role
from shared_kernel.exceptions import ConfigurationFaultError

PermissionTable = Mapping[Role, Mapping[ResourceType, frozenset[Action]]]

_ALL_USER_ACTIONS = frozenset(
    {Action.READ, Action.LIST, Action.CREATE, Action.UPDATE, Action.DELETE}
)
_ALL_PROJECT_ACTIONS = frozenset(Action)
_READ_ONLY = frozenset({Action.READ, Action.LIST})
# Ownership limits non-admins to their own user record
_SELF_SERVICE = _READ_ONLY | {Action.UPDATE}
_NONE: frozenset[Action] = frozenset()

DEFAULT_PERMISSIONS: PermissionTable = {
    Role.TENANT_ADMIN: {
        ResourceType.TENANT: frozenset({Action.READ, Action.UPDATE}),
        ResourceType.USER: _ALL_USER_ACTIONS,
        ResourceType.PROJECT: _ALL_PROJECT_ACTIONS,
        ResourceType.AUDIT_EVENT: _READ_ONLY,
    },
    Role.PROJECT_ADMIN: {
        ResourceType.TENANT: frozenset({Action.READ}),
        ResourceType.USER: _SELF_SERVICE,
        ResourceType.PROJECT: _ALL_PROJECT_ACTIONS,
        ResourceType.AUDIT_EVENT: _NONE,
    },
    Role.MEMBER: {
        ResourceType.TENANT: frozenset({Action.READ}),
        ResourceType.USER: _SELF_SERVICE,
        ResourceType.PROJECT: _ALL_PROJECT_ACTIONS - {Action.ASSIGN},
        ResourceType.AUDIT_EVENT: _NONE,
    },
    Role.VIEWER: {
        ResourceType.TENANT: frozenset({Action.READ}),
        ResourceType.USER: _SELF_SERVICE,
        ResourceType.PROJECT: _READ_ONLY,
        ResourceType.AUDIT_EVENT: _NONE,
    },
}


class PermissionPolicy:
    """Immutable, exhaustively validated role permission table."""

    def __init__(self, table: PermissionTable = DEFAULT_PERMISSIONS):
        """Validate and freeze the permission table.

        Args:
            table: Mapping of role to resource type to permitted actions

        Raises:
            ConfigurationFaultError: If any (role, resource type) pair has
                no explicit entry, or the table names unknown keys
        """
        self._table = self._validate(table)

    @staticmethod
    def _validate(
        table: PermissionTable,
    ) -> Mapping[Role, Mapping[ResourceType, frozenset[Action]]]:
        unknown_roles = set(table) - set(Role)
        if unknown_roles:
            raise ConfigurationFaultError(
                f"Permission table names unknown roles: {sorted(unknown_roles)}"
            )

        frozen: dict[Role, Mapping[ResourceType, frozenset[Action]]] = {}
        for role in Role:
            if role not in table:
                raise ConfigurationFaultError(
                    f"Permission table has no entry for role '{role}'"
                )
            entries = table[role]
            missing = [rt for rt in ResourceType if rt not in entries]
            if missing:
                raise ConfigurationFaultError(
                    f"Permission table entry for role '{role}' is missing "
                    f"resource types: {[str(rt) for rt in missing]}"
                )
            unknown_types = set(entries) - set(ResourceType)
            if unknown_types:
                raise ConfigurationFaultError(
                    f"Permission table entry for role '{role}' names unknown "
                    f"resource types: {sorted(unknown_types)}"
                )
            frozen[role] = MappingProxyType(
                {rt: frozenset(entries[rt]) for rt in ResourceType}
            )
        return MappingProxyType(frozen)

    def permits(self, role: Role, action: Action, resource_type: ResourceType) -> bool:
        """Check whether a role may perform an action on a resource type."""
        return action in self._table[role][resource_type]
