"""Authorization type definitions.

Defines the closed sets of roles, actions, resource types and decision
outcomes the authorization engine reasons about. These enums ensure type
safety and prevent hardcoded strings across the codebase.
"""

from enum import StrEnum


class Role(StrEnum):
    """Tenant-scoped roles carried in the credential.

    A closed enum: an unrecognized role string never becomes a Role,
    so a token cannot introduce a privilege level the permission table
    does not know about.
    """

    TENANT_ADMIN = "tenant_admin"
    PROJECT_ADMIN = "project_admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @property
    def bypasses_ownership(self) -> bool:
        """Whether the ownership/assignment check is skipped for this role."""
        return self is Role.TENANT_ADMIN


class Action(StrEnum):
    """Operations that can be authorized against a resource type."""

    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"

    @property
    def is_collection_action(self) -> bool:
        """Whether the action targets a collection rather than one resource.

        Collection actions have no existing target, so the tenant boundary
        and ownership steps do not apply to them.
        """
        return self in (Action.LIST, Action.CREATE)


class ResourceType(StrEnum):
    """Resource types protected by the authorization engine."""

    TENANT = "tenant"
    USER = "user"
    PROJECT = "project"
    AUDIT_EVENT = "audit_event"


class DecisionOutcome(StrEnum):
    """Outcome of an authorization decision.

    FORBIDDEN is only produced when the role is categorically disallowed;
    any ambiguity about a specific resource is reported as NOT_FOUND.
    """

    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
