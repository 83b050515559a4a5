"""Authorization primitives for tenant-scoped access control.

This module provides the closed role and action types, the static role
permission table, the resource capability protocol and the decision engine
used across bounded contexts.
"""

from shared_kernel.authorization.engine import (
    AuthorizationDecision,
    AuthorizationEngine,
)
from shared_kernel.authorization.permissions import (
    DEFAULT_PERMISSIONS,
    PermissionPolicy,
)
from shared_kernel.authorization.protocols import ProtectedResource
from shared_kernel.authorization.types import (
    Action,
    DecisionOutcome,
    ResourceType,
    Role,
)

__all__ = [
    "Action",
    "AuthorizationDecision",
    "AuthorizationEngine",
    "DEFAULT_PERMISSIONS",
    "DecisionOutcome",
    "PermissionPolicy",
    "ProtectedResource",
    "ResourceType",
    "Role",
]
