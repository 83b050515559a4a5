"""Authorization engine provider."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from audit.dependencies.recorder import get_audit_recorder
from shared_kernel.audit import AuditRecorder
from shared_kernel.authorization import AuthorizationEngine, PermissionPolicy


@lru_cache
def get_permission_policy() -> PermissionPolicy:
    """Get the validated role permission table.

    Validation happens once, on first use; main.py calls this at startup
    so that an incomplete table stops the application from starting.
    """
    return PermissionPolicy()


def get_authorization_engine(
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    policy: Annotated[PermissionPolicy, Depends(get_permission_policy)],
) -> AuthorizationEngine:
    """Get an AuthorizationEngine recording decisions to the audit trail.

    Args:
        recorder: Audit sink receiving one event per decision
        policy: Validated role permission table

    Returns:
        AuthorizationEngine instance
    """
    return AuthorizationEngine(recorder=recorder, policy=policy)
