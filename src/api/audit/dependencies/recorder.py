"""Audit recorder providers.

Kept free of request-scoped dependencies so that the session and
authorization wiring in other contexts can depend on it.
"""

from audit.infrastructure.sql_recorder import SqlAuditRecorder
from infrastructure.database.dependencies import get_sessionmaker
from shared_kernel.audit import AuditProbe, AuditRecorder, DefaultAuditProbe


def get_audit_probe() -> AuditProbe:
    """Get AuditProbe instance.

    Returns:
        DefaultAuditProbe instance for observability
    """
    return DefaultAuditProbe()


def get_audit_recorder() -> AuditRecorder:
    """Get the audit recorder writing to the application database.

    Returns:
        SqlAuditRecorder on the shared session factory
    """
    return SqlAuditRecorder(sessionmaker=get_sessionmaker(), probe=get_audit_probe())
