"""Application layer for the Audit bounded context."""

from audit.application.services import AuditQueryService

__all__ = ["AuditQueryService"]
