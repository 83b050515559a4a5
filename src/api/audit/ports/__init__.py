"""Ports (interfaces) for the Audit bounded context."""

from audit.ports.repositories import AuditEventFilter, IAuditEventRepository

__all__ = ["AuditEventFilter", "IAuditEventRepository"]
