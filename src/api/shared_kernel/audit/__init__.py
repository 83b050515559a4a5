"""Audit primitives shared by the authorization engine and row isolation.

The audit event type and the recorder port live in the shared kernel so
that every component emitting decisions or mutations speaks the same
append-only schema. Persistence lives in the audit bounded context.
"""

from shared_kernel.audit.events import AuditDecision, AuditEvent
from shared_kernel.audit.observability import AuditProbe, DefaultAuditProbe
from shared_kernel.audit.recorder import AuditRecorder

__all__ = [
    "AuditDecision",
    "AuditEvent",
    "AuditProbe",
    "AuditRecorder",
    "DefaultAuditProbe",
]
