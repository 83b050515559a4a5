"""SQLAlchemy ORM model for the audit_events table.

Audit rows are append-only: the row isolation events refuse every update
and delete, and on PostgreSQL the update/delete policies are ``USING
(false)``. The model is never audited itself.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from ulid import ULID

from infrastructure.database.models import Base, TenantScopedMixin
from shared_kernel.audit import AuditDecision, AuditEvent


def _generate_id() -> str:
    return str(ULID())


class AuditEventModel(Base, TenantScopedMixin):
    """ORM model for audit_events table.

    Note: user_id has no foreign key so that removing a user never
    rewrites audit history.
    """

    __tablename__ = "audit_events"
    __table_args__ = (
        Index("ix_audit_events_resource", "resource_type", "resource_id"),
    )
    __append_only__ = True

    id: Mapped[str] = mapped_column(
        String(26), primary_key=True, insert_default=_generate_id
    )
    user_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    decision: Mapped[str] = mapped_column(String(20), nullable=False)
    error_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    @classmethod
    def from_event(cls, event: AuditEvent) -> AuditEventModel:
        """Build a row from an audit event."""
        return cls(
            tenant_id=event.tenant_id,
            user_id=event.user_id,
            action=event.action,
            resource_type=event.resource_type,
            resource_id=event.resource_id,
            decision=event.decision.value,
            error_code=event.error_code,
            request_id=event.request_id,
            occurred_at=event.timestamp,
        )

    def to_event(self) -> AuditEvent:
        """Convert the row back into an audit event."""
        occurred_at = self.occurred_at
        if occurred_at.tzinfo is None:
            # SQLite drops the offset; stored values are always UTC
            occurred_at = occurred_at.replace(tzinfo=UTC)
        return AuditEvent(
            tenant_id=self.tenant_id,
            user_id=self.user_id,
            action=self.action,
            resource_type=self.resource_type,
            resource_id=self.resource_id,
            decision=AuditDecision(self.decision),
            timestamp=occurred_at,
            request_id=self.request_id,
            error_code=self.error_code,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<AuditEventModel(id={self.id}, action={self.action}, "
            f"decision={self.decision})>"
        )
