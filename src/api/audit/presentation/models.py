"""Pydantic models for audit trail responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shared_kernel.audit import AuditEvent


class AuditEventResponse(BaseModel):
    """Response model for one audit event.

    Mirrors the audit field allow-list; the tenant is implied by the
    caller's credential and not repeated.
    """

    user_id: str | None = Field(default=None, description="Acting user")
    action: str = Field(..., description="Dotted action name, e.g. project.update")
    resource_type: str = Field(..., description="Type of the resource acted on")
    resource_id: str | None = Field(default=None, description="Target resource")
    decision: str = Field(
        ..., description="allowed, forbidden, not_found or committed"
    )
    error_code: str | None = Field(
        default=None, description="Stable error code of a denied operation"
    )
    timestamp: datetime = Field(..., description="When the event happened (UTC)")
    request_id: str | None = Field(default=None, description="Correlation id")

    @classmethod
    def from_domain(cls, event: AuditEvent) -> AuditEventResponse:
        """Convert an AuditEvent to API response.

        Args:
            event: Audit event read from the trail

        Returns:
            AuditEventResponse
        """
        return cls(
            user_id=event.user_id,
            action=event.action,
            resource_type=event.resource_type,
            resource_id=event.resource_id,
            decision=event.decision.value,
            error_code=event.error_code,
            timestamp=event.timestamp,
            request_id=event.request_id,
        )
