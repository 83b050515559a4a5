"""HTTP routes for reading the tenant audit trail."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from audit.application import AuditQueryService
from audit.dependencies.query import get_audit_query_service
from audit.ports import AuditEventFilter
from audit.presentation.models import AuditEventResponse
from iam.dependencies.authentication import get_auth_context
from shared_kernel.auth import AuthContext

router = APIRouter(
    prefix="/audit-events",
    tags=["audit"],
)


@router.get("")
async def list_audit_events(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[AuditQueryService, Depends(get_audit_query_service)],
    action: Annotated[str | None, Query(max_length=100)] = None,
    resource_type: Annotated[str | None, Query(max_length=100)] = None,
    resource_id: Annotated[str | None, Query(max_length=255)] = None,
    user_id: Annotated[str | None, Query(max_length=255)] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> list[AuditEventResponse]:
    """List audit events of the caller's tenant, newest first.

    Only tenant admins may read the trail.

    Args:
        context: The request's AuthContext
        service: Audit query service
        action: Only events with this action
        resource_type: Only events for this resource type
        resource_id: Only events for this resource
        user_id: Only events by this user
        limit: Maximum number of events to return

    Returns:
        List of AuditEventResponse objects
    """
    events = await service.list_events(
        context,
        AuditEventFilter(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=user_id,
            limit=limit,
        ),
    )
    return [AuditEventResponse.from_domain(event) for event in events]
