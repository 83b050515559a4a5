"""HTTP routes for the caller's tenant.

There is no tenant id in any path: a request can only ever address the
tenant its credential is bound to.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from iam.application.services import TenantService
from iam.dependencies.authentication import get_auth_context
from iam.dependencies.tenant import get_tenant_service
from iam.presentation.tenants.models import RenameTenantRequest, TenantResponse
from shared_kernel.auth import AuthContext

router = APIRouter(
    prefix="/tenant",
    tags=["tenants"],
)


@router.get("")
async def get_tenant(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get the tenant the caller belongs to.

    Args:
        context: The request's AuthContext
        service: Tenant service

    Returns:
        TenantResponse with tenant details
    """
    tenant = await service.get_current(context)
    return TenantResponse.from_domain(tenant)


@router.patch("")
async def rename_tenant(
    request: RenameTenantRequest,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Rename the caller's tenant.

    Only tenant admins may update the tenant.

    Args:
        request: New tenant name
        context: The request's AuthContext
        service: Tenant service

    Returns:
        TenantResponse with updated tenant details
    """
    tenant = await service.rename(context, request.name)
    return TenantResponse.from_domain(tenant)
