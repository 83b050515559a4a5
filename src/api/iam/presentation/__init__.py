"""IAM presentation layer - aggregate-based organization.

Organizes presentation concerns by domain aggregate (tenant, users) plus
the token lifecycle endpoints, following vertical slicing. Each package
contains its own routes and models.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import auth, tenants, users

# Auth is enforced per-endpoint: every handler depends on a service built
# on the tenant-scoped session, or on get_auth_context directly.
router = APIRouter(tags=["iam"])

router.include_router(auth.router)
router.include_router(tenants.router)
router.include_router(users.router)

__all__ = ["router"]
