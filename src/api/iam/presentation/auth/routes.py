"""HTTP routes for the token lifecycle."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import TokenLifecycleService
from iam.dependencies.authentication import (
    get_auth_context,
    get_context_propagator,
    get_single_use_auth_context,
)
from iam.dependencies.token import get_token_lifecycle_service
from iam.presentation.auth.models import RefreshTokenRequest
from shared_kernel.auth import AuthContext
from shared_kernel.middleware.context_propagation import ContextPropagator

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={
        204: {"description": "Token revoked"},
        401: {"description": "Missing or invalid credential"},
        503: {"description": "Revocation could not be recorded"},
    },
)
async def logout(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TokenLifecycleService, Depends(get_token_lifecycle_service)],
    propagator: Annotated[ContextPropagator, Depends(get_context_propagator)],
) -> None:
    """Revoke the bearer token used for this request.

    Any later request presenting the same token fails authentication, and
    the context stays unusable for the rest of this request.

    Args:
        context: The request's AuthContext
        service: Token lifecycle service
        propagator: Context propagator holding the request's binding
    """
    await service.logout(context)
    propagator.invalidate("token_revoked")


@router.post(
    "/refresh",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={
        204: {"description": "New refresh token tracked"},
        401: {"description": "Refresh token missing, invalid or already used"},
        422: {"description": "New token reuses the presented token id"},
        503: {"description": "New token could not be recorded"},
    },
)
async def refresh(
    request: RefreshTokenRequest,
    context: Annotated[AuthContext, Depends(get_single_use_auth_context)],
    service: Annotated[TokenLifecycleService, Depends(get_token_lifecycle_service)],
) -> None:
    """Rotate the refresh token presented as the bearer credential.

    The presented token is redeemed during authentication, so it is
    accepted exactly once. Its successor is tracked from here on.

    Args:
        request: The successor token's id and expiry
        context: AuthContext built from the redeemed refresh token
        service: Token lifecycle service

    Raises:
        HTTPException: 422 if the successor reuses the presented token id
    """
    try:
        await service.rotate_refresh_token(
            context, request.token_id, request.expires_at
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
