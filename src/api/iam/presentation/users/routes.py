"""HTTP routes for the users of the caller's tenant."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import UserService
from iam.dependencies.authentication import get_auth_context
from iam.dependencies.user import get_user_service
from iam.domain.value_objects import UserId
from iam.ports.exceptions import DuplicateUserEmailError, DuplicateUserIdError
from iam.presentation.users.models import (
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
)
from shared_kernel.auth import AuthContext
from shared_kernel.exceptions import ResourceNotFoundError

router = APIRouter(
    prefix="/users",
    tags=["users"],
)

# Same body whether the id or the email collided, and whichever tenant holds it
_CONFLICT_DETAIL = "A user with this id or email already exists"


def _parse_user_id(user_id: str) -> UserId:
    """Parse a path id; a malformed id is just another unknown user."""
    try:
        return UserId.from_string(user_id)
    except ValueError as e:
        raise ResourceNotFoundError() from e


@router.get("")
async def list_users(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    """List the users of the caller's tenant the caller may see.

    Tenant admins see everyone; other roles only see themselves.

    Args:
        context: The request's AuthContext
        service: User service

    Returns:
        List of UserResponse objects
    """
    users = await service.list_users(context)
    return [UserResponse.from_domain(user) for user in users]


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Get one user of the caller's tenant.

    Args:
        user_id: User ID (identity provider subject)
        context: The request's AuthContext
        service: User service

    Returns:
        UserResponse with user details

    Raises:
        ResourceNotFoundError: If the user is absent, in another tenant or
            not visible to the caller
    """
    user = await service.get_user(context, _parse_user_id(user_id))
    return UserResponse.from_domain(user)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Add a user to the caller's tenant.

    Only tenant admins may create users.

    Args:
        request: User creation request
        context: The request's AuthContext
        service: User service

    Returns:
        UserResponse with created user details

    Raises:
        HTTPException: 409 if the id or email is already in use
    """
    try:
        user = await service.create_user(
            context,
            user_id=UserId.from_string(request.id),
            email=request.email,
            name=request.name,
            role=request.role,
        )
    except (DuplicateUserEmailError, DuplicateUserIdError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_CONFLICT_DETAIL,
        ) from e

    return UserResponse.from_domain(user)


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Update a user's email, name, role or status.

    Users may edit their own email and name. Tenant admins may edit any
    user of the tenant, including role and status.

    Args:
        user_id: User ID (identity provider subject)
        request: Fields to change
        context: The request's AuthContext
        service: User service

    Returns:
        UserResponse with updated user details

    Raises:
        HTTPException: 409 if the new email is already in use, 422 if it
            is blank
    """
    try:
        user = await service.update_user(
            context,
            _parse_user_id(user_id),
            email=request.email,
            name=request.name,
            role=request.role,
            status=request.status,
        )
    except DuplicateUserEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_CONFLICT_DETAIL,
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return UserResponse.from_domain(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_user(
    user_id: str,
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> None:
    """Remove a user from the caller's tenant.

    Args:
        user_id: User ID (identity provider subject)
        context: The request's AuthContext
        service: User service
    """
    await service.delete_user(context, _parse_user_id(user_id))
