"""SQLAlchemy implementation of IUserRepository.

Simple repository for user metadata storage. Users are provisioned from SSO
and this repository only handles metadata persistence. Every statement
runs on a tenant-scoped session and only ever sees the caller's tenant.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId, UserStatus
from iam.infrastructure.models import UserModel
from iam.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from iam.ports.exceptions import DuplicateUserEmailError, DuplicateUserIdError
from iam.ports.repositories import IUserRepository
from shared_kernel.authorization.types import Role


class UserRepository(IUserRepository):
    """Repository for User aggregates.

    Simple metadata-only repository. Users are provisioned from SSO,
    so this only stores minimal metadata for lookup and reference.
    """

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: Tenant-scoped AsyncSession
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one. The tenant of a new
        row is always taken from the session's AuthContext.

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateUserEmailError: If the email is taken in the tenant
            DuplicateUserIdError: If the id of a new user is already taken,
                possibly by a user of another tenant
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            model.email = user.email
            model.name = user.name
            model.role = user.role.value
            model.status = user.status.value
        else:
            model = UserModel(
                id=user.id.value,
                tenant_id=user.tenant_id.value,
                email=user.email,
                name=user.name,
                role=user.role.value,
                status=user.status.value,
            )
            self._session.add(model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            message = str(e.orig)
            if "uq_users_tenant_email" in message or "users.email" in message:
                self._probe.duplicate_email(model.tenant_id)
                raise DuplicateUserEmailError(
                    f"Email '{user.email}' is already in use"
                ) from e
            if "users_pkey" in message or "users.id" in message:
                self._probe.duplicate_id(model.tenant_id)
                raise DuplicateUserIdError("User id is already in use") from e
            raise

        self._probe.user_saved(user.id.value, model.tenant_id)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found or not visible
        """
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return self._to_domain(model)

    async def list_all(self) -> list[User]:
        """List the users of the session's tenant.

        Returns:
            User aggregates ordered by email
        """
        stmt = select(UserModel).order_by(UserModel.email)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete(self, user: User) -> bool:
        """Delete a user.

        Projects the user owned keep existing without an owner, and the
        user's project assignments are removed.

        Args:
            user: The User aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.user_deleted(user.id.value)
        return True

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=UserId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            email=model.email,
            name=model.name,
            role=Role(model.role),
            status=UserStatus(model.status),
        )
