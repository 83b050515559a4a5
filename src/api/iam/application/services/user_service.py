"""User application service for IAM bounded context.

Handles reading, provisioning, updating and removing the users of the
caller's tenant.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import DefaultUserServiceProbe, UserServiceProbe
from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId, UserStatus
from iam.ports.exceptions import DuplicateUserEmailError, DuplicateUserIdError
from iam.ports.repositories import ITenantRepository, IUserRepository
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.authorization import Action, AuthorizationEngine, ResourceType, Role
from shared_kernel.exceptions import ForbiddenError, ResourceNotFoundError


class UserService:
    """Application service for user management within one tenant."""

    def __init__(
        self,
        user_repository: IUserRepository,
        tenant_repository: ITenantRepository,
        session: AsyncSession,
        authz: AuthorizationEngine,
        probe: UserServiceProbe | None = None,
    ):
        """Initialize UserService with dependencies.

        Args:
            user_repository: Repository for user persistence
            tenant_repository: Repository used to authorize role and status changes
            session: Tenant-scoped session for transaction management
            authz: Authorization engine deciding every operation
            probe: Optional domain probe for observability
        """
        self._user_repository = user_repository
        self._tenant_repository = tenant_repository
        self._session = session
        self._authz = authz
        self._probe = probe or DefaultUserServiceProbe()

    async def get_user(self, context: AuthContext, user_id: UserId) -> User:
        """Retrieve one user of the caller's tenant.

        Tenant admins can read every user; everyone else only their own
        record. Any other user, including one in a different tenant, is
        reported as not found.

        Raises:
            ResourceNotFoundError: If the user is absent or not visible
        """
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            await self._authz.require(
                context,
                Action.READ,
                ResourceType.USER,
                resource=user,
                resource_id=user_id.value,
            )
        assert user is not None
        return user

    async def list_users(self, context: AuthContext) -> list[User]:
        """List the users of the caller's tenant that the caller may see."""
        async with self._session.begin():
            await self._authz.require(context, Action.LIST, ResourceType.USER)
            users = await self._user_repository.list_all()

        visible = self._authz.filter_visible(context, users)
        self._probe.users_listed(total=len(users), visible=len(visible))
        return visible

    async def create_user(
        self,
        context: AuthContext,
        user_id: UserId,
        email: str,
        name: str | None = None,
        role: Role = Role.MEMBER,
    ) -> User:
        """Add a user to the caller's tenant.

        The new user always joins the caller's tenant. An id that is already
        taken is reported the same way whether its user is in the caller's
        tenant or in another one.

        Raises:
            ForbiddenError: If the caller's role may not create users
            DuplicateUserEmailError: If the email is already used in the tenant
            DuplicateUserIdError: If the id is already taken
        """
        user = User(
            id=user_id,
            tenant_id=TenantId(value=context.tenant_id),
            email=email,
            name=name,
            role=role,
        )
        try:
            async with self._session.begin():
                await self._authz.require(context, Action.CREATE, ResourceType.USER)
                # save() would update a visible user in place
                if await self._user_repository.get_by_id(user_id) is not None:
                    raise DuplicateUserIdError("User id is already in use")
                await self._user_repository.save(user)
        except DuplicateUserEmailError:
            self._probe.duplicate_user_email(tenant_id=context.tenant_id)
            raise
        except DuplicateUserIdError:
            self._probe.duplicate_user_id(tenant_id=context.tenant_id)
            raise

        self._probe.user_created(user_id=user_id.value, tenant_id=context.tenant_id)
        return user

    async def update_user(
        self,
        context: AuthContext,
        user_id: UserId,
        email: str | None = None,
        name: str | None = None,
        role: Role | None = None,
        status: UserStatus | None = None,
    ) -> User:
        """Change a user's profile, role or status.

        Every user may edit their own email and name; tenant admins may edit
        any user of the tenant. Changing a role or status is tenant
        administration and additionally requires the tenant update permission.

        Raises:
            ResourceNotFoundError: If the user is absent or not visible
            ForbiddenError: If the caller may not make the requested change
            DuplicateUserEmailError: If the new email is used in the tenant
            ValueError: If the new email is blank
        """
        try:
            async with self._session.begin():
                user = await self._user_repository.get_by_id(user_id)
                await self._authz.require(
                    context,
                    Action.UPDATE,
                    ResourceType.USER,
                    resource=user,
                    resource_id=user_id.value,
                )
                assert user is not None
                if role is not None or status is not None:
                    tenant = await self._tenant_repository.get_by_id(
                        TenantId(value=context.tenant_id)
                    )
                    await self._authz.require(
                        context,
                        Action.UPDATE,
                        ResourceType.TENANT,
                        resource=tenant,
                        resource_id=context.tenant_id,
                    )
                user.update(email=email, name=name, role=role, status=status)
                await self._user_repository.save(user)
        except DuplicateUserEmailError:
            self._probe.duplicate_user_email(tenant_id=context.tenant_id)
            raise

        self._probe.user_updated(user_id=user_id.value, tenant_id=context.tenant_id)
        return user

    async def delete_user(self, context: AuthContext, user_id: UserId) -> None:
        """Remove a user from the caller's tenant.

        Tenant admins may delete any user except themselves, so a tenant
        cannot lose its last administrator by accident.

        Raises:
            ResourceNotFoundError: If the user is absent or not visible
            ForbiddenError: If the caller's role may not delete users, or the
                caller tries to delete their own record
        """
        if user_id.value == context.user_id:
            self._probe.self_deletion_rejected(
                user_id=context.user_id, tenant_id=context.tenant_id
            )
            raise ForbiddenError("Users cannot delete their own record")

        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            await self._authz.require(
                context,
                Action.DELETE,
                ResourceType.USER,
                resource=user,
                resource_id=user_id.value,
            )
            assert user is not None
            if not await self._user_repository.delete(user):
                raise ResourceNotFoundError()

        self._probe.user_deleted(user_id=user_id.value, tenant_id=context.tenant_id)
