"""Protocol for user application service observability.

Defines the interface for domain probes that capture application-level
domain events for user service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserServiceProbe(Protocol):
    """Domain probe for user application service operations."""

    def user_created(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was added to a tenant."""
        ...

    def users_listed(self, total: int, visible: int) -> None:
        """Record a user listing and how much of it the caller could see."""
        ...

    def duplicate_user_email(self, tenant_id: str) -> None:
        """Record that a user could not be saved because the email is taken."""
        ...

    def duplicate_user_id(self, tenant_id: str) -> None:
        """Record that a user could not be created because the id is taken."""
        ...

    def user_updated(self, user_id: str, tenant_id: str) -> None:
        """Record that a user record was changed."""
        ...

    def user_deleted(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was removed from a tenant."""
        ...

    def self_deletion_rejected(self, user_id: str, tenant_id: str) -> None:
        """Record that a user tried to delete their own record."""
        ...

    def with_context(self, context: ObservationContext) -> UserServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserServiceProbe:
    """Default implementation of UserServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultUserServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserServiceProbe(logger=self._logger, context=context)

    def user_created(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was added to a tenant."""
        self._logger.info(
            "user_created",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def users_listed(self, total: int, visible: int) -> None:
        """Record a user listing and how much of it the caller could see."""
        self._logger.debug(
            "users_listed",
            total=total,
            visible=visible,
            **self._get_context_kwargs(),
        )

    def duplicate_user_email(self, tenant_id: str) -> None:
        """Record that a user could not be saved because the email is taken."""
        self._logger.warning(
            "duplicate_user_email",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_user_id(self, tenant_id: str) -> None:
        """Record that a user could not be created because the id is taken."""
        self._logger.warning(
            "duplicate_user_id",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_updated(self, user_id: str, tenant_id: str) -> None:
        """Record that a user record was changed."""
        self._logger.info(
            "user_updated",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was removed from a tenant."""
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def self_deletion_rejected(self, user_id: str, tenant_id: str) -> None:
        """Record that a user tried to delete their own record."""
        self._logger.warning(
            "user_self_deletion_rejected",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
