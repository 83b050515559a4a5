"""Domain probe for IAM repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to tenant, user and token record
persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_saved(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was successfully saved."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found (or is in another tenant)."""
        ...

    def duplicate_email(self, tenant_id: str) -> None:
        """Record that a duplicate email was detected within a tenant."""
        ...

    def duplicate_id(self, tenant_id: str) -> None:
        """Record that a new user's id was already taken."""
        ...

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class TokenRecordStoreProbe(Protocol):
    """Domain probe for the database-backed replay store."""

    def token_revoked(self, token_id: str) -> None:
        """Record that a token id was revoked."""
        ...

    def token_consumed(self, token_id: str, succeeded: bool) -> None:
        """Record the outcome of a single-use redemption."""
        ...

    def expired_records_purged(self, count: int) -> None:
        """Record that expired token records were removed."""
        ...

    def store_unavailable(self, operation: str, error: Exception) -> None:
        """Record that the token records table could not be reached."""
        ...

    def with_context(self, context: ObservationContext) -> TokenRecordStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class _BaseProbe:
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


class DefaultUserRepositoryProbe(_BaseProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultUserRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserRepositoryProbe(logger=self._logger, context=context)

    def user_saved(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was successfully saved."""
        self._logger.info(
            "user_saved",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found (or is in another tenant)."""
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def duplicate_email(self, tenant_id: str) -> None:
        """Record that a duplicate email was detected within a tenant."""
        self._logger.warning(
            "duplicate_user_email",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_id(self, tenant_id: str) -> None:
        """Record that a new user's id was already taken."""
        self._logger.warning(
            "duplicate_user_id",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            **self._get_context_kwargs(),
        )


class DefaultTenantRepositoryProbe(_BaseProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        self._logger.info(
            "tenant_saved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        self._logger.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )


class DefaultTokenRecordStoreProbe(_BaseProbe):
    """Default implementation of TokenRecordStoreProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTokenRecordStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultTokenRecordStoreProbe(logger=self._logger, context=context)

    def token_revoked(self, token_id: str) -> None:
        """Record that a token id was revoked."""
        self._logger.info(
            "token_record_revoked",
            token_id=token_id,
            **self._get_context_kwargs(),
        )

    def token_consumed(self, token_id: str, succeeded: bool) -> None:
        """Record the outcome of a single-use redemption."""
        self._logger.info(
            "token_record_consumed" if succeeded else "token_record_replay_detected",
            token_id=token_id,
            **self._get_context_kwargs(),
        )

    def expired_records_purged(self, count: int) -> None:
        """Record that expired token records were removed."""
        self._logger.info(
            "token_records_purged",
            count=count,
            **self._get_context_kwargs(),
        )

    def store_unavailable(self, operation: str, error: Exception) -> None:
        """Record that the token records table could not be reached."""
        self._logger.error(
            "token_record_store_unavailable",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
