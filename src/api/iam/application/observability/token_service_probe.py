"""Protocol for token lifecycle observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TokenServiceProbe(Protocol):
    """Domain probe for logout and refresh token rotation."""

    def logged_out(self, user_id: str, tenant_id: str) -> None:
        """Record that a user's presenting token was revoked."""
        ...

    def logout_without_token_id(self, user_id: str) -> None:
        """Record a logout with a token that cannot be tracked."""
        ...

    def refresh_token_rotated(self, old_token_id: str, new_token_id: str) -> None:
        """Record a successful refresh token rotation."""
        ...

    def with_context(self, context: ObservationContext) -> TokenServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTokenServiceProbe:
    """Default implementation of TokenServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTokenServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTokenServiceProbe(logger=self._logger, context=context)

    def logged_out(self, user_id: str, tenant_id: str) -> None:
        """Record that a user's presenting token was revoked."""
        self._logger.info(
            "logged_out",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def logout_without_token_id(self, user_id: str) -> None:
        """Record a logout with a token that cannot be tracked."""
        self._logger.warning(
            "logout_without_token_id",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def refresh_token_rotated(self, old_token_id: str, new_token_id: str) -> None:
        """Record a successful refresh token rotation."""
        self._logger.info(
            "refresh_token_rotated",
            old_token_id=old_token_id,
            new_token_id=new_token_id,
            **self._get_context_kwargs(),
        )
