"""Domain probe for token validation operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to credential validation. It is the only
place the specific reason for a rejected token is recorded; callers only
ever see a generic authentication failure.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TokenValidatorProbe(Protocol):
    """Domain probe for token validation operations."""

    def token_validated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record that a token was successfully validated."""
        ...

    def token_validation_failed(self, reason: str) -> None:
        """Record that token validation failed."""
        ...

    def replay_store_unavailable(self, error: str) -> None:
        """Record that the replay store could not be consulted."""
        ...

    def previous_key_generation_used(self, user_id: str) -> None:
        """Record that a token only verified with the previous signing key."""
        ...

    def token_consumed(self, token_id: str) -> None:
        """Record that a single-use token was redeemed."""
        ...

    def jwks_fetched(self, key_count: int) -> None:
        """Record that JWKS was fetched from the issuer."""
        ...

    def jwks_cache_hit(self) -> None:
        """Record that JWKS was served from cache."""
        ...

    def jwks_fetch_failed(self, error: str) -> None:
        """Record that JWKS fetch failed."""
        ...

    def with_context(self, context: ObservationContext) -> TokenValidatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTokenValidatorProbe:
    """Default implementation of TokenValidatorProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTokenValidatorProbe:
        """Create a new probe with observation context bound."""
        return DefaultTokenValidatorProbe(logger=self._logger, context=context)

    def token_validated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record that a token was successfully validated."""
        self._logger.info(
            "token_validated",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def token_validation_failed(self, reason: str) -> None:
        """Record that token validation failed."""
        self._logger.warning(
            "token_validation_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def replay_store_unavailable(self, error: str) -> None:
        """Record that the replay store could not be consulted."""
        self._logger.error(
            "token_replay_store_unavailable",
            error=error,
            **self._get_context_kwargs(),
        )

    def jwks_fetched(self, key_count: int) -> None:
        """Record that JWKS was fetched from the issuer."""
        self._logger.info(
            "token_jwks_fetched",
            key_count=key_count,
            **self._get_context_kwargs(),
        )

    def jwks_cache_hit(self) -> None:
        """Record that JWKS was served from cache."""
        self._logger.debug(
            "token_jwks_cache_hit",
            **self._get_context_kwargs(),
        )

    def jwks_fetch_failed(self, error: str) -> None:
        """Record that JWKS fetch failed."""
        self._logger.error(
            "token_jwks_fetch_failed",
            error=error,
            **self._get_context_kwargs(),
        )

    def previous_key_generation_used(self, user_id: str) -> None:
        """Record that a token only verified with the previous signing key."""
        self._logger.info(
            "token_previous_key_generation_used",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def token_consumed(self, token_id: str) -> None:
        """Record that a single-use token was redeemed."""
        self._logger.info(
            "token_consumed",
            token_id=token_id,
            **self._get_context_kwargs(),
        )
