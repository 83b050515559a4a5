"""Credential extraction and AuthContext binding for FastAPI.

``get_auth_context`` is the entry point from an HTTP request to an
AuthContext. In order it:

1. throttles by client IP, before any credential work is done;
2. validates the bearer token (signature, claims, replay store);
3. throttles by user and by tenant;
4. binds the AuthContext to the request for the rest of its lifetime.

``get_single_use_auth_context`` does the same for credentials that may be
presented only once, such as refresh tokens.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from iam.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.infrastructure.replay_store_purger import ReplayStorePurger
from iam.infrastructure.token_record_store import SqlTokenRecordStore
from infrastructure.database.dependencies import get_sessionmaker
from infrastructure.settings import get_auth_settings, get_rate_limit_settings
from shared_kernel.auth import (
    AuthContext,
    DefaultTokenValidatorProbe,
    InMemoryReplayStore,
    JWKSKeySource,
    ReplayStore,
    SigningKeySource,
    StaticKeySource,
    TokenValidator,
)
from shared_kernel.exceptions import AuthenticationFailedError, RateLimitedError
from shared_kernel.middleware.context_propagation import ContextPropagator
from shared_kernel.middleware.rate_limiting import (
    FixedWindowRateLimiter,
    RateLimiter,
    enforce_rate_limit,
)

# Credentials are optional at the scheme level so that a missing header
# produces the same 401 as an invalid token.
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_signing_key_source() -> SigningKeySource:
    """Get the cached signing key source.

    Static keys when configured, otherwise the issuer's JWKS endpoint.
    """
    settings = get_auth_settings()
    if settings.public_key is not None:
        return StaticKeySource(
            current=settings.public_key,
            previous=settings.previous_public_key,
        )
    return JWKSKeySource(
        issuer_url=settings.issuer,
        probe=DefaultTokenValidatorProbe(),
        cache_ttl=timedelta(seconds=settings.jwks_cache_ttl_seconds),
    )


@lru_cache
def get_replay_store() -> ReplayStore:
    """Get the cached replay and revocation store.

    The in-memory store suits a single API process; the database store
    shares token state between processes.
    """
    settings = get_auth_settings()
    ttl = timedelta(seconds=settings.revocation_ttl_seconds)
    # Token state must outlive exp for as long as the validator accepts it
    grace = timedelta(seconds=settings.clock_skew_seconds)
    if settings.replay_store_backend == "database":
        return SqlTokenRecordStore(
            sessionmaker=get_sessionmaker(),
            default_revocation_ttl=ttl,
            retention_grace=grace,
        )
    return InMemoryReplayStore(default_revocation_ttl=ttl, retention_grace=grace)


@lru_cache
def get_replay_store_purger() -> ReplayStorePurger:
    """Get the cached background purger of the replay store."""
    return ReplayStorePurger(
        store=get_replay_store(),
        interval_seconds=get_auth_settings().replay_purge_interval_seconds,
    )


@lru_cache
def get_token_validator() -> TokenValidator:
    """Get cached token validator.

    Uses lru_cache to ensure a single TokenValidator instance is reused
    across requests, enabling reuse of the key source's JWKS cache.
    """
    settings = get_auth_settings()
    return TokenValidator(
        key_source=get_signing_key_source(),
        replay_store=get_replay_store(),
        issuer=settings.issuer,
        audience=settings.audience,
        probe=DefaultTokenValidatorProbe(),
        algorithm=settings.algorithm,
        tenant_claim=settings.tenant_claim,
        roles_claim=settings.roles_claim,
        token_id_claim=settings.token_id_claim,
        require_token_id=settings.require_token_id,
        leeway=timedelta(seconds=settings.clock_skew_seconds),
        max_lifetime=timedelta(seconds=settings.max_token_lifetime_seconds),
    )


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Get the cached rate limiter.

    With rate limiting disabled the limiter has no limits and never throttles.
    """
    settings = get_rate_limit_settings()
    limits = (
        {
            "ip": settings.per_ip,
            "user": settings.per_user,
            "tenant": settings.per_tenant,
        }
        if settings.enabled
        else {}
    )
    return FixedWindowRateLimiter(limits=limits, window_seconds=settings.window_seconds)


@lru_cache
def get_context_propagator() -> ContextPropagator:
    """Get the cached context propagator."""
    return ContextPropagator()


def get_authentication_probe() -> AuthenticationProbe:
    """Get AuthenticationProbe instance.

    Returns:
        DefaultAuthenticationProbe instance for observability
    """
    return DefaultAuthenticationProbe()


async def _throttle(
    limiter: RateLimiter, probe: AuthenticationProbe, identity: str
) -> None:
    try:
        await enforce_rate_limit(limiter, identity)
    except RateLimitedError as e:
        probe.request_throttled(
            scope=identity.split(":", 1)[0],
            retry_after_seconds=e.retry_after_seconds,
        )
        raise


@asynccontextmanager
async def _authenticated(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    validator: TokenValidator,
    limiter: RateLimiter,
    propagator: ContextPropagator,
    probe: AuthenticationProbe,
    *,
    single_use: bool,
) -> AsyncIterator[AuthContext]:
    client_ip = request.client.host if request.client else "unknown"
    await _throttle(limiter, probe, f"ip:{client_ip}")

    if credentials is None:
        probe.authentication_failed(reason="missing_credentials")
        raise AuthenticationFailedError()

    try:
        context = await validator.validate_token(
            credentials.credentials, single_use=single_use
        )
    except AuthenticationFailedError:
        probe.authentication_failed(reason="invalid_token")
        raise

    await _throttle(limiter, probe, f"user:{context.tenant_id}:{context.user_id}")
    await _throttle(limiter, probe, f"tenant:{context.tenant_id}")

    with propagator.bind(context) as bound:
        probe.request_authenticated(
            user_id=bound.user_id,
            tenant_id=bound.tenant_id,
            role=bound.role.value,
        )
        yield bound


async def get_auth_context(
    request: Request,
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    propagator: Annotated[ContextPropagator, Depends(get_context_propagator)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> AsyncIterator[AuthContext]:
    """Authenticate the request and bind its AuthContext.

    The binding is released when the request finishes, on every exit path.

    Yields:
        The request's AuthContext

    Raises:
        RateLimitedError: If the client IP, user or tenant is throttled
        AuthenticationFailedError: If the credential is missing or invalid
    """
    async with _authenticated(
        request, credentials, validator, limiter, propagator, probe, single_use=False
    ) as context:
        yield context


async def get_single_use_auth_context(
    request: Request,
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    propagator: Annotated[ContextPropagator, Depends(get_context_propagator)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> AsyncIterator[AuthContext]:
    """Authenticate with a single-use credential such as a refresh token.

    Like ``get_auth_context``, but the token id is redeemed atomically while
    validating, so the same credential fails authentication on every later
    presentation.

    Yields:
        The request's AuthContext

    Raises:
        RateLimitedError: If the client IP, user or tenant is throttled
        AuthenticationFailedError: If the credential is missing, invalid,
            carries no token id or was already redeemed
    """
    async with _authenticated(
        request, credentials, validator, limiter, propagator, probe, single_use=True
    ) as context:
        yield context
