"""Signing key sources for token verification.

A key source returns the candidate verification keys for a token, in the
order they should be tried. Rotation is supported by returning the current
key generation first and the previous generation after it.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Protocol

import httpx

if TYPE_CHECKING:
    from shared_kernel.auth.observability import TokenValidatorProbe

# A verification key as accepted by jose: a PEM string or a JWK dict.
VerificationKey = str | dict[str, Any]


class SigningKeyUnavailableError(Exception):
    """Raised when verification keys cannot be obtained."""

    pass


class SigningKeySource(Protocol):
    """Provides verification keys for incoming tokens."""

    async def get_verification_keys(self, kid: str | None) -> list[VerificationKey]:
        """Get candidate keys for a token, most current first.

        Args:
            kid: Key id from the token header, if present

        Returns:
            Keys to try, in order

        Raises:
            SigningKeyUnavailableError: If keys cannot be obtained
        """
        ...


class StaticKeySource:
    """Key source for statically configured public keys.

    Holds the current public key and, during rotation, the previous
    generation's key. The ``kid`` header is ignored: both generations are
    tried in order.
    """

    def __init__(self, current: str, previous: str | None = None):
        """Initialize with PEM-encoded public keys.

        Args:
            current: Current generation public key
            previous: Previous generation public key, kept during rotation
        """
        self._keys: list[VerificationKey] = [current]
        if previous:
            self._keys.append(previous)

    async def get_verification_keys(self, kid: str | None) -> list[VerificationKey]:
        """Return the current key followed by the previous generation."""
        return list(self._keys)


class JWKSKeySource:
    """Key source backed by an OIDC provider's JWKS endpoint.

    Fetches the discovery document and JWKS, caching them for the configured
    TTL. A token signed with an unknown ``kid`` triggers one forced refresh,
    so a provider rotating to a new key is picked up without waiting for the
    cache to expire. Forced refreshes are rate limited to protect the
    provider from tokens carrying random key ids.
    """

    def __init__(
        self,
        issuer_url: str,
        probe: TokenValidatorProbe,
        cache_ttl: timedelta = timedelta(hours=1),
        min_refresh_interval: timedelta = timedelta(seconds=30),
        http_client_factory: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        """Initialize the JWKS key source.

        Args:
            issuer_url: The OIDC issuer URL.
            probe: Observability probe for logging events.
            cache_ttl: How long to cache JWKS keys.
            min_refresh_interval: Minimum time between forced refreshes.
            http_client_factory: Factory for the HTTP client, for tests.
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._probe = probe
        self._cache_ttl = cache_ttl
        self._min_refresh_interval = min_refresh_interval
        self._http_client_factory = http_client_factory

        # JWKS cache
        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    async def get_verification_keys(self, kid: str | None) -> list[VerificationKey]:
        """Return JWKS keys matching the token's key id."""
        jwks = await self._get_jwks()
        keys = self._select(jwks, kid)
        if keys or kid is None:
            return keys

        # Unknown kid: the provider may have rotated keys since the last fetch
        jwks = await self._get_jwks(force_refresh=True)
        return self._select(jwks, kid)

    @staticmethod
    def _select(jwks: dict[str, Any], kid: str | None) -> list[VerificationKey]:
        keys = [k for k in jwks.get("keys", []) if k.get("use", "sig") == "sig"]
        if kid is None:
            return keys
        return [k for k in keys if k.get("kid") == kid]

    async def _get_jwks(self, force_refresh: bool = False) -> dict[str, Any]:
        """Get JWKS, fetching from issuer if cache expired or a refresh is forced.

        Raises:
            SigningKeyUnavailableError: If JWKS cannot be fetched.
        """
        # Check if cache is still valid (without lock for quick check)
        if not force_refresh and self._is_cache_valid():
            self._probe.jwks_cache_hit()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            # Double-check after acquiring lock
            if force_refresh and self._refreshed_recently():
                return self._jwks  # type: ignore[return-value]
            if not force_refresh and self._is_cache_valid():
                self._probe.jwks_cache_hit()
                return self._jwks  # type: ignore[return-value]

            return await self._fetch_jwks()

    def _age(self) -> timedelta | None:
        if self._jwks is None or self._jwks_fetched_at is None:
            return None
        return datetime.now(tz=timezone.utc) - self._jwks_fetched_at

    def _is_cache_valid(self) -> bool:
        """Check if JWKS cache is still valid."""
        age = self._age()
        return age is not None and age < self._cache_ttl

    def _refreshed_recently(self) -> bool:
        age = self._age()
        return age is not None and age < self._min_refresh_interval

    async def _fetch_jwks(self) -> dict[str, Any]:
        """Fetch JWKS from the OIDC provider.

        First fetches the OpenID Connect discovery document, then fetches JWKS.

        Raises:
            SigningKeyUnavailableError: If JWKS cannot be fetched.
        """
        try:
            async with self._http_client_factory() as client:
                openid_config_url = (
                    f"{self._issuer_url}/.well-known/openid-configuration"
                )
                config_response = await client.get(openid_config_url)
                config_response.raise_for_status()
                openid_config = config_response.json()

                jwks_uri = openid_config.get("jwks_uri")
                if not jwks_uri:
                    self._probe.jwks_fetch_failed(
                        error="Missing jwks_uri in OpenID configuration"
                    )
                    raise SigningKeyUnavailableError(
                        "OIDC provider missing jwks_uri in configuration"
                    )

                jwks_response = await client.get(jwks_uri)
                jwks_response.raise_for_status()
                jwks = jwks_response.json()

        except httpx.HTTPError as e:
            self._probe.jwks_fetch_failed(error=str(e))
            raise SigningKeyUnavailableError(
                f"Failed to fetch JWKS from OIDC provider: {e}"
            ) from e
        except ValueError as e:
            self._probe.jwks_fetch_failed(error=f"Invalid JSON: {e}")
            raise SigningKeyUnavailableError(
                f"OIDC provider returned invalid JSON: {e}"
            ) from e

        self._jwks = jwks
        self._jwks_fetched_at = datetime.now(tz=timezone.utc)
        self._probe.jwks_fetched(key_count=len(jwks.get("keys", [])))
        return jwks
