"""Bearer token validation.

Turns a signed token into an AuthContext. The signature algorithm is fixed
by configuration; the token header may not negotiate it. Keys come from a
SigningKeySource, which supports rotation by offering the current and the
previous key generation.

Every failure, whatever its cause, surfaces as the same
AuthenticationFailedError so that callers cannot distinguish an expired
token from a forged one. The specific reason is recorded by the probe.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from ulid import ULID

from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.auth.observability import (
    DefaultTokenValidatorProbe,
    TokenValidatorProbe,
)
from shared_kernel.auth.signing_keys import SigningKeyUnavailableError
from shared_kernel.authorization.types import Role
from shared_kernel.exceptions import AuthenticationFailedError

if TYPE_CHECKING:
    from shared_kernel.auth.replay_store import ReplayStore
    from shared_kernel.auth.signing_keys import SigningKeySource, VerificationKey

SUPPORTED_ALGORITHMS = frozenset({"RS256", "ES256"})


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenValidator:
    """Validates bearer tokens and derives the request's AuthContext.

    Checks, in order: header algorithm, signature against each candidate
    key, expiry, issued-at plausibility, issuer, audience, required claims,
    and finally the replay/revocation store.
    """

    def __init__(
        self,
        key_source: SigningKeySource,
        replay_store: ReplayStore,
        issuer: str,
        audience: str,
        probe: TokenValidatorProbe | None = None,
        algorithm: str = "RS256",
        tenant_claim: str = "tenant_id",
        roles_claim: str = "roles",
        token_id_claim: str = "jti",
        require_token_id: bool = True,
        leeway: timedelta = timedelta(seconds=30),
        max_lifetime: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the token validator.

        Args:
            key_source: Provides candidate verification keys.
            replay_store: Replay and revocation store to consult.
            issuer: Expected ``iss`` claim (exact match).
            audience: Expected ``aud`` claim.
            probe: Observability probe for logging events.
            algorithm: The only accepted signature algorithm.
            tenant_claim: Claim carrying the tenant id.
            roles_claim: Claim carrying the caller's role.
            token_id_claim: Claim carrying the token id.
            require_token_id: Reject tokens without a token id.
            leeway: Allowed clock skew for time-based claims.
            max_lifetime: Longest accepted distance between iat and exp.
            clock: Source of the current time, injectable for tests.

        Raises:
            ValueError: If the algorithm is not a supported asymmetric one.
        """
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported signature algorithm: {algorithm}")

        self._key_source = key_source
        self._replay_store = replay_store
        self._issuer = issuer
        self._audience = audience
        self._probe = probe or DefaultTokenValidatorProbe()
        self._algorithm = algorithm
        self._tenant_claim = tenant_claim
        self._roles_claim = roles_claim
        self._token_id_claim = token_id_claim
        self._require_token_id = require_token_id
        self._leeway = leeway
        self._max_lifetime = max_lifetime
        self._clock = clock

    def _rejected(self, reason: str) -> AuthenticationFailedError:
        """Record the internal reason and build the generic failure."""
        self._probe.token_validation_failed(reason=reason)
        return AuthenticationFailedError()

    async def validate_token(
        self, token: str, *, single_use: bool = False
    ) -> AuthContext:
        """Validate a token and return its AuthContext.

        Args:
            token: The bearer token string.
            single_use: Atomically consume the token id, so that a second
                presentation of the same token fails.

        Returns:
            AuthContext derived from the verified claims.

        Raises:
            AuthenticationFailedError: For any validation failure.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._rejected("malformed_token") from e

        if not header or header.get("alg") != self._algorithm:
            raise self._rejected("algorithm_not_accepted")

        try:
            keys = await self._key_source.get_verification_keys(header.get("kid"))
        except SigningKeyUnavailableError as e:
            raise self._rejected("signing_keys_unavailable") from e

        claims = self._decode(token, keys)
        context = self._build_context(claims)

        if context.token_id is not None:
            await self._check_replay(context, single_use=single_use)
        elif single_use:
            raise self._rejected("single_use_without_token_id")

        self._probe.token_validated(
            user_id=context.user_id,
            tenant_id=context.tenant_id,
            role=context.role.value,
        )
        return context

    def _decode(self, token: str, keys: list[VerificationKey]) -> dict[str, Any]:
        """Verify the signature against each key and decode the claims."""
        if not keys:
            raise self._rejected("no_matching_signing_key")

        options = {
            "verify_signature": True,
            "verify_aud": True,
            "verify_iss": True,
            "verify_exp": True,
            "verify_iat": True,
            "verify_nbf": True,
            "require_aud": True,
            "require_iat": True,
            "require_exp": True,
            "require_iss": True,
            "require_sub": True,
            "leeway": int(self._leeway.total_seconds()),
        }

        last_error: JWTError | None = None
        for generation, key in enumerate(keys):
            try:
                claims = jwt.decode(
                    token=token,
                    key=key,
                    algorithms=[self._algorithm],
                    audience=self._audience,
                    issuer=self._issuer,
                    options=options,
                )
            except ExpiredSignatureError as e:
                raise self._rejected("token_expired") from e
            except JWTClaimsError as e:
                raise self._rejected(f"invalid_claims: {e}") from e
            except JWTError as e:
                # Signature did not verify with this key generation
                last_error = e
                continue

            if generation > 0:
                self._probe.previous_key_generation_used(
                    user_id=str(claims.get("sub"))
                )
            return claims

        raise self._rejected("signature_verification_failed") from last_error

    def _build_context(self, claims: dict[str, Any]) -> AuthContext:
        """Check required claims and build the AuthContext."""
        now = self._clock()

        issued_at = claims.get("iat")
        expires = claims.get("exp")
        if not isinstance(issued_at, (int, float)) or not isinstance(
            expires, (int, float)
        ):
            raise self._rejected("invalid_time_claims")
        if issued_at > (now + self._leeway).timestamp():
            raise self._rejected("issued_in_future")
        if expires - issued_at > self._max_lifetime.total_seconds():
            raise self._rejected("lifetime_exceeds_maximum")
        expires_at = datetime.fromtimestamp(expires, UTC)
        if expires_at <= now - self._leeway:
            raise self._rejected("token_expired")

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id or len(user_id) > 255:
            raise self._rejected("invalid_subject")

        tenant_id = self._parse_tenant(claims.get(self._tenant_claim))
        role = self._parse_role(claims.get(self._roles_claim))

        token_id = claims.get(self._token_id_claim)
        if token_id is None:
            if self._require_token_id:
                raise self._rejected("missing_token_id")
        elif not isinstance(token_id, str) or not token_id:
            raise self._rejected("invalid_token_id")

        return AuthContext(
            tenant_id=tenant_id,
            user_id=user_id,
            role=role,
            token_id=token_id,
            expires_at=expires_at,
        )

    def _parse_tenant(self, value: Any) -> str:
        if not isinstance(value, str):
            raise self._rejected("missing_tenant_claim")
        try:
            return str(ULID.from_str(value))
        except ValueError as e:
            raise self._rejected("invalid_tenant_claim") from e

    def _parse_role(self, value: Any) -> Role:
        if isinstance(value, list):
            if len(value) != 1:
                raise self._rejected("ambiguous_roles_claim")
            value = value[0]
        if not isinstance(value, str):
            raise self._rejected("missing_roles_claim")
        try:
            return Role(value)
        except ValueError as e:
            raise self._rejected("unrecognized_role") from e

    async def _check_replay(self, context: AuthContext, *, single_use: bool) -> None:
        """Consult the replay store, failing closed if it is unreachable."""
        token_id = context.token_id
        assert token_id is not None
        try:
            if await self._replay_store.is_revoked_or_consumed(token_id):
                raise self._rejected("token_revoked_or_replayed")
            if single_use and not await self._replay_store.consume_once(
                token_id, context.expires_at
            ):
                raise self._rejected("token_already_consumed")
            if single_use:
                self._probe.token_consumed(token_id=token_id)
        except AuthenticationFailedError:
            raise
        except Exception as e:
            self._probe.replay_store_unavailable(error=str(e))
            raise self._rejected("replay_store_unavailable") from e
