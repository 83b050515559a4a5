"""Unit tests for TokenValidator.

Tokens are signed with a freshly generated RSA key; the replay store is the
in-memory implementation unless a test needs it to fail.
"""

from __future__ import annotations

import base64
import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from ulid import ULID

from shared_kernel.auth import (
    InMemoryReplayStore,
    ReplayStoreUnavailableError,
    StaticKeySource,
    TokenValidator,
    TokenValidatorProbe,
)
from shared_kernel.auth.signing_keys import SigningKeyUnavailableError
from shared_kernel.authorization import Role
from shared_kernel.exceptions import AuthenticationFailedError
from tests.unit.conftest import TEST_AUDIENCE, TEST_ISSUER


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=TokenValidatorProbe)


@pytest.fixture
def replay_store() -> InMemoryReplayStore:
    return InMemoryReplayStore()


@pytest.fixture
def validator(signing_keys, replay_store, mock_probe) -> TokenValidator:
    _, public_pem = signing_keys
    return TokenValidator(
        key_source=StaticKeySource(current=public_pem),
        replay_store=replay_store,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        probe=mock_probe,
    )


def _failure_reason(mock_probe: MagicMock) -> str:
    mock_probe.token_validation_failed.assert_called_once()
    return mock_probe.token_validation_failed.call_args.kwargs["reason"]


class TestTokenValidatorConstruction:
    """Tests for validator configuration."""

    def test_rejects_symmetric_algorithm(self, signing_keys, replay_store):
        """Only asymmetric algorithms can be configured."""
        _, public_pem = signing_keys
        with pytest.raises(ValueError):
            TokenValidator(
                key_source=StaticKeySource(current=public_pem),
                replay_store=replay_store,
                issuer=TEST_ISSUER,
                audience=TEST_AUDIENCE,
                algorithm="HS256",
            )


class TestValidToken:
    """Tests for tokens that should be accepted."""

    @pytest.mark.asyncio
    async def test_builds_context_from_claims(self, validator, make_token, mock_probe):
        """A valid token yields tenant, user, role, token id and expiry."""
        tenant_id = str(ULID())
        token = make_token(
            sub="alice", tenant_id=tenant_id, roles=["project_admin"], jti="t-1"
        )

        context = await validator.validate_token(token)

        assert context.tenant_id == tenant_id
        assert context.user_id == "alice"
        assert context.role is Role.PROJECT_ADMIN
        assert context.token_id == "t-1"
        assert context.expires_at > datetime.now(UTC)
        mock_probe.token_validated.assert_called_once_with(
            user_id="alice", tenant_id=tenant_id, role="project_admin"
        )

    @pytest.mark.asyncio
    async def test_accepts_role_as_plain_string(self, validator, make_token):
        """The roles claim may be a single string."""
        context = await validator.validate_token(make_token(roles="viewer"))

        assert context.role is Role.VIEWER

    @pytest.mark.asyncio
    async def test_accepts_previous_key_generation(
        self, signing_keys, other_signing_keys, make_token, replay_store, mock_probe
    ):
        """Tokens signed with the previous key verify during rotation."""
        _, old_public = signing_keys
        _, new_public = other_signing_keys
        validator = TokenValidator(
            key_source=StaticKeySource(current=new_public, previous=old_public),
            replay_store=replay_store,
            issuer=TEST_ISSUER,
            audience=TEST_AUDIENCE,
            probe=mock_probe,
        )

        context = await validator.validate_token(make_token(sub="bob"))

        assert context.user_id == "bob"
        mock_probe.previous_key_generation_used.assert_called_once_with(user_id="bob")

    @pytest.mark.asyncio
    async def test_token_id_optional_when_not_required(
        self, signing_keys, make_token, replay_store
    ):
        """require_token_id=False accepts tokens without a jti."""
        _, public_pem = signing_keys
        validator = TokenValidator(
            key_source=StaticKeySource(current=public_pem),
            replay_store=replay_store,
            issuer=TEST_ISSUER,
            audience=TEST_AUDIENCE,
            require_token_id=False,
        )

        context = await validator.validate_token(make_token(jti=None))

        assert context.token_id is None


class TestRejectedToken:
    """Every rejection surfaces as the same AuthenticationFailedError."""

    @pytest.mark.asyncio
    async def test_malformed_token(self, validator, mock_probe):
        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token("not-a-jwt")
        assert _failure_reason(mock_probe) == "malformed_token"

    @pytest.mark.asyncio
    async def test_expired_token(self, validator, make_token, mock_probe):
        token = make_token(expires_in=timedelta(minutes=-5))

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "token_expired"

    @pytest.mark.asyncio
    async def test_wrong_issuer(self, validator, make_token, mock_probe):
        token = make_token(iss="https://evil.example.com/realms/shielded")

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe).startswith("invalid_claims")

    @pytest.mark.asyncio
    async def test_wrong_audience(self, validator, make_token, mock_probe):
        token = make_token(aud="another-api")

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe).startswith("invalid_claims")

    @pytest.mark.asyncio
    async def test_unsigned_token(self, validator, mock_probe):
        """alg=none is refused before any key is consulted."""
        now = int(datetime.now(UTC).timestamp())
        token = (
            _b64({"alg": "none", "typ": "JWT"})
            + "."
            + _b64(
                {
                    "sub": "mallory",
                    "iss": TEST_ISSUER,
                    "aud": TEST_AUDIENCE,
                    "iat": now,
                    "exp": now + 300,
                    "tenant_id": str(ULID()),
                    "roles": ["tenant_admin"],
                    "jti": "forged",
                }
            )
            + "."
        )

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "algorithm_not_accepted"

    @pytest.mark.asyncio
    async def test_symmetric_algorithm_in_header(
        self, validator, make_token, mock_probe
    ):
        """An HS256 token is refused even if its claims are valid."""
        token = make_token(key="shared-secret", algorithm="HS256")

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "algorithm_not_accepted"

    @pytest.mark.asyncio
    async def test_signed_by_unknown_key(
        self, validator, make_token, other_signing_keys, mock_probe
    ):
        other_private, _ = other_signing_keys
        token = make_token(key=other_private)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "signature_verification_failed"

    @pytest.mark.asyncio
    async def test_lifetime_exceeds_maximum(self, validator, make_token, mock_probe):
        token = make_token(expires_in=timedelta(hours=5))

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "lifetime_exceeds_maximum"

    @pytest.mark.asyncio
    async def test_issued_in_future(self, validator, make_token, mock_probe):
        token = make_token(
            issued_at=datetime.now(UTC) + timedelta(minutes=10),
            expires_in=timedelta(minutes=20),
        )

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)

    @pytest.mark.asyncio
    async def test_unknown_role(self, validator, make_token, mock_probe):
        """A role outside the closed set never becomes a Role."""
        token = make_token(roles=["superuser"])

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "unrecognized_role"

    @pytest.mark.asyncio
    async def test_multiple_roles(self, validator, make_token, mock_probe):
        token = make_token(roles=["member", "tenant_admin"])

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "ambiguous_roles_claim"

    @pytest.mark.asyncio
    async def test_missing_roles(self, validator, make_token, mock_probe):
        token = make_token(roles=None)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "missing_roles_claim"

    @pytest.mark.asyncio
    async def test_missing_tenant(self, validator, make_token, mock_probe):
        token = make_token(tenant_id=None)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "missing_tenant_claim"

    @pytest.mark.asyncio
    async def test_malformed_tenant(self, validator, make_token, mock_probe):
        token = make_token(tenant_id="acme-corp")

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "invalid_tenant_claim"

    @pytest.mark.asyncio
    async def test_missing_token_id(self, validator, make_token, mock_probe):
        token = make_token(jti=None)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "missing_token_id"

    @pytest.mark.asyncio
    async def test_key_source_unavailable(self, make_token, replay_store, mock_probe):
        key_source = AsyncMock()
        key_source.get_verification_keys.side_effect = SigningKeyUnavailableError(
            "issuer down"
        )
        validator = TokenValidator(
            key_source=key_source,
            replay_store=replay_store,
            issuer=TEST_ISSUER,
            audience=TEST_AUDIENCE,
            probe=mock_probe,
        )

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(make_token())
        assert _failure_reason(mock_probe) == "signing_keys_unavailable"

    @pytest.mark.asyncio
    async def test_failures_are_indistinguishable(
        self, validator, make_token, other_signing_keys
    ):
        """Expired and forged tokens produce identical errors."""
        other_private, _ = other_signing_keys
        errors = []
        for token in (
            make_token(expires_in=timedelta(minutes=-5)),
            make_token(key=other_private),
        ):
            with pytest.raises(AuthenticationFailedError) as exc_info:
                await validator.validate_token(token)
            errors.append(exc_info.value)

        assert str(errors[0]) == str(errors[1])
        assert errors[0].error_code == errors[1].error_code


class TestReplayProtection:
    """Tests for revocation and single-use tokens."""

    @pytest.mark.asyncio
    async def test_revoked_token_rejected(
        self, validator, make_token, replay_store, mock_probe
    ):
        token = make_token(jti="revoked-1")
        await validator.validate_token(token)

        await replay_store.revoke("revoked-1")

        mock_probe.reset_mock()
        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "token_revoked_or_replayed"

    @pytest.mark.asyncio
    async def test_single_use_token_second_presentation_rejected(
        self, validator, make_token, mock_probe
    ):
        token = make_token(jti="refresh-1")

        await validator.validate_token(token, single_use=True)
        mock_probe.token_consumed.assert_called_once_with(token_id="refresh-1")

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token, single_use=True)

    @pytest.mark.asyncio
    async def test_consumed_token_rejected_for_plain_use(
        self, validator, make_token
    ):
        token = make_token(jti="refresh-2")
        await validator.validate_token(token, single_use=True)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)

    @pytest.mark.asyncio
    async def test_unreachable_replay_store_fails_closed(
        self, signing_keys, make_token, mock_probe
    ):
        _, public_pem = signing_keys
        replay_store = AsyncMock()
        replay_store.is_revoked_or_consumed.side_effect = ReplayStoreUnavailableError(
            "connection refused"
        )
        validator = TokenValidator(
            key_source=StaticKeySource(current=public_pem),
            replay_store=replay_store,
            issuer=TEST_ISSUER,
            audience=TEST_AUDIENCE,
            probe=mock_probe,
        )

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(make_token())

        mock_probe.replay_store_unavailable.assert_called_once()
        assert _failure_reason(mock_probe) == "replay_store_unavailable"


class TestReplayProtectionWithinLeeway:
    """Tokens past exp but inside the leeway keep their replay state."""

    @staticmethod
    def _lately_expired(make_token, jti: str) -> str:
        return make_token(
            jti=jti,
            issued_at=datetime.now(UTC) - timedelta(minutes=5),
            expires_in=timedelta(seconds=-10),
        )

    @pytest.mark.asyncio
    async def test_single_use_token_cannot_be_redeemed_twice(
        self, validator, make_token, mock_probe
    ):
        token = self._lately_expired(make_token, "refresh-late")

        await validator.validate_token(token, single_use=True)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token, single_use=True)
        assert _failure_reason(mock_probe) == "token_revoked_or_replayed"

    @pytest.mark.asyncio
    async def test_revoked_token_stays_rejected(
        self, validator, make_token, replay_store, mock_probe
    ):
        token = self._lately_expired(make_token, "revoked-late")
        context = await validator.validate_token(token)

        await replay_store.revoke("revoked-late", context.expires_at)

        with pytest.raises(AuthenticationFailedError):
            await validator.validate_token(token)
        assert _failure_reason(mock_probe) == "token_revoked_or_replayed"
