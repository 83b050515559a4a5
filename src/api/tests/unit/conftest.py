"""Unit test fixtures.

Database-backed tests run against a throwaway SQLite file per test, with
the row isolation listeners installed exactly as the application does.
Tokens are signed with an RSA key generated once per test session.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from ulid import ULID

# Register every model on Base.metadata
import audit.infrastructure.models  # noqa: F401
import iam.infrastructure.models  # noqa: F401
import projects.infrastructure.models  # noqa: F401
from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import UserId
from iam.infrastructure.tenant_provisioning_repository import (
    TenantProvisioningRepository,
)
from infrastructure.database import install_row_isolation
from infrastructure.database.models import Base
from shared_kernel.audit import AuditEvent
from shared_kernel.auth import AuthContext
from shared_kernel.authorization import Role

TEST_ISSUER = "https://auth.example.com/realms/shielded"
TEST_AUDIENCE = "shielded-api"


def _generate_key_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


class RecordingAuditRecorder:
    """AuditRecorder keeping events in memory."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def record(self, context: AuthContext, event: AuditEvent) -> None:
        self.events.append(event)

    async def record_many(
        self, context: AuthContext, events: Sequence[AuditEvent]
    ) -> None:
        self.events.extend(events)

    def actions(self) -> list[str]:
        return [event.action for event in self.events]


@pytest.fixture(scope="session", autouse=True)
def row_isolation():
    """Install the row isolation listeners for the whole test session."""
    return install_row_isolation()


@pytest.fixture(scope="session")
def signing_keys() -> tuple[str, str]:
    """RSA key pair (private PEM, public PEM) for signing test tokens."""
    return _generate_key_pair()


@pytest.fixture(scope="session")
def other_signing_keys() -> tuple[str, str]:
    """A second, unrelated RSA key pair."""
    return _generate_key_pair()


@pytest.fixture
def make_token(signing_keys) -> Callable[..., str]:
    """Factory for signed bearer tokens.

    Keyword arguments override or extend the default claims; a claim set
    to None is removed.
    """
    private_pem, _ = signing_keys

    def _make(
        *,
        key: str | None = None,
        algorithm: str = "RS256",
        headers: dict[str, Any] | None = None,
        expires_in: timedelta = timedelta(minutes=15),
        issued_at: datetime | None = None,
        **claims: Any,
    ) -> str:
        now = datetime.now(UTC)
        iat = issued_at or now
        payload: dict[str, Any] = {
            "sub": "user-1",
            "iss": TEST_ISSUER,
            "aud": TEST_AUDIENCE,
            "iat": int(iat.timestamp()),
            "exp": int((now + expires_in).timestamp()),
            "tenant_id": str(ULID()),
            "roles": ["member"],
            "jti": str(ULID()),
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(
            payload, key or private_pem, algorithm=algorithm, headers=headers
        )

    return _make


@pytest.fixture
def make_context() -> Callable[..., AuthContext]:
    """Factory for AuthContexts valid for the next hour."""

    def _make(
        tenant_id: str | None = None,
        user_id: str = "user-1",
        role: Role = Role.MEMBER,
        token_id: str | None = "token-1",
        expires_at: datetime | None = None,
    ) -> AuthContext:
        return AuthContext(
            tenant_id=tenant_id or str(ULID()),
            user_id=user_id,
            role=role,
            token_id=token_id,
            expires_at=expires_at or datetime.now(UTC) + timedelta(hours=1),
        )

    return _make


@pytest.fixture
def audit_recorder() -> RecordingAuditRecorder:
    """In-memory audit recorder."""
    return RecordingAuditRecorder()


@pytest_asyncio.fixture
async def sessionmaker(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Session factory on a fresh SQLite database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shielded.db'}")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    await engine.dispose()


@pytest.fixture
def provision_tenant(sessionmaker):
    """Create a tenant and its admin through the administrative path."""

    async def _provision(
        slug: str, admin_id: str | None = None
    ) -> tuple[Tenant, User]:
        admin_id = admin_id or f"{slug}-admin"
        tenant = Tenant.create(name=slug.title(), slug=slug)
        admin = User(
            id=UserId(value=admin_id),
            tenant_id=tenant.id,
            email=f"{admin_id}@{slug}.example",
            role=Role.TENANT_ADMIN,
        )
        await TenantProvisioningRepository(sessionmaker=sessionmaker).provision(
            tenant, admin
        )
        return tenant, admin

    return _provision
