"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance migrated to head
(``alembic upgrade head``) and two roles:

- the application role from the usual ``SHIELDED_DB_*`` settings, which
  must not own the tables or have BYPASSRLS;
- an administrative role with BYPASSRLS, given by
  ``SHIELDED_DB_ADMIN_USERNAME`` and ``SHIELDED_DB_ADMIN_PASSWORD``.

Tests are skipped when the database cannot be reached.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import audit.infrastructure.models  # noqa: F401
import iam.infrastructure.models  # noqa: F401
import projects.infrastructure.models  # noqa: F401
from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import UserId
from iam.infrastructure.tenant_provisioning_repository import (
    TenantProvisioningRepository,
)
from infrastructure.database import install_row_isolation
from infrastructure.database.engines import create_admin_engine, create_write_engine
from infrastructure.settings import DatabaseSettings
from shared_kernel.auth import AuthContext
from shared_kernel.authorization import Role


def _app_settings() -> DatabaseSettings:
    return DatabaseSettings(pool_min_connections=1, pool_max_connections=2)


async def _sessionmaker(
    create_engine: Callable[[DatabaseSettings], AsyncEngine],
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(_app_settings())
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
    except (DBAPIError, OSError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not available: {e}")
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def row_isolation():
    """Install the row isolation listeners as the application does."""
    return install_row_isolation()


@pytest_asyncio.fixture
async def app_sessionmaker() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Sessions on the application role, subject to row level security."""
    async for factory in _sessionmaker(create_write_engine):
        yield factory


@pytest_asyncio.fixture
async def admin_sessionmaker() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Sessions on the administrative role."""
    async for factory in _sessionmaker(create_admin_engine):
        yield factory


@pytest.fixture
def provision_tenant(admin_sessionmaker):
    """Create a tenant with a unique slug and its admin."""

    async def _provision(prefix: str) -> tuple[Tenant, User]:
        slug = f"{prefix}-{os.urandom(4).hex()}"
        tenant = Tenant.create(name=prefix.title(), slug=slug)
        admin = User(
            id=UserId(value=f"{tenant.slug}-admin"),
            tenant_id=tenant.id,
            email=f"admin@{tenant.slug}.example",
            role=Role.TENANT_ADMIN,
        )
        await TenantProvisioningRepository(sessionmaker=admin_sessionmaker).provision(
            tenant, admin
        )
        return tenant, admin

    return _provision


@pytest.fixture
def admin_context():
    """Factory for the AuthContext of a tenant's provisioned administrator."""

    def _make(tenant: Tenant, admin: User) -> AuthContext:
        return AuthContext(
            tenant_id=tenant.id.value,
            user_id=admin.id.value,
            role=Role.TENANT_ADMIN,
            token_id=None,
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        )

    return _make
