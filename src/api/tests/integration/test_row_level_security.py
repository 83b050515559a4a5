"""Integration tests for PostgreSQL row level security.

Plain SQL text statements carry no ORM loader criteria, so everything
these tests observe is enforced by the database policies and triggers
alone.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from ulid import ULID

from infrastructure.database import tenant_scoped_session

pytestmark = pytest.mark.integration

_INSERT_PROJECT = text(
    "INSERT INTO projects "
    "(id, tenant_id, owner_id, name, status, created_at, updated_at) "
    "VALUES (:id, :tenant_id, :owner_id, :name, 'active', now(), now())"
)


@pytest_asyncio.fixture
async def two_tenants(provision_tenant):
    acme = await provision_tenant("acme")
    globex = await provision_tenant("globex")
    return acme, globex


@pytest.mark.asyncio
async def test_statement_without_tenant_fails(app_sessionmaker):
    async with app_sessionmaker() as session:
        with pytest.raises(DBAPIError, match="Tenant context not set"):
            await session.execute(text("SELECT id FROM projects"))


@pytest.mark.asyncio
async def test_rows_of_other_tenants_are_invisible(
    app_sessionmaker, two_tenants, admin_context
):
    (acme, acme_admin), (globex, globex_admin) = two_tenants
    project_id = str(ULID())

    async with tenant_scoped_session(
        app_sessionmaker, admin_context(acme, acme_admin)
    ) as session:
        async with session.begin():
            await session.execute(
                _INSERT_PROJECT,
                {
                    "id": project_id,
                    "tenant_id": acme.id.value,
                    "owner_id": acme_admin.id.value,
                    "name": "Rocket skates",
                },
            )

    async with tenant_scoped_session(
        app_sessionmaker, admin_context(globex, globex_admin)
    ) as session:
        async with session.begin():
            result = await session.execute(
                text("SELECT id FROM projects WHERE id = :id"), {"id": project_id}
            )
            assert result.all() == []

            deleted = await session.execute(
                text("DELETE FROM projects WHERE id = :id"), {"id": project_id}
            )
            assert deleted.rowcount == 0


@pytest.mark.asyncio
async def test_insert_trigger_overrides_client_tenant(
    app_sessionmaker, two_tenants, admin_context
):
    (acme, acme_admin), (globex, _) = two_tenants
    project_id = str(ULID())

    async with tenant_scoped_session(
        app_sessionmaker, admin_context(acme, acme_admin)
    ) as session:
        async with session.begin():
            await session.execute(
                _INSERT_PROJECT,
                {
                    "id": project_id,
                    "tenant_id": globex.id.value,
                    "owner_id": acme_admin.id.value,
                    "name": "Misfiled",
                },
            )
            stored = await session.scalar(
                text("SELECT tenant_id FROM projects WHERE id = :id"),
                {"id": project_id},
            )

    assert stored == acme.id.value


@pytest.mark.asyncio
async def test_audit_events_cannot_be_rewritten(
    app_sessionmaker, two_tenants, admin_context
):
    (acme, acme_admin), _ = two_tenants

    async with tenant_scoped_session(
        app_sessionmaker, admin_context(acme, acme_admin)
    ) as session:
        async with session.begin():
            await session.execute(
                text(
                    "INSERT INTO audit_events "
                    "(id, tenant_id, user_id, action, resource_type, decision, "
                    "occurred_at) VALUES (:id, :tenant_id, :user_id, "
                    "'project.read', 'project', 'allowed', now())"
                ),
                {
                    "id": str(ULID()),
                    "tenant_id": acme.id.value,
                    "user_id": acme_admin.id.value,
                },
            )
            updated = await session.execute(
                text("UPDATE audit_events SET decision = 'forbidden'")
            )
            deleted = await session.execute(text("DELETE FROM audit_events"))

    assert updated.rowcount == 0
    assert deleted.rowcount == 0
