"""Unit tests for TenantRepository and TenantProvisioningRepository on SQLite."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import UserId
from iam.infrastructure.tenant_provisioning_repository import (
    TenantProvisioningRepository,
)
from iam.infrastructure.tenant_repository import TenantRepository
from iam.ports.exceptions import DuplicateTenantSlugError
from infrastructure.database import tenant_scoped_session
from shared_kernel.authorization import Role
from shared_kernel.exceptions import ResourceNotFoundError


@pytest_asyncio.fixture
async def two_tenants(provision_tenant):
    tenant_a, admin_a = await provision_tenant("acme")
    tenant_b, _ = await provision_tenant("globex")
    return tenant_a, admin_a, tenant_b


class TestTenantRepository:
    """Tests for TenantRepository on a tenant-scoped session."""

    @pytest.mark.asyncio
    async def test_reads_own_tenant(self, sessionmaker, two_tenants, make_context):
        tenant_a, admin_a, _ = two_tenants
        context = make_context(tenant_id=tenant_a.id.value, user_id=admin_a.id.value)

        async with tenant_scoped_session(sessionmaker, context) as session:
            loaded = await TenantRepository(session).get_by_id(tenant_a.id)

        assert loaded == tenant_a

    @pytest.mark.asyncio
    async def test_other_tenant_is_invisible(
        self, sessionmaker, two_tenants, make_context
    ):
        tenant_a, admin_a, tenant_b = two_tenants
        context = make_context(tenant_id=tenant_a.id.value, user_id=admin_a.id.value)

        async with tenant_scoped_session(sessionmaker, context) as session:
            assert await TenantRepository(session).get_by_id(tenant_b.id) is None

    @pytest.mark.asyncio
    async def test_rename_is_persisted_and_audited(
        self, sessionmaker, two_tenants, make_context, audit_recorder
    ):
        tenant_a, admin_a, _ = two_tenants
        context = make_context(
            tenant_id=tenant_a.id.value,
            user_id=admin_a.id.value,
            role=Role.TENANT_ADMIN,
        )
        tenant_a.rename("Acme Corp")

        async with tenant_scoped_session(
            sessionmaker, context, recorder=audit_recorder
        ) as session:
            async with session.begin():
                await TenantRepository(session).save(tenant_a)

        async with tenant_scoped_session(sessionmaker, context) as session:
            loaded = await TenantRepository(session).get_by_id(tenant_a.id)

        assert loaded.name == "Acme Corp"
        assert audit_recorder.actions() == ["tenant.update"]

    @pytest.mark.asyncio
    async def test_saving_other_tenant_fails(
        self, sessionmaker, two_tenants, make_context
    ):
        tenant_a, admin_a, tenant_b = two_tenants
        context = make_context(tenant_id=tenant_a.id.value, user_id=admin_a.id.value)
        tenant_b.rename("Hijacked")

        async with tenant_scoped_session(sessionmaker, context) as session:
            with pytest.raises(ResourceNotFoundError):
                async with session.begin():
                    await TenantRepository(session).save(tenant_b)


class TestTenantProvisioningRepository:
    """Tests for the administrative tenant writer."""

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, sessionmaker, provision_tenant):
        await provision_tenant("acme")
        tenant = Tenant.create(name="Other Acme", slug="acme")
        admin = User(
            id=UserId(value="other-admin"),
            tenant_id=tenant.id,
            email="root@other.example",
            role=Role.TENANT_ADMIN,
        )

        with pytest.raises(DuplicateTenantSlugError):
            await TenantProvisioningRepository(sessionmaker=sessionmaker).provision(
                tenant, admin
            )

    @pytest.mark.asyncio
    async def test_failed_provisioning_leaves_no_tenant(
        self, sessionmaker, provision_tenant, make_context
    ):
        existing, existing_admin = await provision_tenant("acme")
        tenant = Tenant.create(name="Globex", slug="globex")
        # Reuses an existing user id, so the admin insert fails
        admin = User(
            id=existing_admin.id,
            tenant_id=tenant.id,
            email="root@globex.example",
            role=Role.TENANT_ADMIN,
        )

        with pytest.raises(IntegrityError):
            await TenantProvisioningRepository(sessionmaker=sessionmaker).provision(
                tenant, admin
            )

        context = make_context(tenant_id=tenant.id.value, role=Role.TENANT_ADMIN)
        async with tenant_scoped_session(sessionmaker, context) as session:
            assert await TenantRepository(session).get_by_id(tenant.id) is None
