"""Unit tests for Tenant aggregate."""

import pytest

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId, TenantStatus
from shared_kernel.authorization import ProtectedResource


class TestTenantCreation:
    """Tests for Tenant aggregate creation."""

    def test_creates_with_required_fields(self):
        """Test that Tenant can be created with required fields."""
        tenant_id = TenantId.generate()

        tenant = Tenant(id=tenant_id, name="Acme Corp", slug="acme")

        assert tenant.id == tenant_id
        assert tenant.plan == "free"
        assert tenant.status is TenantStatus.ACTIVE
        assert tenant.is_active

    def test_requires_slug(self):
        with pytest.raises(TypeError):
            Tenant(id=TenantId.generate(), name="Acme Corp")


class TestTenantFactory:
    """Tests for Tenant.create() factory method."""

    def test_factory_generates_id(self):
        tenant = Tenant.create(name="Acme Corp", slug="acme", plan="enterprise")

        assert TenantId.from_string(tenant.id.value) == tenant.id
        assert tenant.plan == "enterprise"

    def test_factory_generates_unique_ids(self):
        first = Tenant.create(name="Acme", slug="acme")
        second = Tenant.create(name="Acme", slug="acme-2")

        assert first.id != second.id

    @pytest.mark.parametrize(("name", "slug"), [("", "acme"), ("Acme", "")])
    def test_factory_requires_name_and_slug(self, name, slug):
        with pytest.raises(ValueError):
            Tenant.create(name=name, slug=slug)


class TestRename:
    """Tests for Tenant.rename."""

    def test_changes_name_only(self):
        tenant = Tenant.create(name="Acme", slug="acme")
        original_id = tenant.id

        tenant.rename("Acme Corp")

        assert tenant.name == "Acme Corp"
        assert tenant.slug == "acme"
        assert tenant.id == original_id

    def test_rejects_empty_name(self):
        tenant = Tenant.create(name="Acme", slug="acme")

        with pytest.raises(ValueError):
            tenant.rename("")

        assert tenant.name == "Acme"


class TestProtectedResource:
    """Tenants take part in authorization decisions."""

    def test_is_protected_resource(self):
        assert isinstance(Tenant.create(name="Acme", slug="acme"), ProtectedResource)

    def test_belongs_only_to_itself(self):
        tenant = Tenant.create(name="Acme", slug="acme")

        assert tenant.belongs_to_tenant(tenant.id.value)
        assert not tenant.belongs_to_tenant(TenantId.generate().value)

    def test_every_member_is_assigned(self):
        tenant = Tenant.create(name="Acme", slug="acme")

        assert not tenant.is_owned_by("user-1")
        assert tenant.is_assigned_to("user-1")


class TestTenantId:
    """Tests for TenantId parsing."""

    def test_from_string_round_trips(self):
        tenant_id = TenantId.generate()

        assert TenantId.from_string(tenant_id.value) == tenant_id

    @pytest.mark.parametrize("value", ["", "not-a-ulid", "0" * 27])
    def test_from_string_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            TenantId.from_string(value)
