"""Unit tests for the AuditEvent value type."""

from datetime import UTC, datetime

import pytest

from shared_kernel.audit import AuditDecision, AuditEvent


def _fields(**overrides):
    fields = {
        "tenant_id": "01HN3XQ7K2ABCDEFGHJKMNPQRS",
        "user_id": "u1",
        "action": "project.read",
        "resource_type": "project",
        "resource_id": "p-1",
        "decision": AuditDecision.ALLOWED,
        "timestamp": datetime(2026, 1, 1, tzinfo=UTC),
        "request_id": "req-1",
    }
    fields.update(overrides)
    return fields


class TestAuditEvent:
    """Tests for AuditEvent."""

    def test_unlisted_field_is_rejected(self):
        """Request bodies and tokens cannot be smuggled into the record."""
        with pytest.raises(TypeError):
            AuditEvent(**_fields(), payload={"password": "hunter2"})

    def test_positional_arguments_are_rejected(self):
        with pytest.raises(TypeError):
            AuditEvent(*_fields().values())

    def test_naive_timestamp_is_rejected(self):
        with pytest.raises(ValueError):
            AuditEvent(**_fields(timestamp=datetime(2026, 1, 1)))

    def test_tenant_is_required(self):
        with pytest.raises(ValueError):
            AuditEvent(**_fields(tenant_id=""))

    def test_decision_string_is_coerced(self):
        event = AuditEvent(**_fields(decision="not_found", error_code="not_found"))

        assert event.decision is AuditDecision.NOT_FOUND

    def test_unknown_decision_is_rejected(self):
        with pytest.raises(ValueError):
            AuditEvent(**_fields(decision="maybe"))

    def test_events_are_immutable(self):
        event = AuditEvent(**_fields())

        with pytest.raises(AttributeError):
            event.user_id = "u2"  # type: ignore[misc]
