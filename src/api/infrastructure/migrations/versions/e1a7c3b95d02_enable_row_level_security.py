"""enable row level security

Revision ID: e1a7c3b95d02
Revises: 5b2d8e6c4f19
Create Date: 2026-09-29 14:20:36.518447

Mirrors the application's row isolation inside PostgreSQL. The API sets
``app.tenant_id`` and ``app.user_id`` with transaction-local set_config
calls at the start of every transaction; the policies below read them
through helper functions that refuse to run without a tenant.

FORCE ROW LEVEL SECURITY applies the policies to the table owner too.
Tenants are created by an administrative connection, never through the
application role.
"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "e1a7c3b95d02"
down_revision: Union[str, Sequence[str], None] = "5b2d8e6c4f19"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ISOLATED_TABLES = (
    "tenants",
    "users",
    "projects",
    "project_assignments",
    "audit_events",
)

# Tables whose tenant_id is always taken from the session, never the client
TENANT_STAMPED_TABLES = ("users", "projects", "project_assignments", "audit_events")

TIMESTAMPED_TABLES = ("tenants", "users", "projects")

POLICIES = {
    "tenants": [
        "CREATE POLICY tenant_select ON tenants FOR SELECT "
        "USING (id = current_tenant_id())",
        "CREATE POLICY tenant_insert ON tenants FOR INSERT WITH CHECK (false)",
        "CREATE POLICY tenant_update ON tenants FOR UPDATE "
        "USING (id = current_tenant_id()) "
        "WITH CHECK (id = current_tenant_id())",
        "CREATE POLICY tenant_delete ON tenants FOR DELETE USING (false)",
    ],
    "users": [
        "CREATE POLICY user_select ON users FOR SELECT "
        "USING (tenant_id = current_tenant_id())",
        "CREATE POLICY user_insert ON users FOR INSERT "
        "WITH CHECK (tenant_id = current_tenant_id() "
        "AND current_user_has_role('tenant_admin'))",
        "CREATE POLICY user_update ON users FOR UPDATE "
        "USING (tenant_id = current_tenant_id()) "
        "WITH CHECK (tenant_id = current_tenant_id() "
        "AND (id = current_user_id() OR current_user_has_role('tenant_admin')))",
        "CREATE POLICY user_delete ON users FOR DELETE "
        "USING (tenant_id = current_tenant_id() "
        "AND current_user_has_role('tenant_admin') "
        "AND id <> current_user_id())",
    ],
    "projects": [
        "CREATE POLICY project_select ON projects FOR SELECT "
        "USING (tenant_id = current_tenant_id())",
        "CREATE POLICY project_insert ON projects FOR INSERT "
        "WITH CHECK (tenant_id = current_tenant_id() "
        "AND current_user_id() IS NOT NULL)",
        "CREATE POLICY project_update ON projects FOR UPDATE "
        "USING (tenant_id = current_tenant_id()) "
        "WITH CHECK (tenant_id = current_tenant_id() "
        "AND (owner_id = current_user_id() "
        "OR current_user_is_assigned(id) "
        "OR current_user_has_role('tenant_admin')))",
        "CREATE POLICY project_delete ON projects FOR DELETE "
        "USING (tenant_id = current_tenant_id() "
        "AND (owner_id = current_user_id() "
        "OR current_user_is_assigned(id) "
        "OR current_user_has_role('tenant_admin')))",
    ],
    "project_assignments": [
        "CREATE POLICY project_assignment_select ON project_assignments "
        "FOR SELECT USING (tenant_id = current_tenant_id())",
        "CREATE POLICY project_assignment_insert ON project_assignments "
        "FOR INSERT WITH CHECK (tenant_id = current_tenant_id())",
        "CREATE POLICY project_assignment_update ON project_assignments "
        "FOR UPDATE USING (false)",
        "CREATE POLICY project_assignment_delete ON project_assignments "
        "FOR DELETE USING (tenant_id = current_tenant_id())",
    ],
    "audit_events": [
        "CREATE POLICY audit_event_select ON audit_events FOR SELECT "
        "USING (tenant_id = current_tenant_id() "
        "AND current_user_has_role('tenant_admin'))",
        "CREATE POLICY audit_event_insert ON audit_events FOR INSERT "
        "WITH CHECK (tenant_id = current_tenant_id())",
        "CREATE POLICY audit_event_update ON audit_events FOR UPDATE "
        "USING (false)",
        "CREATE POLICY audit_event_delete ON audit_events FOR DELETE "
        "USING (false)",
    ],
}

CURRENT_TENANT_ID = r"""
CREATE OR REPLACE FUNCTION current_tenant_id()
RETURNS TEXT AS $$
DECLARE
    tid TEXT;
BEGIN
    tid := current_setting('app.tenant_id', true);
    IF tid IS NULL OR tid = '' THEN
        RAISE EXCEPTION 'Tenant context not set';
    END IF;
    IF tid !~ '^[0-9A-HJKMNP-TV-Z]{26}$' THEN
        RAISE EXCEPTION 'Invalid tenant_id format';
    END IF;
    RETURN tid;
END;
$$ LANGUAGE plpgsql STABLE
"""

CURRENT_USER_ID = """
CREATE OR REPLACE FUNCTION current_user_id()
RETURNS TEXT AS $$
DECLARE
    uid TEXT;
BEGIN
    uid := current_setting('app.user_id', true);
    IF uid IS NULL OR uid = '' THEN
        RETURN NULL;
    END IF;
    RETURN uid;
END;
$$ LANGUAGE plpgsql STABLE
"""

CURRENT_USER_HAS_ROLE = """
CREATE OR REPLACE FUNCTION current_user_has_role(required_role VARCHAR)
RETURNS BOOLEAN AS $$
BEGIN
    RETURN EXISTS (
        SELECT 1 FROM users
        WHERE id = current_user_id()
        AND tenant_id = current_tenant_id()
        AND role = required_role
        AND status = 'active'
    );
END;
$$ LANGUAGE plpgsql STABLE SECURITY DEFINER
"""

CURRENT_USER_IS_ASSIGNED = """
CREATE OR REPLACE FUNCTION current_user_is_assigned(target_project_id VARCHAR)
RETURNS BOOLEAN AS $$
BEGIN
    RETURN EXISTS (
        SELECT 1 FROM project_assignments
        WHERE project_id = target_project_id
        AND user_id = current_user_id()
        AND tenant_id = current_tenant_id()
    );
END;
$$ LANGUAGE plpgsql STABLE SECURITY DEFINER
"""

SET_TENANT_ID_ON_INSERT = """
CREATE OR REPLACE FUNCTION set_tenant_id_on_insert()
RETURNS TRIGGER AS $$
BEGIN
    NEW.tenant_id := current_tenant_id();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""

UPDATE_TIMESTAMP = """
CREATE OR REPLACE FUNCTION update_timestamp()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at := NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""


def upgrade() -> None:
    """Upgrade schema."""
    for function in (
        CURRENT_TENANT_ID,
        CURRENT_USER_ID,
        CURRENT_USER_HAS_ROLE,
        CURRENT_USER_IS_ASSIGNED,
        SET_TENANT_ID_ON_INSERT,
        UPDATE_TIMESTAMP,
    ):
        op.execute(function)

    for table in ISOLATED_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")
        for policy in POLICIES[table]:
            op.execute(policy)

    for table in TENANT_STAMPED_TABLES:
        op.execute(
            f"CREATE TRIGGER {table}_tenant_id BEFORE INSERT ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION set_tenant_id_on_insert()"
        )

    for table in TIMESTAMPED_TABLES:
        op.execute(
            f"CREATE TRIGGER {table}_updated_at BEFORE UPDATE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION update_timestamp()"
        )


def downgrade() -> None:
    """Downgrade schema."""
    for table in TIMESTAMPED_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS {table}_updated_at ON {table}")

    for table in TENANT_STAMPED_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS {table}_tenant_id ON {table}")

    for table in ISOLATED_TABLES:
        for policy in POLICIES[table]:
            name = policy.split()[2]
            op.execute(f"DROP POLICY IF EXISTS {name} ON {table}")
        op.execute(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")

    for function in (
        "update_timestamp()",
        "set_tenant_id_on_insert()",
        "current_user_is_assigned(VARCHAR)",
        "current_user_has_role(VARCHAR)",
        "current_user_id()",
        "current_tenant_id()",
    ):
        op.execute(f"DROP FUNCTION IF EXISTS {function}")
