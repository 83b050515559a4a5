"""Database infrastructure - engines, sessions and tenant row isolation."""

from infrastructure.database.exceptions import (
    DatabaseConnectionError,
    DatabaseError,
)
from infrastructure.database.row_isolation import (
    RowIsolationEnforcer,
    install_row_isolation,
)
from infrastructure.database.tenant_session import (
    require_context,
    tenant_scoped_session,
)

__all__ = [
    "DatabaseConnectionError",
    "DatabaseError",
    "RowIsolationEnforcer",
    "install_row_isolation",
    "require_context",
    "tenant_scoped_session",
]
