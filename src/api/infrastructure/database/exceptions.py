"""Database-specific exceptions.

These describe storage failures. Tenant isolation violations are not
database errors: they surface as the shared kernel's authorization and
configuration errors so that callers handle them uniformly.
"""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when database connection fails."""

    pass
