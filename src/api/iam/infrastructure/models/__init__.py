"""SQLAlchemy ORM models for IAM bounded context.

These models map to database tables and are used by repository implementations.
"""

from iam.infrastructure.models.tenant import TenantModel
from iam.infrastructure.models.token_record import TokenRecordModel
from iam.infrastructure.models.user import UserModel

__all__ = [
    "TenantModel",
    "TokenRecordModel",
    "UserModel",
]
