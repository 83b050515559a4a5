"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories and domain services without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from iam.ports.exceptions import (
    DuplicateTenantSlugError,
    DuplicateUserEmailError,
    DuplicateUserIdError,
)
from iam.ports.repositories import (
    ITenantProvisioningRepository,
    ITenantRepository,
    IUserRepository,
)

__all__ = [
    "DuplicateTenantSlugError",
    "DuplicateUserEmailError",
    "DuplicateUserIdError",
    "ITenantProvisioningRepository",
    "ITenantRepository",
    "IUserRepository",
]
