"""Domain-Oriented Observability for IAM infrastructure.

Probes for repository operations and background workers following Domain-Oriented Observability patterns.
"""

from iam.infrastructure.observability.purge_worker_probe import (
    DefaultReplayStorePurgeProbe,
    ReplayStorePurgeProbe,
)
from iam.infrastructure.observability.repository_probe import (
    DefaultTenantRepositoryProbe,
    DefaultTokenRecordStoreProbe,
    DefaultUserRepositoryProbe,
    TenantRepositoryProbe,
    TokenRecordStoreProbe,
    UserRepositoryProbe,
)

__all__ = [
    "DefaultReplayStorePurgeProbe",
    "DefaultTenantRepositoryProbe",
    "DefaultTokenRecordStoreProbe",
    "DefaultUserRepositoryProbe",
    "ReplayStorePurgeProbe",
    "TenantRepositoryProbe",
    "TokenRecordStoreProbe",
    "UserRepositoryProbe",
]
