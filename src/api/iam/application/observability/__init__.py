"""Domain-Oriented Observability for IAM application layer.

Probes for application service operations following Domain-Oriented
Observability patterns.
"""

from iam.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from iam.application.observability.token_service_probe import (
    DefaultTokenServiceProbe,
    TokenServiceProbe,
)
from iam.application.observability.user_service_probe import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)

__all__ = [
    "AuthenticationProbe",
    "DefaultAuthenticationProbe",
    "TenantServiceProbe",
    "DefaultTenantServiceProbe",
    "TokenServiceProbe",
    "DefaultTokenServiceProbe",
    "UserServiceProbe",
    "DefaultUserServiceProbe",
]
