"""Authentication shared kernel module."""

from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.auth.observability import (
    DefaultTokenValidatorProbe,
    TokenValidatorProbe,
)
from shared_kernel.auth.replay_store import (
    InMemoryReplayStore,
    ReplayStore,
    ReplayStoreUnavailableError,
)
from shared_kernel.auth.signing_keys import (
    JWKSKeySource,
    SigningKeySource,
    SigningKeyUnavailableError,
    StaticKeySource,
)
from shared_kernel.auth.token_validator import TokenValidator

__all__ = [
    "AuthContext",
    "DefaultTokenValidatorProbe",
    "InMemoryReplayStore",
    "JWKSKeySource",
    "ReplayStore",
    "ReplayStoreUnavailableError",
    "SigningKeySource",
    "SigningKeyUnavailableError",
    "StaticKeySource",
    "TokenValidator",
    "TokenValidatorProbe",
]
