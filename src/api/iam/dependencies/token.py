from typing import Annotated

from fastapi import Depends

from iam.application.observability import (
    DefaultTokenServiceProbe,
    TokenServiceProbe,
)
from iam.application.services import TokenLifecycleService
from iam.dependencies.authentication import get_replay_store
from shared_kernel.auth import ReplayStore


def get_token_service_probe() -> TokenServiceProbe:
    """Get TokenServiceProbe instance.

    Returns:
        DefaultTokenServiceProbe instance for observability
    """
    return DefaultTokenServiceProbe()


def get_token_lifecycle_service(
    replay_store: Annotated[ReplayStore, Depends(get_replay_store)],
    probe: Annotated[TokenServiceProbe, Depends(get_token_service_probe)],
) -> TokenLifecycleService:
    """Get TokenLifecycleService instance.

    Args:
        replay_store: The process-wide replay and revocation store
        probe: Token service probe for observability

    Returns:
        TokenLifecycleService instance
    """
    return TokenLifecycleService(replay_store=replay_store, probe=probe)
