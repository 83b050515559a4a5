"""Token lifecycle service for IAM bounded context.

Logout revokes the presenting token. Refresh token rotation starts
tracking the successor of a refresh token that single-use authentication
has already redeemed. Both go through the replay store, which the token
validator consults on every request.
"""

from __future__ import annotations

from datetime import datetime

from iam.application.observability import DefaultTokenServiceProbe, TokenServiceProbe
from shared_kernel.auth.auth_context import AuthContext
from shared_kernel.auth.replay_store import ReplayStore
from shared_kernel.exceptions import AuthenticationFailedError


class TokenLifecycleService:
    """Application service for logout and refresh token rotation."""

    def __init__(
        self,
        replay_store: ReplayStore,
        probe: TokenServiceProbe | None = None,
    ):
        """Initialize TokenLifecycleService.

        Args:
            replay_store: Replay and revocation store
            probe: Optional domain probe for observability
        """
        self._replay_store = replay_store
        self._probe = probe or DefaultTokenServiceProbe()

    async def logout(self, context: AuthContext) -> None:
        """Revoke the token the caller authenticated with.

        A token without a token id cannot be revoked individually; it stays
        valid until it expires.
        """
        if context.token_id is None:
            self._probe.logout_without_token_id(user_id=context.user_id)
            return

        await self._replay_store.revoke(context.token_id, context.expires_at)
        self._probe.logged_out(user_id=context.user_id, tenant_id=context.tenant_id)

    async def rotate_refresh_token(
        self, context: AuthContext, new_token_id: str, expires_at: datetime
    ) -> None:
        """Track the refresh token issued in place of the presented one.

        The presented refresh token was redeemed while the request was
        authenticated, so any later presentation of it fails.

        Args:
            context: AuthContext built from the redeemed refresh token
            new_token_id: Token id of the refresh token replacing it
            expires_at: Expiry of the new refresh token

        Raises:
            AuthenticationFailedError: If the presented token has no token id
            ValueError: If the successor reuses the presented token id
        """
        if context.token_id is None:
            raise AuthenticationFailedError()
        if new_token_id == context.token_id:
            raise ValueError("The new refresh token must have its own token id")

        await self._replay_store.record_issued(new_token_id, expires_at)
        self._probe.refresh_token_rotated(
            old_token_id=context.token_id, new_token_id=new_token_id
        )
