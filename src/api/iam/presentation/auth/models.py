"""Pydantic models for token lifecycle requests."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, Field


class RefreshTokenRequest(BaseModel):
    """Refresh token issued by the identity provider to replace the bearer one."""

    token_id: str = Field(
        ...,
        description="Token id (jti) of the new refresh token",
        min_length=1,
        max_length=255,
    )
    expires_at: AwareDatetime = Field(
        ..., description="Expiry of the new refresh token"
    )
