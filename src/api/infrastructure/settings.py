"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        SHIELDED_DB_HOST: Database host (default: localhost)
        SHIELDED_DB_PORT: Database port (default: 5432)
        SHIELDED_DB_DATABASE: Database name (default: shielded)
        SHIELDED_DB_USERNAME: Database user (default: shielded_app)
        SHIELDED_DB_PASSWORD: Database password (required in production)
        SHIELDED_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        SHIELDED_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        SHIELDED_DB_ECHO: Log every SQL statement (default: false)
        SHIELDED_DB_ADMIN_USERNAME: Role with BYPASSRLS used to provision tenants
        SHIELDED_DB_ADMIN_PASSWORD: Password of the administrative role
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIELDED_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="shielded", description="Database name")
    username: str = Field(default="shielded_app", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    admin_username: str | None = Field(
        default=None,
        description="Administrative role for tenant provisioning",
    )
    admin_password: SecretStr = Field(
        default=SecretStr(""),
        description="Administrative role password",
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthSettings(BaseSettings):
    """Bearer token validation settings.

    Keys are either configured statically (``public_key`` plus the optional
    ``previous_public_key`` during rotation) or discovered from the issuer's
    JWKS endpoint when no static key is set.

    Environment variables:
        SHIELDED_AUTH_ISSUER: Expected issuer (exact match)
        SHIELDED_AUTH_AUDIENCE: Expected audience
        SHIELDED_AUTH_ALGORITHM: Fixed signature algorithm (RS256 or ES256)
        SHIELDED_AUTH_PUBLIC_KEY: PEM public key of the current generation
        SHIELDED_AUTH_PREVIOUS_PUBLIC_KEY: PEM public key of the previous generation
        SHIELDED_AUTH_JWKS_CACHE_TTL_SECONDS: JWKS cache lifetime (default: 3600)
        SHIELDED_AUTH_TENANT_CLAIM: Claim carrying the tenant id (default: tenant_id)
        SHIELDED_AUTH_ROLES_CLAIM: Claim carrying the role (default: roles)
        SHIELDED_AUTH_TOKEN_ID_CLAIM: Claim carrying the token id (default: jti)
        SHIELDED_AUTH_REQUIRE_TOKEN_ID: Reject tokens without a token id (default: true)
        SHIELDED_AUTH_CLOCK_SKEW_SECONDS: Allowed clock skew (default: 30)
        SHIELDED_AUTH_MAX_TOKEN_LIFETIME_SECONDS: Longest accepted iat..exp span
        SHIELDED_AUTH_REPLAY_STORE_BACKEND: memory or database (default: memory)
        SHIELDED_AUTH_REVOCATION_TTL_SECONDS: How long revocations of tokens
            with unknown expiry are remembered (default: 86400)
        SHIELDED_AUTH_REPLAY_PURGE_INTERVAL_SECONDS: Pause between purges of
            expired replay store entries (default: 300)
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIELDED_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer: str = Field(
        default="http://localhost:8080/realms/shielded",
        description="Expected token issuer",
    )
    audience: str = Field(default="shielded-api", description="Expected audience")
    algorithm: Literal["RS256", "ES256"] = Field(
        default="RS256",
        description="The only accepted signature algorithm",
    )
    public_key: str | None = Field(
        default=None,
        description="PEM public key of the current key generation",
    )
    previous_public_key: str | None = Field(
        default=None,
        description="PEM public key of the previous key generation",
    )
    jwks_cache_ttl_seconds: int = Field(default=3600, ge=60)
    tenant_claim: str = Field(default="tenant_id")
    roles_claim: str = Field(default="roles")
    token_id_claim: str = Field(default="jti")
    require_token_id: bool = Field(default=True)
    clock_skew_seconds: int = Field(default=30, ge=0, le=300)
    max_token_lifetime_seconds: int = Field(default=3600, ge=60, le=86400)
    replay_store_backend: Literal["memory", "database"] = Field(default="memory")
    revocation_ttl_seconds: int = Field(default=86400, ge=60)
    replay_purge_interval_seconds: int = Field(default=300, ge=1)

    @model_validator(mode="after")
    def validate_key_configuration(self) -> "AuthSettings":
        """A previous key generation only makes sense next to a current one."""
        if self.previous_public_key and not self.public_key:
            raise ValueError(
                "previous_public_key requires public_key to be configured"
            )
        return self

    @property
    def uses_static_keys(self) -> bool:
        """Whether keys are configured statically rather than via JWKS."""
        return self.public_key is not None


class RateLimitSettings(BaseSettings):
    """Rate limiting settings.

    Environment variables:
        SHIELDED_RATE_LIMIT_ENABLED: Enable rate limiting (default: true)
        SHIELDED_RATE_LIMIT_WINDOW_SECONDS: Window length (default: 60)
        SHIELDED_RATE_LIMIT_PER_IP: Unauthenticated requests per IP per window
        SHIELDED_RATE_LIMIT_PER_USER: Requests per user per window
        SHIELDED_RATE_LIMIT_PER_TENANT: Requests per tenant per window
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIELDED_RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True)
    window_seconds: int = Field(default=60, ge=1)
    per_ip: int = Field(default=300, ge=1)
    per_user: int = Field(default=600, ge=1)
    per_tenant: int = Field(default=6000, ge=1)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Shielded API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def auth(self) -> "AuthSettings":
        """Get authentication settings."""
        return get_auth_settings()

    @property
    def rate_limit(self) -> "RateLimitSettings":
        """Get rate limiting settings."""
        return get_rate_limit_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings."""
    return AuthSettings()


@lru_cache
def get_rate_limit_settings() -> RateLimitSettings:
    """Get cached rate limiting settings."""
    return RateLimitSettings()
