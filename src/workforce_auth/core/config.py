"""
Service configuration.

Every tunable is read from the environment (or .env) through pydantic-settings.
Secrets such as FEDERATED_JWT_SECRET and DATABASE_URL have no defaults, so a
misconfigured deployment fails at import time instead of at first login.
"""

from datetime import timedelta
from typing import Literal

from pydantic import Field, PostgresDsn, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings. Field names map to upper-case env vars."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Workforce Admin Console")
    version: str = Field(default="0.1.0")
    description: str = Field(
        default="Identity and access control for the workforce admin console"
    )
    environment: Literal["development", "staging", "production"] = Field(default="development")
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Session Settings
    # -------------------------------------------------------------------------
    session_ttl_seconds: int = Field(
        default=28800,  # 8 hours
        ge=60,
        description="Lifetime of a session, applied on creation and on every refresh",
    )
    session_token_prefix: str = Field(default="wfs_", max_length=8)
    session_sweep_interval_seconds: int = Field(
        default=3600,
        ge=0,
        description="Interval of the expired-session sweep. 0 disables it.",
    )

    # -------------------------------------------------------------------------
    # Super Admin Allow-List and Bootstrap
    # -------------------------------------------------------------------------
    super_admin_email: str = Field(default="admin@mintid.live")
    super_admin_provider_username: str = Field(default="mintid-admin")
    super_admin_username: str = Field(default="super-admin", min_length=3, max_length=30)
    super_admin_display_name: str = Field(default="Super Administrator")
    bootstrap_on_startup: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Password Hashing (Argon2id)
    # -------------------------------------------------------------------------
    hash_cost_factor: int = Field(default=2, ge=1, le=10)  # Argon2 time cost
    argon2_memory_cost: int = Field(default=65536, ge=8192)  # 64 MB
    argon2_parallelism: int = Field(default=4, ge=1, le=16)
    password_min_length: int = Field(default=8, ge=8, le=64)

    # -------------------------------------------------------------------------
    # Federated Identity Provider
    # -------------------------------------------------------------------------
    federated_jwt_secret: str = Field(
        ...,
        min_length=32,
        description="Shared secret used to verify identity provider access tokens",
    )
    federated_jwt_algorithms: str = Field(default="HS256")
    federated_jwt_audience: str | None = Field(default="authenticated")
    federated_default_provider: str = Field(default="github")

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string with asyncpg driver"
    )

    # Connection Pool Settings
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_recycle: int = Field(default=3600, ge=300)  # Seconds
    db_pool_pre_ping: bool = Field(default=True)
    db_pool_timeout: int = Field(default=30, ge=1)

    # -------------------------------------------------------------------------
    # Redis Configuration
    # -------------------------------------------------------------------------
    redis_url: RedisDsn | None = Field(
        default=None,
        description="Redis connection string for rate limiting storage"
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    rate_limit_enabled: bool = Field(default=True)
    trust_forwarded_for: bool = Field(
        default=False,
        description="Take the client address from X-Forwarded-For (only behind a trusted proxy)",
    )
    rate_limit_default: str = Field(default="200/minute")
    rate_limit_login: str = Field(default="5/15minute")
    rate_limit_session_refresh: str = Field(default="30/hour")
    rate_limit_password_change: str = Field(default="3/hour")

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_file_enabled: bool = Field(default=True)
    log_file_path: str = Field(default="logs/app.log")
    log_file_max_bytes: int = Field(default=10485760)  # 10 MB
    log_file_backup_count: int = Field(default=5)

    # -------------------------------------------------------------------------
    # Audit Logging
    # -------------------------------------------------------------------------
    audit_log_enabled: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def database_url_str(self) -> str:
        """Get database URL as string."""
        return str(self.database_url)

    @property
    def redis_url_str(self) -> str | None:
        """Get Redis URL as string, if configured."""
        return str(self.redis_url) if self.redis_url else None

    @property
    def session_ttl(self) -> timedelta:
        """Session lifetime as a timedelta."""
        return timedelta(seconds=self.session_ttl_seconds)

    @property
    def federated_jwt_algorithm_list(self) -> list[str]:
        """Accepted signing algorithms for identity provider tokens."""
        return [
            alg.strip() for alg in self.federated_jwt_algorithms.split(",") if alg.strip()
        ]


settings = Settings()
