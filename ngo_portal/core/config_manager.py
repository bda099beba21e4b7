"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


# Signing secrets that ship in examples and docs and must never sign real tokens
PLACEHOLDER_JWT_SECRETS = frozenset(
    {
        "changeme",
        "change-me",
        "secret",
        "your-secret-key",
        "your_jwt_secret",
        "dev-secret-key-change-in-production",
        "replace-with-a-long-random-string",
    }
)


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="NGO Portal", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8000, description="FastAPI port")

    # Database configuration
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy async URL; overrides the PostgreSQL fields below",
    )
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="ngo_user", description="PostgreSQL user")
    database_password: str = Field(
        default="ngo_password", description="PostgreSQL password"
    )
    database_name: str = Field(default="ngo_portal", description="PostgreSQL database name")
    database_pool_size: int = Field(default=10, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")

    # Redis configuration (login rate limiting)
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_max_connections: int = Field(default=50, description="Redis max connections")

    # Login rate limiting
    rate_limit_enabled: bool = Field(
        default=False, description="Enable Redis-backed login rate limiting"
    )
    login_rate_limit_attempts: int = Field(
        default=5, description="Max login attempts per window per ip+email"
    )
    login_rate_limit_window_seconds: int = Field(
        default=900, description="Login rate limit window in seconds"
    )

    # JWT configuration
    jwt_secret_key: Optional[str] = Field(
        default=None, description="Secret used to sign access tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=15,
        description="Access token lifetime; also the accessToken cookie max-age",
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7, description="Refresh token lifetime in days"
    )

    # CORS
    cors_origins: List[str] = Field(
        default=["*"], description="Origins allowed to call the API with credentials"
    )

    # Cookie configuration
    cookie_secure: bool = Field(default=False, description="Send cookies over HTTPS only")
    cookie_samesite: str = Field(default="lax", description="SameSite cookie policy")

    # Password hashing
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor")

    # Realtime notifications
    ws_heartbeat_interval_seconds: float = Field(
        default=60.0, description="Seconds between WebSocket heartbeat sweeps"
    )

    # Admin seed
    admin_email: Optional[str] = Field(default=None, description="Seed admin email")
    admin_password: Optional[str] = Field(default=None, description="Seed admin password")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("cookie_samesite")
    @classmethod
    def validate_cookie_samesite(cls, v: str) -> str:
        """Validate SameSite policy is one browsers understand."""
        v_lower = v.lower()
        if v_lower not in ("lax", "strict", "none"):
            raise ValueError("cookie_samesite must be one of: lax, strict, none")
        return v_lower

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """Keep the bcrypt cost in the interactive-login range."""
        if not 10 <= v <= 16:
            raise ValueError("bcrypt_rounds must be between 10 and 16")
        return v

    @field_validator("jwt_access_token_expire_minutes", "jwt_refresh_token_expire_days")
    @classmethod
    def validate_positive_lifetime(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Token lifetimes must be positive")
        return v

    @property
    def database_url_async(self) -> str:
        """Construct the async database URL (explicit override wins)."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def access_token_max_age_seconds(self) -> int:
        return self.jwt_access_token_expire_minutes * 60

    @property
    def refresh_token_max_age_seconds(self) -> int:
        return self.jwt_refresh_token_expire_days * 24 * 3600


# Global settings instance
settings = ApplicationSettings()
