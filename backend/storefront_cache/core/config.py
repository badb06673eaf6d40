"""
Storefront Cache Configuration

Configuration management with environment variable support.
Implements secure defaults and validation for all cache settings.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    CACHE_ENABLED_VALUE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_OPERATION_TIMEOUT,
    DEFAULT_TTL_SECONDS,
)

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Feature flag - kept as raw text, only the exact value "true" enables caching
    CACHE_ENABLED: str = Field(
        default="false", description="Enable the Redis cache layer ('true' only)"
    )

    # Redis configuration
    REDIS_URL: Optional[str] = Field(
        default=None, description="Redis connection URL (overrides host/port)"
    )
    REDIS_HOST: str = Field(default="localhost", description="Redis host")
    REDIS_PORT: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    REDIS_USERNAME: Optional[str] = Field(default=None, description="Redis ACL user")
    REDIS_PASSWORD: Optional[str] = Field(default=None, description="Redis password")
    REDIS_DB: int = Field(default=0, ge=0, le=15, description="Redis database index")
    REDIS_TLS: bool = Field(default=False, description="Use TLS for Redis")

    # Cache behaviour
    CACHE_OPERATION_TIMEOUT: float = Field(
        default=DEFAULT_OPERATION_TIMEOUT,
        gt=0,
        le=30,
        description="Upper bound for a single get/set/delete in seconds",
    )
    CACHE_CONNECT_TIMEOUT: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        gt=0,
        le=60,
        description="Upper bound for establishing the Redis connection in seconds",
    )
    CACHE_DEFAULT_TTL: int = Field(
        default=DEFAULT_TTL_SECONDS,
        ge=1,
        le=86400 * 365,
        description="TTL applied when a caller passes none",
    )

    # Development and debugging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL scheme."""
        if v is None or v == "":
            return None
        if urlparse(v).scheme not in ("redis", "rediss", "unix"):
            raise ValueError("REDIS_URL must use redis://, rediss:// or unix://")
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def cache_enabled(self) -> bool:
        """Caching is on only when the flag is exactly 'true'."""
        return self.CACHE_ENABLED == CACHE_ENABLED_VALUE

    @property
    def redis_configured(self) -> bool:
        """Whether connection parameters were supplied explicitly."""
        return bool(self.REDIS_URL)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
