"""
Configuration management for the Shiftboard application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

import logging
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_TASKS = ("anamnez", "3tup kan", "dosya girişi")


def _normalize_redis_db(url: str) -> str:
    """Replace an out-of-range logical database index (0-15) with 0."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    path = parts.path
    fixed = False

    db_path = path.lstrip("/")
    if db_path:
        if not db_path.isdigit() or not 0 <= int(db_path) <= 15:
            logger.warning("Invalid Redis DB index %r in URL path, using 0", db_path)
            path = "/0"
            fixed = True

    for index, (name, value) in enumerate(query):
        if name == "db" and (not value.isdigit() or not 0 <= int(value) <= 15):
            logger.warning("Invalid Redis DB index %r in URL query, using 0", value)
            query[index] = ("db", "0")
            fixed = True

    if not fixed:
        return url
    return urlunsplit(
        (parts.scheme, parts.netloc, path, urlencode(query), parts.fragment)
    )


class RedisSettings(BaseSettings):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    max_retries: int = Field(
        default=3, description="Retries per command on connection errors"
    )
    retry_base_seconds: float = Field(
        default=0.05, description="Base delay for exponential backoff"
    )
    retry_cap_seconds: float = Field(
        default=2.0, description="Upper bound for a single backoff delay"
    )
    socket_timeout: float = Field(default=5.0, description="Socket timeout in seconds")

    @validator("url")
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(
                "Redis URL must start with 'redis://', 'rediss://' or 'unix://'"
            )
        if v.startswith("unix://"):
            return v
        return _normalize_redis_db(v)

    @validator("max_retries")
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries cannot be negative")
        return v


class TrackerSettings(BaseSettings):
    """Data retention and default checklist settings."""

    model_config = SettingsConfigDict(env_prefix="TRACKER_")

    record_ttl_seconds: int = Field(
        default=60 * 60 * 24, description="Expiry applied to every record and index"
    )
    default_tasks: List[str] = Field(
        default=list(DEFAULT_TASKS),
        description="Tasks created for every newly registered patient",
    )

    @validator("record_ttl_seconds")
    def validate_ttl(cls, v: int) -> int:
        """Validate TTL is positive."""
        if v <= 0:
            raise ValueError("record_ttl_seconds must be positive")
        return v


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )
    allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS"
    )

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [v.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")
    file_path: Optional[str] = Field(default=None, description="Log file path")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Shiftboard", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Override sub-settings with environment variables
        if "redis" not in kwargs:
            self.redis = RedisSettings()
        if "tracker" not in kwargs:
            self.tracker = TrackerSettings()
        if "cors" not in kwargs:
            self.cors = CORSSettings()
        if "logging" not in kwargs:
            self.logging = LoggingSettings()

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
