"""
Settings Module for Uptime Probe

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime configuration.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment enumeration."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DatabaseType(str, Enum):
    """Supported database types."""
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class DatabaseSettings(BaseSettingsConfig):
    """
    Database Configuration Settings

    Backs the website lookup, the failure streak counters and the
    uptime check sink. SQLite for development, PostgreSQL in production.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore"
    )

    type: DatabaseType = Field(
        default=DatabaseType.SQLITE,
        description="Database type: postgresql or sqlite"
    )

    # PostgreSQL settings
    host: str = Field(
        default="localhost",
        description="Database host address"
    )
    port: int = Field(
        default=5432,
        ge=1,
        le=65535,
        description="Database port number"
    )
    name: str = Field(
        default="uptime",
        min_length=1,
        max_length=64,
        description="Database name"
    )
    user: str = Field(
        default="postgres",
        min_length=1,
        max_length=64,
        description="Database username"
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password"
    )

    # SQLite settings
    sqlite_path: Path = Field(
        default=Path("data/uptime.db"),
        description="Path to SQLite database file"
    )

    # Connection pool settings
    pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Connection pool size"
    )
    max_overflow: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Maximum overflow connections"
    )
    pool_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Pool connection timeout in seconds"
    )
    pool_recycle: int = Field(
        default=1800,
        ge=60,
        le=7200,
        description="Connection recycle time in seconds"
    )

    echo: bool = Field(
        default=False,
        description="Echo SQL queries (debug mode)"
    )
    create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup"
    )

    @property
    def url(self) -> str:
        """Generate database URL based on configuration."""
        if self.type == DatabaseType.SQLITE:
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite+aiosqlite:///{self.sqlite_path}"

        elif self.type == DatabaseType.POSTGRESQL:
            password = self.password.get_secret_value()
            return (
                f"postgresql+asyncpg://{self.user}:{password}"
                f"@{self.host}:{self.port}/{self.name}"
            )

        raise ValueError(f"Unsupported database type: {self.type}")

    @field_validator("sqlite_path")
    @classmethod
    def validate_sqlite_path(cls, v: Path) -> Path:
        """Validate and normalize SQLite path."""
        if not v.suffix:
            v = v.with_suffix(".db")
        return v


class ProbeSettings(BaseSettingsConfig):
    """
    Prober Configuration Settings

    Per-attempt HTTP client behaviour: timeouts, redirects,
    certificate verification and the user agent sent to targets.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROBE_",
        env_file=".env",
        extra="ignore"
    )

    timeout_ms: int = Field(
        default=10000,
        ge=100,
        le=120000,
        description="Hard deadline for a single attempt in milliseconds"
    )
    connect_timeout_ms: int = Field(
        default=5000,
        ge=100,
        le=60000,
        description="Connection timeout in milliseconds"
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects"
    )
    max_redirects: int = Field(
        default=5,
        ge=0,
        le=20,
        description="Maximum redirects followed per attempt"
    )
    max_body_bytes: int = Field(
        default=1_048_576,
        ge=0,
        description="Stop reading the response body after this many bytes"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify certificates against the system trust store"
    )
    user_agent: str = Field(
        default="UptimeProbe/1.0 (Compatible; Monitoring Service)",
        description="User agent string for HTTP requests"
    )
    ssl_expiry_warning_days: int = Field(
        default=30,
        ge=0,
        le=365,
        description="Log a warning when a certificate expires within this many days"
    )

    @model_validator(mode="after")
    def validate_timeouts(self) -> "ProbeSettings":
        """Connect timeout must fit inside the attempt deadline."""
        if self.connect_timeout_ms > self.timeout_ms:
            raise ValueError("connect_timeout_ms cannot be greater than timeout_ms")
        return self


class RetrySettings(BaseSettingsConfig):
    """
    Retry Controller Configuration Settings

    Bounds on the number of attempts and the delay between them.
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRY_",
        env_file=".env",
        extra="ignore"
    )

    default_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries used when the caller does not supply a value"
    )
    max_retries_cap: int = Field(
        default=10,
        ge=0,
        le=10,
        description="Upper bound applied to caller supplied retries"
    )
    delay_ms: int = Field(
        default=300,
        ge=0,
        le=5000,
        description="Delay before the first retry in milliseconds"
    )
    backoff_factor: float = Field(
        default=1.5,
        ge=1.0,
        le=5.0,
        description="Multiplier applied to the delay after each retry"
    )
    max_delay_ms: int = Field(
        default=1000,
        ge=0,
        le=10000,
        description="Upper bound for a single inter-retry delay"
    )
    check_deadline_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        le=600,
        description="Overall budget for one check including all retries"
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> "RetrySettings":
        """Validate retry bound relationships."""
        if self.default_max_retries > self.max_retries_cap:
            raise ValueError("default_max_retries cannot exceed max_retries_cap")
        if self.delay_ms > self.max_delay_ms:
            raise ValueError("delay_ms cannot be greater than max_delay_ms")
        return self

    def clamp(self, max_retries: Optional[int]) -> int:
        """Apply the default and clamp to the allowed range."""
        if max_retries is None:
            return self.default_max_retries
        return max(0, min(max_retries, self.max_retries_cap))


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings

    Console and rotating file sinks for loguru.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum logging level"
    )
    format: str = Field(
        default="text",
        description="File log format: text or json"
    )
    to_console: bool = Field(
        default=True,
        description="Enable console logging"
    )
    colorize: bool = Field(
        default=True,
        description="Enable colored console output"
    )
    to_file: bool = Field(
        default=False,
        description="Enable file logging"
    )
    directory: Path = Field(
        default=Path("logs"),
        description="Directory for log files"
    )
    file_name: str = Field(
        default="uptime.log",
        description="Main log file name"
    )
    file_max_size: str = Field(
        default="10 MB",
        description="Rotate the log file after this size"
    )
    file_retention: str = Field(
        default="7 days",
        description="How long rotated files are kept"
    )

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Only text and json are supported."""
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError("format must be 'text' or 'json'")
        return v


class ServerSettings(BaseSettingsConfig):
    """
    HTTP Server Configuration Settings
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        extra="ignore"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface the check endpoint binds to"
    )
    port: int = Field(
        default=4000,
        ge=1,
        le=65535,
        description="Port the check endpoint listens on"
    )
    persist_results: bool = Field(
        default=True,
        description="Write completed checks to the uptime_checks table"
    )


class Settings(BaseSettingsConfig):
    """
    Application Settings

    Composes every settings group. Each group reads its own
    environment prefix.
    """

    app_name: str = Field(
        default="Uptime Probe",
        description="Application display name"
    )
    version: str = Field(
        default="1.0.0",
        description="Application version string"
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug behaviour"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @model_validator(mode="after")
    def configure_for_environment(self) -> "Settings":
        """Apply environment-specific configuration."""
        if self.is_production:
            self.debug = False
            self.database.echo = False

        elif self.is_development and self.debug:
            if self.logging.level == LogLevel.INFO:
                self.logging.level = LogLevel.DEBUG

        return self

    def to_dict(self, *, exclude_secrets: bool = True) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump()

        if exclude_secrets:
            def remove_secrets(obj: Any) -> Any:
                if isinstance(obj, dict):
                    return {
                        k: remove_secrets(v)
                        for k, v in obj.items()
                        if "password" not in k.lower()
                        and "secret" not in k.lower()
                    }
                elif isinstance(obj, list):
                    return [remove_secrets(item) for item in obj]
                return obj

            data = remove_secrets(data)

        return data


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
