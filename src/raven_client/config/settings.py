"""
Module: settings.py
Description: Client configuration using pydantic-settings.

Configures the delivery client from RAVEN_* environment variables with
validation and defaults. Supports .env files for local development.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CLIENT_NAME = "raven-client"
CLIENT_VERSION = "0.2.0"
PROTOCOL_VERSION = 5
PLATFORM = "python"

TLS_POLICIES = ("strict", "lenient")


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RAVEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    dsn: str = Field(
        default="",
        description="Sentry DSN; empty disables the client"
    )
    drain_timeout: float = Field(
        default=2.0,
        ge=0,
        description="Default seconds wait_for_idle blocks before giving up"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout in seconds for each delivery attempt"
    )
    max_redirects: int = Field(
        default=5,
        ge=0,
        le=20,
        description="Redirects followed per event before it is failed"
    )
    connect_retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Extra attempts on connection-level errors"
    )
    retry_backoff: float = Field(
        default=0.5,
        ge=0,
        description="Exponential backoff multiplier in seconds between retries"
    )
    tls_policy: str = Field(
        default="lenient",
        description="Certificate error handling: strict or lenient"
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Transport worker threads"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('tls_policy')
    @classmethod
    def validate_tls_policy(cls, v: str) -> str:
        """Validate the certificate policy name."""
        value = v.strip().lower()
        if value not in TLS_POLICIES:
            raise ValueError(f"tls_policy must be one of: {', '.join(TLS_POLICIES)}")
        return value

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def ignore_certificate_errors(self) -> bool:
        return self.tls_policy == "lenient"
