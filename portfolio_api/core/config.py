"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    BaseSettings pulls required values from the environment, which static
    type checkers read as missing constructor arguments.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items.

    Examples:
        >>> parse_csv("a, b ,,c")
        ['a', 'b', 'c']
        >>> parse_csv(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    # Contact form
    contact_message_min_chars: int = Field(
        10,
        description="Minimum contact message length after trimming",
        ge=1,
    )
    contact_rate_limit_enabled: bool = Field(
        True,
        description="Enforce the per-origin contact submission limit",
    )
    contact_rate_limit_requests: int = Field(
        3,
        description="Submissions allowed per origin inside the rolling window",
        ge=1,
    )
    contact_rate_limit_window_seconds: int = Field(
        3600,
        description="Rolling window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    trust_forwarded_for: bool = Field(
        False,
        description="Use the first X-Forwarded-For hop as the origin identifier (enable only behind a proxy that overwrites it)",
    )

    # Uploads
    max_upload_size_mb: int = Field(
        5,
        description="Maximum image upload size in megabytes",
        ge=1,
    )
    allowed_upload_types: str = Field(
        "image/jpeg,image/png,image/webp",
        description="Comma-separated list of accepted image MIME types",
    )
    upload_folders: str = Field(
        "projects,profile,temp",
        description="Comma-separated list of folders uploads may target",
    )

    # CORS
    cors_allowed_origins: str | None = Field(
        None,
        description="Comma-separated origins allowed to call mutating routes",
    )

    # Auth gate
    auth_jwt_secret: str | None = Field(
        None,
        description="HS256 secret used to verify admin bearer tokens",
    )
    auth_jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    auth_issuer: str | None = Field(None, description="Expected token issuer (iss)")
    auth_audience: str | None = Field(None, description="Expected token audience (aud)")
    auth_admin_subjects: str | None = Field(
        None,
        description="Comma-separated allow-list of admin subjects or emails (empty allows any valid token)",
    )
    auth_token_ttl_seconds: int = Field(
        3600,
        description="Lifetime of tokens minted by issue_admin_token",
        ge=1,
    )

    # Document store
    store_backend: str = Field(
        "memory",
        description="Document store backend: memory or json_file",
    )
    store_path: str = Field(
        "data/store.json",
        description="Snapshot path for the json_file backend",
    )
    profile_seed_file: str | None = Field(
        None,
        description="JSON file used to seed the profile singleton at startup",
    )

    # Media storage
    media_root: str = Field(
        "media",
        description="Directory where uploaded images are written",
    )
    media_base_url: str = Field(
        "/media",
        description="Public URL prefix for uploaded images",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def allowed_origins(self) -> list[str]:
        return parse_csv(self.cors_allowed_origins)

    @property
    def admin_subjects(self) -> set[str]:
        return set(parse_csv(self.auth_admin_subjects))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting has an invalid value.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
