# src/taxwatch/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Supports environment variables and a .env file with validation.

The enumerated pipeline configuration is:
    sources           - fixed in code (taxwatch.domain.fallback.SOURCES)
    refresh_interval  - REFRESH_INTERVAL_HOURS (default 6 hours)
    snapshot_path     - SNAPSHOT_PATH (default ./data/tax-data.json)
    fetch_timeout     - HTTP_TIMEOUT_SECONDS (default 10 seconds)

Files that USE this module:
- taxwatch.app (loads settings for server, scheduler and refresh configuration)

Files that this module USES:
- taxwatch.shared.validators (validation functions for settings)
- taxwatch.domain.fallback (configured sources)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from datetime import timedelta  # Refresh interval and fetch timeout as durations
from pathlib import Path  # Object-oriented filesystem paths
from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from taxwatch.domain.fallback import SOURCES  # Tax authorities fetched every cycle
from taxwatch.domain.models import Source
from taxwatch.shared.validators import (
    normalize_log_level,  # Map log level names to logging constants
    validate_host,  # Validate HTTP bind host
    validate_url,  # Validate source URLs
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Refresh pipeline ---
    snapshot_path: Path = Field(default=Path("./data/tax-data.json"), alias="SNAPSHOT_PATH")
    refresh_interval_hours: float = Field(default=6, alias="REFRESH_INTERVAL_HOURS", gt=0, le=168)

    # --- HTTP client settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)

    # --- HTTP server ---
    http_host: str = Field(default="127.0.0.1", alias="HTTP_HOST")
    http_port: int = Field(default=8000, alias="HTTP_PORT", ge=1, le=65535)
    static_dir: Path = Field(default=Path("./dist"), alias="STATIC_DIR")

    # --- Logging (for server deployment) ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def sources(self) -> tuple[Source, ...]:
        """Tax authorities fetched every cycle (fixed configuration)."""
        return SOURCES

    @property
    def refresh_interval(self) -> timedelta:
        return timedelta(hours=self.refresh_interval_hours)

    @property
    def fetch_timeout(self) -> timedelta:
        return timedelta(seconds=self.http_timeout_seconds)

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for setup_logging()."""
        return normalize_log_level(self.log_level)

    @property
    def update_frequency_label(self) -> str:
        """Human readable cadence stored in every snapshot ("6 hours")."""
        hours = self.refresh_interval_hours
        if float(hours).is_integer():
            hours = int(hours)
        return f"{hours} hour" if hours == 1 else f"{hours} hours"

    @field_validator("http_host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate bind host format."""
        if not validate_host(v):
            raise ValueError("Invalid HTTP_HOST")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        normalize_log_level(v)
        return v.strip().upper()

    def model_post_init(self, __context) -> None:
        """Post-initialization validation."""
        for source in self.sources:
            if not validate_url(source.url):
                raise ValueError(f"Invalid URL for source {source.id}: {source.url}")


# Global settings instance
settings = Settings()
