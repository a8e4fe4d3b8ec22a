"""Telemetry engine configuration loaded from environment variables."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TelemetrySettings(BaseSettings):
    """Telemetry settings loaded from environment variables with TELEMETRY_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Global opt-in flag.  Newly discovered consent keys inherit its value.
    enabled: bool = False
    debug: bool = False
    structured_logging: bool = False

    namespace: str = "telemetry_engine.TelemetryScheduler"
    refresh_interval_seconds: float = Field(default=5.0, gt=0.0)

    # Persistence
    consent_file: Path | None = None
    stats_file: Path | None = None

    # Sinks
    events_file: Path | None = None
    endpoint_url: str | None = None
    endpoint_timeout: float = Field(default=5.0, gt=0.0)
    max_queue_size: int = Field(default=1000, ge=1)

    @field_validator("endpoint_url")
    @classmethod
    def check_endpoint_scheme(cls, v: str | None) -> str | None:
        if v is None:
            return None
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"Telemetry endpoint must use http or https (got scheme '{parsed.scheme}'): {v}")
        if not parsed.hostname:
            raise ValueError(f"Could not extract hostname from telemetry endpoint URL: {v}")
        return v


def load_settings(**overrides: object) -> TelemetrySettings:
    """Load settings from environment, with optional overrides for testing."""
    settings = TelemetrySettings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded telemetry settings (enabled=%s)", settings.enabled)

    return settings
