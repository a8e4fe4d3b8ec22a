"""Unit tests for telemetry_engine.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from telemetry_engine.config import TelemetrySettings, load_settings

# ---------------------------------------------------------------------------
# TelemetrySettings - default values
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    def test_telemetry_disabled_by_default(self):
        settings = TelemetrySettings(_env_file=None)
        assert settings.enabled is False

    def test_default_refresh_interval(self):
        settings = TelemetrySettings(_env_file=None)
        assert settings.refresh_interval_seconds == 5.0

    def test_default_paths_none(self):
        settings = TelemetrySettings(_env_file=None)
        assert settings.consent_file is None
        assert settings.stats_file is None
        assert settings.events_file is None
        assert settings.endpoint_url is None

    def test_default_namespace(self):
        settings = TelemetrySettings(_env_file=None)
        assert settings.namespace == "telemetry_engine.TelemetryScheduler"


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


class TestSettingsFromEnv:
    def test_enabled_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TELEMETRY_ENABLED", "true")
        assert TelemetrySettings(_env_file=None).enabled is True

    def test_paths_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("TELEMETRY_CONSENT_FILE", str(tmp_path / "consent.json"))
        settings = TelemetrySettings(_env_file=None)
        assert settings.consent_file == tmp_path / "consent.json"

    def test_interval_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TELEMETRY_REFRESH_INTERVAL_SECONDS", "2.5")
        assert TelemetrySettings(_env_file=None).refresh_interval_seconds == 2.5


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestSettingsValidation:
    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_non_positive_interval_rejected(self, interval: float):
        with pytest.raises(ValidationError):
            TelemetrySettings(refresh_interval_seconds=interval, _env_file=None)

    @pytest.mark.parametrize(
        "url",
        ["https://collector.example.com/events", "http://localhost:8080/events"],
    )
    def test_http_endpoints_accepted(self, url: str):
        assert TelemetrySettings(endpoint_url=url, _env_file=None).endpoint_url == url

    @pytest.mark.parametrize("url", ["ftp://collector.example.com", "collector.example.com", "https://"])
    def test_bad_endpoints_rejected(self, url: str):
        with pytest.raises(ValidationError):
            TelemetrySettings(endpoint_url=url, _env_file=None)


class TestLoadSettings:
    def test_overrides(self):
        settings = load_settings(enabled=True, debug=True, _env_file=None)
        assert settings.enabled is True
        assert settings.debug is True
