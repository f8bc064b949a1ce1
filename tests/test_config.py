"""Tests for settings and logging setup."""

import json
import logging

import pytest
import structlog
from pydantic import ValidationError
from py_voronoi.config import Settings, configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        for name in ("LOG_LEVEL", "LOG_FORMAT", "MIN_SITE_DISTANCE", "SANITIZE_INPUT",
                     "BOUNDS_PADDING", "PROXY_DEPTH_FACTOR", "WORK_BUDGET_MS"):
            monkeypatch.delenv(f"VORONOI_{name}", raising=False)

        settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.log_format == "plain"
        assert settings.min_site_distance == 1.0
        assert settings.sanitize_input is True
        assert settings.bounds_padding == 10.0
        assert settings.proxy_depth_factor == 2.0
        assert settings.work_budget_ms == 16

    def test_environment_override(self, monkeypatch):
        """Test that prefixed environment variables are picked up."""
        monkeypatch.setenv("VORONOI_MIN_SITE_DISTANCE", "2.5")
        monkeypatch.setenv("VORONOI_SANITIZE_INPUT", "false")

        settings = Settings()

        assert settings.min_site_distance == 2.5
        assert settings.sanitize_input is False

    @pytest.mark.parametrize("name,value", [
        ("VORONOI_LOG_FORMAT", "xml"),
        ("VORONOI_MIN_SITE_DISTANCE", "0"),
        ("VORONOI_PROXY_DEPTH_FACTOR", "-1"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        """Test that invalid settings are rejected."""
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings()


class TestLogging:
    """Test structlog configuration."""

    def test_json_output(self, caplog):
        """Test that JSON logging renders keyword context."""
        configure_logging("INFO", "json")
        caplog.set_level(logging.INFO)
        try:
            structlog.get_logger("py_voronoi.tests").info("Sites added", accepted=3)

            payload = json.loads(caplog.records[-1].getMessage())
            assert payload["event"] == "Sites added"
            assert payload["accepted"] == 3
            assert payload["level"] == "info"
        finally:
            configure_logging()

    def test_level_filtering(self, caplog):
        """Test that records below the configured level are dropped."""
        configure_logging("WARNING", "plain")
        caplog.set_level(logging.DEBUG)
        try:
            structlog.get_logger("py_voronoi.tests").info("hidden")
            assert not any("hidden" in record.getMessage() for record in caplog.records)
        finally:
            configure_logging()
