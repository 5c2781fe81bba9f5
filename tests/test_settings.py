"""
==============================================================================
Settings Tests
==============================================================================

Tests for environment-driven service settings.

==============================================================================
"""

import logging

import pytest
from pydantic import ValidationError

from scanfuse.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings loading and validation."""

    def test_defaults(self, monkeypatch):
        """Scanner budgets default to the documented values."""
        monkeypatch.delenv("DEFAULT_PRESET", raising=False)
        settings = Settings(_env_file=None)
        assert settings.default_preset == "shipping-label"
        assert settings.matrix_timeout_ms == 2000
        assert settings.matrix_region_cap == 10
        assert settings.decode_workers == 1

    def test_environment_override(self, monkeypatch):
        """Environment variables are case-insensitive overrides."""
        monkeypatch.setenv("DEFAULT_PRESET", "Low_Resolution")
        monkeypatch.setenv("decode_workers", "4")
        settings = Settings(_env_file=None)
        assert settings.default_preset == "low-resolution"
        assert settings.decode_workers == 4

    def test_unknown_preset_rejected(self):
        """default_preset must name a known preset."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_preset="warehouse")

    def test_unknown_environment_defaults(self):
        """Unknown app_env values fall back to development."""
        assert Settings(_env_file=None, app_env="qa").app_env == "development"

    def test_log_level(self):
        """Debug forces DEBUG; otherwise the configured level applies."""
        assert Settings(_env_file=None, debug=True).effective_log_level == logging.DEBUG
        assert Settings(_env_file=None, log_level="warning").effective_log_level == logging.WARNING
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_cors_origins(self):
        """CORS origins parse from JSON, falling back to '*'."""
        assert Settings(_env_file=None, cors_origins='["http://a"]').cors_origins_list == ["http://a"]
        assert Settings(_env_file=None, cors_origins="not json").cors_origins_list == ["*"]

    def test_singleton(self):
        """get_settings returns one cached instance."""
        assert get_settings() is get_settings()
