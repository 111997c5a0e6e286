"""Tests for revertfuzz.core.config: settings loading and validation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from revertfuzz.core.config import Settings, get_settings


class TestSettings:
    """Verify settings defaults and environment overrides."""

    def test_default_app_env(self):
        s = Settings()
        assert s.app_env == "development"
        assert s.app_name == "revertfuzz"

    def test_selection_defaults(self):
        s = Settings()
        assert s.selection_domain_separator == 0xFF
        assert s.selection_draw_bits == 256

    def test_strict_scope_coverage_default(self):
        assert Settings().strict_scope_coverage is True

    def test_declared_fields(self):
        assert set(Settings.model_fields) == {
            "app_name",
            "app_env",
            "log_level",
            "selection_domain_separator",
            "selection_draw_bits",
            "strict_scope_coverage",
        }

    @patch.dict(
        os.environ,
        {"REVERTFUZZ_APP_ENV": "production", "REVERTFUZZ_SELECTION_DOMAIN_SEPARATOR": "171"},
    )
    def test_env_override(self):
        """Environment variables with REVERTFUZZ_ prefix override defaults."""
        s = Settings()
        assert s.app_env == "production"
        assert s.selection_domain_separator == 0xAB

    def test_draw_bits_bounded(self):
        with pytest.raises(ValidationError):
            Settings(selection_draw_bits=512)

    def test_unknown_env_rejected(self):
        with pytest.raises(ValidationError):
            Settings(app_env="qa")

    def test_get_settings_returns_same_instance(self):
        """get_settings is cached, same object each call."""
        get_settings.cache_clear()
        s1 = get_settings()
        s2 = get_settings()
        assert s1 is s2
