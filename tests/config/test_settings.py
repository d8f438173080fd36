"""
Tests for environment settings
"""

import pytest
from pydantic import ValidationError

from easyhome.config.models import Settings
from easyhome.core.db import DEFAULT_DATABASE_URL


class TestSettings:
    """Test Settings model"""

    def test_defaults(self, monkeypatch):
        """Test defaults without environment variables"""
        monkeypatch.delenv("EASYHOME_DATABASE_URL", raising=False)
        monkeypatch.delenv("EASYHOME_LOG_LEVEL", raising=False)

        settings = Settings.from_env()

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.log_level == "WARNING"

    def test_from_env(self, monkeypatch):
        """Test reading environment variables"""
        monkeypatch.setenv("EASYHOME_DATABASE_URL", "sqlite:///other.db")
        monkeypatch.setenv("EASYHOME_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///other.db"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Unknown log levels are rejected"""
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")
