"""
Tests for config module.
"""

import pytest
import yaml
from pydantic import ValidationError

from config import Settings, SystemConfig, get_settings, reload_settings


@pytest.fixture
def fresh_settings():
    """Clear the settings cache around a test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Test configuration loading"""

    def test_defaults(self, monkeypatch):
        """Test default values"""
        monkeypatch.delenv("FT_CONFIG_FILE", raising=False)
        settings = Settings()

        assert settings.session.max_sessions == 50
        assert settings.api.max_upload_size_mb == 50
        assert settings.palette.sample_size == 100
        assert settings.pdf.max_files == 50
        assert settings.system.log_level == "INFO"

    def test_env_override(self, monkeypatch):
        """Test sub-configurations read their own prefix"""
        monkeypatch.setenv("FT_SESSION_MAX_SESSIONS", "7")
        monkeypatch.setenv("FT_API_MAX_UPLOAD_SIZE_MB", "5")

        settings = Settings()

        assert settings.session.max_sessions == 7
        assert settings.api.max_upload_size_mb == 5

    def test_log_level_normalised(self):
        """Test log levels are upper-cased"""
        assert SystemConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected"""
        with pytest.raises(ValidationError):
            SystemConfig(log_level="verbose")

    def test_invalid_environment(self):
        """Test unknown environments are rejected"""
        with pytest.raises(ValidationError):
            Settings(environment="qa")

    def test_yaml_file(self, tmp_path):
        """Test values from a YAML config file"""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"environment": "test", "pdf": {"max_files": 3}}))

        settings = Settings(config_file=str(path))

        assert settings.environment == "test"
        assert settings.pdf.max_files == 3

    def test_missing_yaml_file(self, tmp_path):
        """Test a missing config file falls back to defaults"""
        settings = Settings(config_file=str(tmp_path / "missing.yaml"))

        assert settings.environment == "production"

    def test_save_to_file(self, tmp_path):
        """Test saved configuration can be read back"""
        path = tmp_path / "saved.yaml"

        Settings(environment="development").save_to_file(str(path))

        data = yaml.safe_load(path.read_text())
        assert data["environment"] == "development"
        assert data["session"]["max_sessions"] == 50

    def test_reload_settings(self, monkeypatch, fresh_settings):
        """Test reload picks up changed environment variables"""
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("FT_ENVIRONMENT", "test")
        reloaded = reload_settings()

        assert reloaded is not first
        assert reloaded.environment == "test"
