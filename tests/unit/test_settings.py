"""Tests for configuration settings."""
import pytest
from pydantic import ValidationError

from src.config.settings import Settings, get_settings, reset_settings


class TestSettings:
    """Test Settings configuration."""

    def test_settings_without_token(self, monkeypatch):
        """Settings load without a fallback token."""
        monkeypatch.delenv("SLACK_NODES_TOKEN", raising=False)

        settings = Settings()

        assert settings.token is None
        # Note: env is set to 'test' in conftest.py
        assert settings.env in ("development", "test")
        assert settings.log_level == "INFO"

    def test_settings_with_token(self, monkeypatch):
        """The fallback token is read as a secret."""
        monkeypatch.setenv("SLACK_NODES_TOKEN", "xoxb-secret")

        settings = Settings()

        assert settings.token is not None
        assert settings.token.get_secret_value() == "xoxb-secret"
        assert "xoxb-secret" not in repr(settings)

    def test_settings_default_values(self, monkeypatch):
        """Test default values are set correctly."""
        monkeypatch.delenv("SLACK_NODES_TOKEN", raising=False)

        settings = Settings()

        assert settings.log_json is True
        assert settings.slack_base_url == "https://slack.com/api/"
        assert settings.slack_timeout_s == 30
        assert settings.default_page_limit is None
        assert settings.directory_cache_ttl_s == 0

    def test_settings_env_prefix(self, monkeypatch):
        """SLACK_NODES_ prefixed variables override defaults."""
        monkeypatch.setenv("SLACK_NODES_ENV", "production")
        monkeypatch.setenv("SLACK_NODES_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SLACK_NODES_DEFAULT_PAGE_LIMIT", "200")
        monkeypatch.setenv("SLACK_NODES_DIRECTORY_CACHE_TTL_S", "60")

        settings = Settings()

        assert settings.env == "production"
        assert settings.log_level == "DEBUG"
        assert settings.default_page_limit == 200
        assert settings.directory_cache_ttl_s == 60

    def test_timeout_validation(self, monkeypatch):
        """A non-positive client timeout is rejected."""
        monkeypatch.setenv("SLACK_NODES_SLACK_TIMEOUT_S", "0")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "slack_timeout_s must be positive" in str(exc_info.value)

    def test_page_limit_validation(self, monkeypatch):
        """A non-positive default page limit is rejected."""
        monkeypatch.setenv("SLACK_NODES_DEFAULT_PAGE_LIMIT", "-5")

        with pytest.raises(ValidationError):
            Settings()

    def test_cache_ttl_validation(self, monkeypatch):
        """A negative cache TTL is rejected."""
        monkeypatch.setenv("SLACK_NODES_DIRECTORY_CACHE_TTL_S", "-1")

        with pytest.raises(ValidationError):
            Settings()


class TestGetSettings:
    """Test the cached settings accessor."""

    def test_get_settings_is_cached(self):
        """Repeated calls return the same instance."""
        assert get_settings() is get_settings()

    def test_reset_settings_reloads_environment(self, monkeypatch):
        """reset_settings() picks up environment changes."""
        first = get_settings()
        monkeypatch.setenv("SLACK_NODES_LOG_LEVEL", "WARNING")

        assert get_settings().log_level == first.log_level

        reset_settings()

        assert get_settings().log_level == "WARNING"
