"""Tests for configuration settings."""

import pytest

from github_pr_count.config import (
    ClientConfig,
    PacingConfig,
    Settings,
    get_github_token,
    get_settings,
)


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self, no_token):
        """Test default values are correct."""
        # Create settings without env vars
        settings = Settings(
            _env_file=None,  # Don't load .env
        )

        assert settings.github_token == ""
        assert settings.github_api_url == "https://api.github.com"
        assert settings.log_level == "INFO"
        assert settings.client.retry_limit == 5
        assert settings.client.results_per_page == 100
        assert settings.pacing.min_request_interval_seconds == 0.0
        assert settings.pacing.max_concurrent_requests == 10
        assert settings.cache.enabled is True
        assert settings.logging.log_file is None

    def test_settings_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("GITHUB_TOKEN", "test_token_123")
        monkeypatch.setenv("GITHUB_API_URL", "https://github.example.com/api/v3")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.github_token == "test_token_123"
        assert settings.github_api_url == "https://github.example.com/api/v3"
        assert settings.log_level == "DEBUG"

    def test_github_api_key_alias(self, no_token, monkeypatch):
        """GITHUB_API_KEY is accepted as the token."""
        monkeypatch.setenv("GITHUB_API_KEY", "key_456")

        settings = Settings(_env_file=None)

        assert settings.github_token == "key_456"

    def test_nested_settings_from_env(self, monkeypatch):
        """Nested sections use a double underscore delimiter."""
        monkeypatch.setenv("CLIENT__RETRY_LIMIT", "2")
        monkeypatch.setenv("PACING__MAX_CONCURRENT_REQUESTS", "4")
        monkeypatch.setenv("PACING__MIN_REQUEST_INTERVAL_SECONDS", "0.25")
        monkeypatch.setenv("CACHE__ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.client.retry_limit == 2
        assert settings.pacing.max_concurrent_requests == 4
        assert settings.pacing.min_request_interval_seconds == 0.25
        assert settings.cache.enabled is False

    def test_settings_log_level_validation(self, monkeypatch):
        """Test that invalid log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_case_insensitive(self, monkeypatch):
        """Test that env var names are case-insensitive."""
        monkeypatch.setenv("github_token", "lower_token")
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        settings = Settings(_env_file=None)

        assert settings.github_token == "lower_token"


class TestSectionValidation:
    """Tests for nested configuration bounds."""

    def test_negative_retry_limit_rejected(self):
        with pytest.raises(ValueError):
            ClientConfig(retry_limit=-1)

    def test_page_size_capped_at_github_maximum(self):
        with pytest.raises(ValueError):
            ClientConfig(results_per_page=101)

    def test_zero_concurrency_rejected(self):
        with pytest.raises(ValueError):
            PacingConfig(max_concurrent_requests=0)

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            PacingConfig(min_request_interval_seconds=-0.1)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_settings(self):
        """Test that get_settings returns a Settings instance."""
        # Clear cache to ensure fresh settings
        get_settings.cache_clear()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_get_settings_cached(self):
        """Test that get_settings returns cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        # Should be the same object (cached)
        assert settings1 is settings2


class TestGetGithubToken:
    """Tests for get_github_token function."""

    def test_reads_current_environment(self, no_token, monkeypatch):
        """Token changes are seen even after settings were cached."""
        get_settings()
        assert get_github_token() == ""

        monkeypatch.setenv("GITHUB_TOKEN", "rotated")

        assert get_github_token() == "rotated"
        assert get_settings().github_token == ""
