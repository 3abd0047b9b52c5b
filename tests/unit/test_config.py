"""
Unit tests for settings loading and validation.
"""

import pytest
from pydantic import ValidationError

from backend.src.config import Settings, clear_settings_cache, get_settings


class TestDefaults:
    """Test default values"""

    def test_omdb_urls(self):
        settings = Settings(_env_file=None)

        assert settings.omdb_data_url == "https://www.omdbapi.com"
        assert settings.omdb_poster_url == "https://img.omdbapi.com"

    def test_rate_limit_notation(self):
        settings = Settings(_env_file=None, rate_limit_requests=30, rate_limit_window=10)

        assert settings.rate_limit == "30/10 seconds"


class TestEnvironmentOverrides:
    """Test PMOVIES_ environment variables"""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PMOVIES_OMDB_API_KEY", "from-env")
        monkeypatch.setenv("PMOVIES_OMDB_SUB_HOST_POSTER", "posters")

        settings = Settings(_env_file=None)

        assert settings.omdb_api_key == "from-env"
        assert settings.omdb_poster_url == "https://posters.omdbapi.com"

    def test_get_settings_is_cached(self, monkeypatch):
        clear_settings_cache()
        first = get_settings()

        monkeypatch.setenv("PMOVIES_APP_NAME", "Changed")

        assert get_settings() is first

        clear_settings_cache()
        assert get_settings().app_name == "Changed"

        monkeypatch.delenv("PMOVIES_APP_NAME")
        clear_settings_cache()


class TestValidators:
    """Test field validators"""

    def test_log_level_is_upper_cased(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_environment_is_lower_cased(self):
        settings = Settings(_env_file=None, environment="Development")

        assert settings.environment == "development"

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")

    @pytest.mark.parametrize("field", ["omdb_host", "omdb_sub_host_data", "omdb_sub_host_poster"])
    def test_blank_hosts_are_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: "  "})

    def test_host_dots_are_stripped(self):
        assert Settings(_env_file=None, omdb_host=".omdbapi.com.").omdb_host == "omdbapi.com"

    def test_blank_api_key_means_no_key(self):
        assert Settings(_env_file=None, omdb_api_key=" ").omdb_api_key is None

    def test_empty_cors_origins_allow_all(self):
        assert Settings(_env_file=None, cors_origins=[]).cors_origins == ["*"]
