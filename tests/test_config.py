"""Tests for Settings.from_env."""

import pytest

from pharmapulse.config import Settings
from pharmapulse.core.exceptions import ConfigurationError


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.host == "127.0.0.1"
        assert settings.port == 3000
        assert settings.cache_ttl_default == 1800
        assert settings.cache_check_period == 120
        assert settings.cache_max_entries == 10_000
        assert settings.cache_ttl_drugs == 3600
        assert settings.cache_ttl_news == 1800
        assert settings.news_api_key is None
        assert settings.http_timeout == 15

    def test_reads_environment(self):
        settings = Settings.from_env(
            {
                "PHARMAPULSE_HOST": "0.0.0.0",
                "PORT": "8080",
                "CACHE_TTL_DEFAULT": "60",
                "CACHE_MAX_ENTRIES": "50",
                "NEWS_API_KEY": "abc",
                "HTTP_TIMEOUT": "2.5",
            }
        )
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.cache_ttl_default == 60.0
        assert settings.cache_max_entries == 50
        assert settings.news_api_key == "abc"
        assert settings.http_timeout == 2.5

    def test_blank_values_use_defaults(self):
        settings = Settings.from_env({"PORT": "  ", "NEWS_API_KEY": ""})
        assert settings.port == 3000
        assert settings.news_api_key is None

    @pytest.mark.parametrize(
        "env",
        [{"PORT": "abc"}, {"PORT": "80.5"}, {"CACHE_TTL_DEFAULT": "0"}, {"CACHE_MAX_ENTRIES": "-1"}],
    )
    def test_invalid_numbers(self, env):
        with pytest.raises(ConfigurationError):
            Settings.from_env(env)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "4321")
        assert Settings.from_env().port == 4321

    def test_to_dict(self):
        d = Settings().to_dict()
        assert d["port"] == 3000
        assert "news_api_key" in d
