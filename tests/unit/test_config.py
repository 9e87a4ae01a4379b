"""
Unit tests for application settings.

Tests cover:
- Defaults
- Environment variable overrides with the POSTS_API_ prefix
- Validator normalization and rejection
"""

import pytest
from pydantic import ValidationError

from api.src.config import Settings, clear_settings_cache, get_settings


@pytest.fixture(autouse=True)
def reset_settings_cache():
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("POSTS_API_MONGODB_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.mongodb_url == "mongodb://localhost:27017"
        assert settings.users_collection == "users"
        assert settings.posts_collection == "posts"
        assert settings.pagination_default_limit == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("POSTS_API_MONGODB_DATABASE", "blog")
        monkeypatch.setenv("POSTS_API_PAGINATION_MAX_LIMIT", "50")

        settings = get_settings()

        assert settings.mongodb_database == "blog"
        assert settings.pagination_max_limit == 50
        assert settings.mongodb.database == "blog"

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="qa")

    def test_invalid_mongodb_url(self):
        settings = Settings(_env_file=None, mongodb_url="postgresql://localhost")
        with pytest.raises(ValidationError):
            settings.mongodb

    def test_settings_cached(self):
        assert get_settings() is get_settings()
