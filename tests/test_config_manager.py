"""
Unit Tests for Config Manager
=============================
Unit tests for the ApplicationSettings configuration management system.

Test Coverage:
- Default configuration values
- Field validators
- Computed properties
"""

import pytest
from pydantic import ValidationError

from ngo_portal.core.config_manager import PLACEHOLDER_JWT_SECRETS, ApplicationSettings


class TestApplicationSettingsDefaults:
    """Test default configuration values not overridden by the test environment."""

    def test_default_settings(self):
        settings = ApplicationSettings(_env_file=None)

        assert settings.app_name == "NGO Portal"
        assert settings.jwt_algorithm == "HS256"
        assert settings.jwt_access_token_expire_minutes == 15
        assert settings.jwt_refresh_token_expire_days == 7
        assert settings.cookie_samesite == "lax"
        assert settings.login_rate_limit_attempts == 5
        assert settings.redis_port == 6379

    def test_placeholder_secrets_are_known(self):
        assert "changeme" in PLACEHOLDER_JWT_SECRETS
        assert "your-secret-key" in PLACEHOLDER_JWT_SECRETS


class TestApplicationSettingsValidators:
    """Test field validators."""

    def test_log_level_is_upper_cased(self):
        settings = ApplicationSettings(_env_file=None, log_level="debug")
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError, match="Log level must be one of"):
            ApplicationSettings(_env_file=None, log_level="LOUD")

    def test_cookie_samesite_normalized(self):
        settings = ApplicationSettings(_env_file=None, cookie_samesite="Strict")
        assert settings.cookie_samesite == "strict"

    def test_invalid_cookie_samesite_rejected(self):
        with pytest.raises(ValidationError):
            ApplicationSettings(_env_file=None, cookie_samesite="sometimes")

    @pytest.mark.parametrize("rounds", [4, 9, 17])
    def test_bcrypt_rounds_out_of_range(self, rounds):
        with pytest.raises(ValidationError, match="bcrypt_rounds"):
            ApplicationSettings(_env_file=None, bcrypt_rounds=rounds)

    def test_non_positive_lifetime_rejected(self):
        with pytest.raises(ValidationError, match="Token lifetimes must be positive"):
            ApplicationSettings(_env_file=None, jwt_access_token_expire_minutes=0)


class TestApplicationSettingsProperties:
    """Test computed properties."""

    def test_database_url_override_wins(self):
        settings = ApplicationSettings(
            _env_file=None, database_url="sqlite+aiosqlite:///portal.db"
        )
        assert settings.database_url_async == "sqlite+aiosqlite:///portal.db"

    def test_database_url_built_from_parts(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = ApplicationSettings(
            _env_file=None,
            database_user="u",
            database_password="p",
            database_host="db",
            database_port=5433,
            database_name="ngo",
        )
        assert settings.database_url_async == "postgresql+asyncpg://u:p@db:5433/ngo"

    def test_redis_url_with_password(self):
        settings = ApplicationSettings(
            _env_file=None, redis_password="pw", redis_host="cache", redis_db=2
        )
        assert settings.redis_url == "redis://:pw@cache:6379/2"

    def test_cookie_max_ages_follow_token_lifetimes(self):
        settings = ApplicationSettings(
            _env_file=None,
            jwt_access_token_expire_minutes=15,
            jwt_refresh_token_expire_days=7,
        )
        assert settings.access_token_max_age_seconds == 900
        assert settings.refresh_token_max_age_seconds == 7 * 24 * 3600
