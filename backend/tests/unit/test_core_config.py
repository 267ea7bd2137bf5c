"""Tests for restaunax.core.config: defaults, derived database URLs and
the validators that run when Settings is built.
"""

import pytest
from pydantic import SecretStr, ValidationError

from restaunax.core.config import _INSECURE_DEFAULT_PASSWORD, Settings

_SECURE_DB_PASSWORD = "my-secure-production-password-123!"
_TEST_AUTH_SECRET = "a" * 64
_PRODUCTION = "production"


class TestDefaults:
    """Tests for default values."""

    def test_session_tokens_last_thirty_days(self):
        assert Settings().session_token_ttl_days == 30

    def test_verification_tokens_last_twenty_four_hours(self):
        assert Settings().verification_token_ttl_hours == 24

    def test_bcrypt_cost_is_twelve(self):
        assert Settings(_env_file=None).bcrypt_rounds == 12


class TestDatabaseUrls:
    """Tests for derived database URLs."""

    def test_async_url_uses_asyncpg(self):
        s = Settings(
            database_user="u",
            database_password="p",
            database_host="db",
            database_port=5433,
            database_name="orders",
            database_url_override="",
        )
        assert s.database_url == "postgresql+asyncpg://u:p@db:5433/orders"

    def test_sync_url_drops_driver(self):
        s = Settings(
            database_user="u",
            database_password="p",
            database_host="db",
            database_port=5433,
            database_name="orders",
            database_url_override="",
        )
        assert s.database_url_sync == "postgresql://u:p@db:5433/orders"

    def test_override_wins(self):
        s = Settings(database_url_override="sqlite+aiosqlite:///dev.db")
        assert s.database_url == "sqlite+aiosqlite:///dev.db"
        assert s.database_url_sync == "sqlite:///dev.db"


class TestIsDevelopment:
    """Tests for the development-only guard."""

    @pytest.mark.parametrize(
        ("environment", "expected"),
        [("development", True), ("test", False), ("production", False)],
    )
    def test_only_development_enables_dev_tooling(self, environment, expected):
        s = Settings(
            environment=environment,
            database_password=_SECURE_DB_PASSWORD,
            auth_secret=SecretStr(_TEST_AUTH_SECRET),
        )
        assert s.is_development is expected


_PRODUCTION_OK = {
    "environment": _PRODUCTION,
    "database_password": _SECURE_DB_PASSWORD,
    "auth_secret": SecretStr(_TEST_AUTH_SECRET),
}


class TestStartupValidation:
    """Settings refuse combinations that are unsafe or that browsers reject."""

    def test_development_tolerates_local_defaults(self):
        s = Settings(environment="development", auth_secret=SecretStr(""))
        assert s.database_password == _INSECURE_DEFAULT_PASSWORD

    def test_hardened_production_settings_load(self):
        assert Settings(**_PRODUCTION_OK).environment == _PRODUCTION

    @pytest.mark.parametrize(
        ("overrides", "fragment"),
        [
            (
                {"database_password": _INSECURE_DEFAULT_PASSWORD},
                "Cannot use default database password in production",
            ),
            (
                {"auth_secret": SecretStr("short")},
                "AUTH_SECRET must be at least 32",
            ),
        ],
        ids=["default-db-password", "short-auth-secret"],
    )
    def test_production_rejects(self, overrides, fragment):
        with pytest.raises(ValidationError, match=fragment):
            Settings(**{**_PRODUCTION_OK, **overrides})

    @pytest.mark.parametrize(
        ("kwargs", "fragment"),
        [
            ({"allowed_origins": ["*"]}, "ALLOWED_ORIGINS"),
            (
                {"auth_cookie_samesite": "none", "auth_cookie_secure": False},
                "AUTH_COOKIE_SECURE must be true",
            ),
            ({"session_token_ttl_days": 0}, "SESSION_TOKEN_TTL_DAYS"),
        ],
        ids=["wildcard-cors", "samesite-none-insecure", "zero-session-ttl"],
    )
    def test_any_environment_rejects(self, kwargs, fragment):
        with pytest.raises(ValidationError, match=fragment):
            Settings(**kwargs)
