"""Environment-driven settings for RestaunaX.

One ``Settings`` instance is built at import time from the process
environment and an optional ``.env`` file (pydantic-settings). Field names
map to upper-case variables: ``auth_secret`` reads ``AUTH_SECRET``.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Local docker-compose password; refused when ENVIRONMENT=production
_INSECURE_DEFAULT_PASSWORD = "restaunax_dev_password"  # nosec B105

# HS256 key length floor in production (256 bits)
_MIN_AUTH_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Process-wide configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["development", "test", "production"] = "development"
    log_level: str = "INFO"

    # PostgreSQL connection, or a complete URL in DATABASE_URL_OVERRIDE
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "restaunax"
    database_user: str = "restaunax_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD
    database_url_override: str = ""

    # Browser origins allowed to send credentials
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Sessions
    auth_secret: SecretStr = SecretStr("")
    auth_issuer: str = "restaunax"
    auth_audience: str = "restaunax"
    session_token_ttl_days: int = 30
    auth_cookie_name: str = "restaunax.session-token"
    auth_cookie_secure: bool = True
    auth_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    bcrypt_rounds: int = 12

    # x-api-key value for trusted service callers; empty disables the path
    api_key: SecretStr = SecretStr("")

    # Verification email (Resend HTTP API)
    verification_token_ttl_hours: int = 24
    frontend_url: str = "http://localhost:3000"
    email_from: str = "noreply@restaunax.com"
    resend_api_key: SecretStr = SecretStr("")

    # slowapi limit strings, "count/period"
    rate_limit_enabled: bool = True
    rate_limit_auth: str = "5/15minute"
    rate_limit_register: str = "10/hour"
    rate_limit_resend: str = "3/15minute"

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the async engine."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def database_url_sync(self) -> str:
        """Same database with a synchronous driver, for Alembic."""
        for async_driver in ("+asyncpg", "+aiosqlite"):
            if async_driver in self.database_url:
                return self.database_url.replace(async_driver, "")
        return self.database_url

    @property
    def is_development(self) -> bool:
        """Whether development-only tooling (reset, seeding) may run."""
        return self.environment == "development"

    @model_validator(mode="after")
    def check_cookie_and_cors(self) -> "Settings":
        """Reject combinations browsers or credentialed CORS cannot honour."""
        if self.auth_cookie_samesite == "none" and not self.auth_cookie_secure:
            raise ValueError(
                "AUTH_COOKIE_SECURE must be true when AUTH_COOKIE_SAMESITE=none; "
                "browsers drop SameSite=None cookies without Secure."
            )
        if "*" in self.allowed_origins:
            raise ValueError(
                "ALLOWED_ORIGINS must list explicit origins; '*' cannot be "
                "combined with credentialed requests."
            )
        if self.session_token_ttl_days <= 0:
            raise ValueError(
                f"SESSION_TOKEN_TTL_DAYS must be positive, got {self.session_token_ttl_days}"
            )
        return self

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Refuse to start production with development defaults."""
        if self.environment != "production":
            return self

        if self.database_password == _INSECURE_DEFAULT_PASSWORD:
            raise ValueError(
                "Cannot use default database password in production; "
                "set DATABASE_PASSWORD."
            )
        if len(self.auth_secret.get_secret_value()) < _MIN_AUTH_SECRET_LENGTH:
            raise ValueError(
                f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                "characters in production."
            )
        return self


settings = Settings()
