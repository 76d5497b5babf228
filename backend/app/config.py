"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - quota_timezone names an IANA zone; the calendar day for quotas is computed there

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - quota_timezone defaults to UTC: the day boundary the first deployment used
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.domain_types import Locale
from app.core.quota import FREE_DAILY_LIMIT


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://revisio:revisio@db:5432/revisio"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres gives postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Generation provider (Anthropic)
    anthropic_api_key: str = "sk-ant-placeholder"
    provider_model: str = "claude-sonnet-4-5"
    provider_max_tokens: int = 8000
    provider_timeout_seconds: int = 60
    provider_max_retries: int = 1
    provider_base_delay_ms: int = 500
    provider_max_delay_ms: int = 4000

    # Authentication (HS256 access tokens from the identity provider)
    auth_jwt_secret: str = "dev-secret-change-me"
    auth_jwt_audience: str | None = "authenticated"
    auth_jwt_algorithms: list[str] = ["HS256"]

    # Quota
    free_daily_limit: int = FREE_DAILY_LIMIT
    quota_timezone: str = "UTC"

    @field_validator("quota_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError:
            raise ValueError(f"unknown time zone: {v}")
        return v

    # User-facing language (prompts + error messages)
    locale: Locale = Locale.FR

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def quota_tz(self) -> ZoneInfo:
        return ZoneInfo(self.quota_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
