"""Settings — environment-driven configuration."""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.core.domain_types import Locale


def test_hosted_postgres_url_gets_asyncpg_driver():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_defaults():
    settings = Settings()
    assert settings.free_daily_limit == 3
    assert settings.quota_timezone == "UTC"
    assert settings.provider_timeout_seconds == 60
    assert settings.locale is Locale.FR


def test_quota_timezone_resolves():
    settings = Settings(quota_timezone="Europe/Paris")
    assert settings.quota_tz == ZoneInfo("Europe/Paris")


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        Settings(quota_timezone="Mars/Olympus_Mons")
