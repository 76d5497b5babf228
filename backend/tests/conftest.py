"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or a real database
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("LOCALE", "fr")
os.environ.setdefault("LOG_FORMAT", "text")
