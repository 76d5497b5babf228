"""API Dependencies — FastAPI providers for the principal and the service objects.

Invariants:
    - get_current_user_id raises AuthenticationError (401) for any missing or bad credential
    - Services are built per request from cached settings and session_scope;
      only the provider client is a process-wide singleton (it owns a connection pool)

Design Decisions:
    - Plain Depends callables over a DI container: tests swap any of them through
      app.dependency_overrides
    - Authorization read as a raw header: the error is ours (UNAUTHENTICATED),
      not FastAPI's default 403
"""

from functools import lru_cache

from fastapi import Depends, Header

from app.config import Settings, get_settings
from app.core.domain_types import UserId
from app.core.repository_protocols import CompletionProvider
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.infrastructure.database import session_scope
from app.infrastructure.principal_resolver import (
    PrincipalResolver, extract_bearer_token,
)
from app.services.quota_engine import QuotaEngine
from app.services.redemption import RedemptionEngine
from app.services.sheet_generator import SheetGenerator


@lru_cache
def get_principal_resolver() -> PrincipalResolver:
    settings = get_settings()
    return PrincipalResolver(
        settings.auth_jwt_secret,
        settings.auth_jwt_algorithms,
        settings.auth_jwt_audience,
    )


async def get_current_user_id(
    authorization: str | None = Header(None),
    resolver: PrincipalResolver = Depends(get_principal_resolver),
) -> UserId:
    """Authenticated caller's user id."""
    return resolver.resolve(extract_bearer_token(authorization))


@lru_cache
def get_provider() -> CompletionProvider:
    """Lazy singleton — built on first generation, not at import."""
    settings = get_settings()
    return ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        model=settings.provider_model,
        max_tokens=settings.provider_max_tokens,
        max_retries=settings.provider_max_retries,
        base_delay_ms=settings.provider_base_delay_ms,
        max_delay_ms=settings.provider_max_delay_ms,
        timeout_seconds=settings.provider_timeout_seconds,
    )


def get_quota_engine(
    settings: Settings = Depends(get_settings),
) -> QuotaEngine:
    return QuotaEngine(
        session_scope, tz=settings.quota_tz, limit=settings.free_daily_limit,
    )


def get_redemption_engine() -> RedemptionEngine:
    return RedemptionEngine(session_scope)


def get_sheet_generator(
    provider: CompletionProvider = Depends(get_provider),
    quota: QuotaEngine = Depends(get_quota_engine),
    settings: Settings = Depends(get_settings),
) -> SheetGenerator:
    return SheetGenerator(provider, quota, session_scope, settings.locale)
