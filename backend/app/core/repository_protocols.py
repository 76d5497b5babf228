"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Every mutation of a shared row (profile, activation code) is a single
      conditional statement reporting whether it matched
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: boundary methods are async because implementations do IO,
      core pure functions that USE their results are never async themselves
"""

from datetime import date
from typing import Protocol

from app.core.domain_types import Tier, UserId
from app.core.errors import ErrorContext


class ProfileLike(Protocol):
    """Structural contract for the entitlement row read by quota logic."""
    user_id: str
    subscription_status: str
    sheets_generated_today: int
    last_generation_date: date | None
    pending_generations: int
    pending_date: date | None


class EntitlementRepository(Protocol):
    """Profile row access — implemented by services/entitlement_store.py."""
    async def get_profile(self, user_id: UserId) -> ProfileLike | None: ...
    async def take_ticket(
        self, user_id: UserId, today: date, limit: int,
    ) -> bool: ...
    async def release_ticket(self, user_id: UserId, today: date) -> None: ...
    async def commit_usage(
        self, user_id: UserId, units: int, today: date, close_ticket: bool,
    ) -> bool: ...
    async def set_tier(self, user_id: UserId, tier: Tier) -> bool: ...


class ActivationCodeRepository(Protocol):
    """Activation code access — compare-and-swap claim only."""
    async def claim(self, code: str, user_id: UserId) -> bool: ...
    async def is_used(self, code: str) -> bool | None: ...


class SheetRepository(Protocol):
    """Sheet persistence — append-only from the core's perspective."""
    async def insert(
        self, user_id: UserId, subject: str, level: str,
        title: str, content: str,
    ) -> dict: ...


class CompletionProvider(Protocol):
    """Text-completion call — implemented by infrastructure/anthropic_client.py.

    Raises UpstreamThrottledError, UpstreamExhaustedError or
    UpstreamUnavailableError; returns "" when the response holds no text.
    """
    async def complete(
        self, *, system: str, prompt: str, context: ErrorContext | None = None,
    ) -> str: ...
