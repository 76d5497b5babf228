"""Quota Rules — calendar-day rollover and free-tier admission, as pure functions.

Invariants:
    - A stored counter only counts on the day it was stamped; any other day it is 0
    - Pending reservation tickets follow the same rollover rule as the counter
    - Non-free tiers are always admitted and never take a ticket
    - Free tier admitted only while effective_count + open_tickets < limit
    - FREE_DAILY_LIMIT (3) is the default; Settings.free_daily_limit overrides it

Design Decisions:
    - The day boundary is a parameter (tz), not a global: tests pin any zone
    - Same predicate re-checked in SQL by the shell (services/entitlement_store.py)
      so the pure decision and the atomic guard cannot drift apart
"""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from app.core.domain_types import Tier


FREE_DAILY_LIMIT: int = 3


def local_today(now: datetime, tz: tzinfo) -> date:
    """Calendar day of an aware instant in the reference time zone."""
    return now.astimezone(tz).date()


def effective_usage(
    stored_count: int, stored_date: date | None, today: date,
) -> int:
    """Rollover: a count stamped on another day is worth 0 today."""
    if stored_date is None or stored_date != today:
        return 0
    return max(stored_count, 0)


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a pre-generation quota check."""
    allowed: bool
    effective_count: int
    needs_ticket: bool


def evaluate_quota(
    tier: Tier, effective_count: int, open_tickets: int,
    limit: int = FREE_DAILY_LIMIT,
) -> QuotaDecision:
    """Admission check. Pure — the shell applies the reservation."""
    if tier.is_unlimited:
        return QuotaDecision(
            allowed=True, effective_count=effective_count, needs_ticket=False,
        )
    allowed = effective_count + open_tickets < limit
    return QuotaDecision(
        allowed=allowed, effective_count=effective_count, needs_ticket=allowed,
    )


def remaining_today(
    tier: Tier, effective_count: int, limit: int = FREE_DAILY_LIMIT,
) -> int | None:
    """Sheets still allowed today; None means unlimited."""
    if tier.is_unlimited:
        return None
    return max(limit - effective_count, 0)
