"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the identity provider's subject string — never a bare str in domain logic
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare against DB string columns without converters
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class Tier(str, Enum):
    """Subscription tier — maps to profiles.subscription_status."""
    FREE = "free"
    PREMIUM = "premium"
    VIP = "vip"

    @property
    def is_unlimited(self) -> bool:
        return self is not Tier.FREE


class GenType(str, Enum):
    """Generation request kind — decides how many sheets are asked for."""
    SINGLE = "single"
    PACK = "pack"
    CHAPTER = "chapter"

    @property
    def unit_count(self) -> int:
        return _UNIT_COUNTS[self]


_UNIT_COUNTS: dict[GenType, int] = {
    GenType.SINGLE: 1,
    GenType.PACK: 5,
    GenType.CHAPTER: 3,
}


class Locale(str, Enum):
    """User-facing language for prompts and error messages."""
    FR = "fr"
    EN = "en"


class GenerationState(str, Enum):
    """Per-request lifecycle, logged on every transition."""
    RECEIVED = "received"
    QUOTA_CHECKED = "quota_checked"
    PROVIDER_CALLED = "provider_called"
    DECOMPOSED = "decomposed"
    PERSISTED = "persisted"
    QUOTA_COMMITTED = "quota_committed"
    RESPONDED = "responded"
    FAILED = "failed"
