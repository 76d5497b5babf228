"""Entitlement Schemas — read-only quota view for the dashboard."""

from pydantic import BaseModel

from app.core.domain_types import Tier


class EntitlementResponse(BaseModel):
    """daily_limit and remaining_today are null for unlimited tiers."""
    tier: Tier
    sheets_generated_today: int
    daily_limit: int | None
    remaining_today: int | None
