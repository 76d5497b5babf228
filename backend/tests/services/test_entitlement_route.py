"""Entitlement & health routes.

Invariants:
    - GET /entitlement reflects rollover and tier
    - Unlimited tiers report null limit / remaining
    - Liveness always 200; readiness 200 when the DB answers
"""

from datetime import datetime, timedelta, timezone

URL = "/api/v1/entitlement"


async def test_free_user_entitlement(client, scope, seed_profile, auth_headers):
    today = datetime.now(timezone.utc).date()
    await seed_profile(scope, count=1, day=today)

    response = await client.get(URL, headers=auth_headers())

    assert response.status_code == 200
    assert response.json() == {
        "tier": "free",
        "sheets_generated_today": 1,
        "daily_limit": 3,
        "remaining_today": 2,
    }


async def test_rollover_applied(client, scope, seed_profile, auth_headers):
    yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
    await seed_profile(scope, count=3, day=yesterday)

    body = (await client.get(URL, headers=auth_headers())).json()

    assert body["sheets_generated_today"] == 0
    assert body["remaining_today"] == 3


async def test_vip_is_unlimited(client, scope, seed_profile, auth_headers):
    await seed_profile(scope, tier="vip")
    body = (await client.get(URL, headers=auth_headers())).json()
    assert body["tier"] == "vip"
    assert body["daily_limit"] is None
    assert body["remaining_today"] is None


async def test_entitlement_requires_auth(client):
    assert (await client.get(URL)).status_code == 401


async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["service"] == "revisio-api"


async def test_readiness(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "healthy"
