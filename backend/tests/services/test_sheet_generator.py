"""Sheet Generator — orchestration of reserve → provider → decompose → persist → charge.

Invariants:
    - single: one sheet, counter +1
    - pack with no headings: exactly one sheet titled with the topic, charged 1
    - chapter with 3 sections: 3 sheets titled from headings, charged 3
    - Upstream / empty-result failures release the ticket and charge nothing
    - Partial persistence charges only the sheets stored
    - Zero sheets stored → PersistenceError, nothing charged
    - A failed quota commit still returns the persisted sheets
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.core.domain_types import GenType, Locale
from app.core.errors import (
    DatabaseError, EmptyResultError, PersistenceError, QuotaExceededError,
    UpstreamThrottledError, UpstreamUnavailableError,
)
from app.models.profile import Profile
from app.models.sheet import Sheet
from app.services.quota_engine import QuotaEngine
from app.services.sheet_generator import GenerationRequest, SheetGenerator

from tests.services.mock_anthropic import MockProvider, sheet_markdown

NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def _generator(scope, provider, quota_scope=None) -> SheetGenerator:
    quota = QuotaEngine(quota_scope or scope, clock=lambda: NOW)
    return SheetGenerator(provider, quota, scope, Locale.FR)


def _request(gen_type=GenType.SINGLE, topic="La photosynthèse"):
    return GenerationRequest(
        subject="SVT", level="Seconde", topic=topic, gen_type=gen_type,
    )


async def _profile(scope) -> Profile:
    async with scope() as db:
        return await db.get(Profile, "user-1")


async def _sheet_count(scope) -> int:
    async with scope() as db:
        return (await db.execute(select(func.count(Sheet.id)))).scalar_one()


# --- Happy paths --------------------------------------------------------------


async def test_single_sheet_charged_once(scope, seed_profile):
    await seed_profile(scope, count=2, day=TODAY)
    provider = MockProvider(["# La photosynthèse\n\nContenu de la fiche."])

    sheets = await _generator(scope, provider).generate("user-1", _request())

    assert len(sheets) == 1
    assert sheets[0]["title"] == "La photosynthèse"
    assert sheets[0]["user_id"] == "user-1"
    profile = await _profile(scope)
    assert profile.sheets_generated_today == 3
    assert profile.pending_generations == 0


async def test_prompts_sent_to_provider(scope, seed_profile):
    await seed_profile(scope)
    provider = MockProvider(["contenu"])

    await _generator(scope, provider).generate("user-1", _request(GenType.PACK))

    call = provider.calls[0]
    assert "Français uniquement" in call["system"]
    assert "Génère 5 fiche(s)" in call["prompt"]
    assert call["context"].user_id == "user-1"
    assert call["context"].gen_type == "pack"


async def test_pack_without_headings_falls_back_to_one_sheet(scope, seed_profile):
    await seed_profile(scope)
    provider = MockProvider(["Un long texte sans aucun titre de fiche. " * 5])

    sheets = await _generator(scope, provider).generate(
        "user-1", _request(GenType.PACK, topic="Les fractions"),
    )

    assert [s["title"] for s in sheets] == ["Les fractions"]
    assert (await _profile(scope)).sheets_generated_today == 1


async def test_chapter_produces_three_titled_sheets(scope, seed_profile):
    await seed_profile(scope, tier="vip")
    provider = MockProvider([
        sheet_markdown("Définitions", "Mécanismes", "Applications"),
    ])

    sheets = await _generator(scope, provider).generate(
        "user-1", _request(GenType.CHAPTER),
    )

    assert [s["title"] for s in sheets] == [
        "Fiche 1 — Définitions",
        "Fiche 2 — Mécanismes",
        "Fiche 3 — Applications",
    ]
    assert await _sheet_count(scope) == 3
    assert (await _profile(scope)).sheets_generated_today == 3


# --- Failures before persistence ----------------------------------------------


@pytest.mark.parametrize("failure", [
    UpstreamThrottledError("rate limit", retry_after_ms=1000),
    UpstreamUnavailableError("timeout", "timeout"),
])
async def test_upstream_failure_releases_ticket(scope, seed_profile, failure):
    await seed_profile(scope, count=2, day=TODAY)
    provider = MockProvider([failure])

    with pytest.raises(type(failure)):
        await _generator(scope, provider).generate("user-1", _request())

    profile = await _profile(scope)
    assert profile.pending_generations == 0
    assert profile.sheets_generated_today == 2
    assert await _sheet_count(scope) == 0


async def test_empty_result_releases_ticket(scope, seed_profile):
    await seed_profile(scope, count=1, day=TODAY)
    provider = MockProvider(["   \n  "])

    with pytest.raises(EmptyResultError):
        await _generator(scope, provider).generate("user-1", _request())

    profile = await _profile(scope)
    assert profile.pending_generations == 0
    assert profile.sheets_generated_today == 1


async def test_quota_denied_never_calls_provider(scope, seed_profile):
    await seed_profile(scope, count=3, day=TODAY)
    provider = MockProvider()

    with pytest.raises(QuotaExceededError):
        await _generator(scope, provider).generate("user-1", _request())
    assert provider.calls == []


# --- Persistence --------------------------------------------------------------


def _failing_inserts(scope, fail_on: set[int]):
    """Session scope whose N-th session (1-based) raises on exit."""
    opened = {"n": 0}

    @asynccontextmanager
    async def _scope():
        opened["n"] += 1
        n = opened["n"]
        async with scope() as db:
            if n in fail_on:
                raise DatabaseError("disk full", "commit")
            yield db

    return _scope


async def test_partial_persistence_charges_stored_sheets(scope, seed_profile):
    await seed_profile(scope)
    provider = MockProvider([sheet_markdown("A", "B", "C")])
    generator = _generator(
        _failing_inserts(scope, fail_on={2}), provider, quota_scope=scope,
    )

    sheets = await generator.generate("user-1", _request(GenType.CHAPTER))

    assert [s["title"] for s in sheets] == ["Fiche 1 — A", "Fiche 3 — C"]
    assert await _sheet_count(scope) == 2
    assert (await _profile(scope)).sheets_generated_today == 2


async def test_zero_persisted_is_persistence_error(scope, seed_profile):
    await seed_profile(scope, count=1, day=TODAY)
    provider = MockProvider([sheet_markdown("A", "B", "C")])
    generator = _generator(
        _failing_inserts(scope, fail_on={1, 2, 3}), provider, quota_scope=scope,
    )

    with pytest.raises(PersistenceError):
        await generator.generate("user-1", _request(GenType.CHAPTER))

    profile = await _profile(scope)
    assert profile.sheets_generated_today == 1
    assert profile.pending_generations == 0


async def test_failed_commit_still_returns_sheets(scope, seed_profile, monkeypatch):
    await seed_profile(scope)
    provider = MockProvider(["contenu de fiche"])
    generator = _generator(scope, provider)

    async def _broken_commit(reservation, units):
        raise DatabaseError("connection lost", "execute")

    monkeypatch.setattr(generator.quota, "commit", _broken_commit)

    sheets = await generator.generate("user-1", _request())

    assert len(sheets) == 1
    assert await _sheet_count(scope) == 1
