"""Service test fixtures — async DB, session scopes, seeded rows, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database (test_engine)
    - Concurrency tests get a fresh FILE-backed database (race_engine) whose
      transactions start with BEGIN IMMEDIATE, so concurrent writers really serialize
    - db_manager is swapped for a manager bound to the test engine: services
      reach the DB through session_scope(), never through the request
    - The provider is overridden at the get_provider dependency boundary

Design Decisions:
    - SQLite in-memory for route/service tests: fast, no external dependency
    - In-memory SQLite shares ONE connection across sessions, so transaction
      isolation is meaningless there; races run on a file database instead
    - Tokens minted with the secret set in the root conftest: the real
      PrincipalResolver runs in route tests
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_provider
from app.config import get_settings
from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager
from app.models.activation_code import ActivationCode
from app.models.profile import Profile
import app.infrastructure.database as db_module
from app.main import app

from tests.services.mock_anthropic import MockProvider


def _manager_for(engine, session_factory) -> DatabaseSessionManager:
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = engine
    manager._session_factory = session_factory
    return manager


async def _create_schema(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    await _create_schema(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def scope(test_engine, test_session_factory):
    """session_scope equivalent bound to the in-memory test DB."""
    return _manager_for(test_engine, test_session_factory).session


@pytest.fixture
async def race_engine(tmp_path):
    """File-backed SQLite with BEGIN IMMEDIATE: one writer at a time, for real."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}", echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    await _create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def race_scope(race_engine):
    factory = async_sessionmaker(
        race_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return _manager_for(race_engine, factory).session


@pytest.fixture
def seed_profile():
    """Insert a profile through any session scope."""

    async def _seed(
        scope, user_id="user-1", tier="free", count=0, day=None,
        pending=0, pending_day=None,
    ):
        async with scope() as db:
            db.add(Profile(
                user_id=user_id,
                subscription_status=tier,
                sheets_generated_today=count,
                last_generation_date=day,
                pending_generations=pending,
                pending_date=pending_day,
            ))
            await db.commit()

    return _seed


@pytest.fixture
def seed_code():
    """Insert an activation code through any session scope."""

    async def _seed(scope, key="VIP-TEST-0001", used=False, used_by=None):
        async with scope() as db:
            db.add(ActivationCode(
                key=key, used=used, used_by=used_by,
                used_at=datetime.now(timezone.utc) if used else None,
            ))
            await db.commit()

    return _seed


@pytest.fixture
def auth_headers():
    """Authorization header for a token signed with the test secret."""
    settings = get_settings()

    def _headers(user_id="user-1", expires_in=timedelta(hours=1), **claims):
        payload = {
            "sub": user_id,
            "aud": settings.auth_jwt_audience,
            "exp": datetime.now(timezone.utc) + expires_in,
            **claims,
        }
        token = jwt.encode(payload, settings.auth_jwt_secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def provider():
    """Configurable provider double; tests append outcomes."""
    return MockProvider()


@pytest.fixture
async def client(test_engine, test_session_factory, provider):
    """FastAPI test client bound to the test DB and the provider double."""
    app.dependency_overrides[get_provider] = lambda: provider

    # Services open their own sessions through db_manager
    original_manager = db_module.db_manager
    db_module.db_manager = _manager_for(test_engine, test_session_factory)

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
