"""Service test fixtures — async DB, FastAPI test client, users and auth headers.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the health check sees the test engine
    - The shared rate limiter is cleared before every test

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - StaticPool: fixtures and requests share one connection, so rows committed
      by a fixture are visible to the request session
    - Auth via "Authorization: Bearer" built with create_token: no login round trip
"""

import pytest
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from finanwas.api.deps import rate_limiter
from finanwas.db.base import Base
from finanwas.db.session import build_engine, session_factory_for
from finanwas.infrastructure.database import get_db, DatabaseSessionManager
from finanwas.infrastructure.security import hash_password
from finanwas.models.invitation_code import InvitationCode
from finanwas.models.user import User
from finanwas.models.user_profile import UserProfile
import finanwas.infrastructure.database as db_module
from finanwas.main import app
from tests.services.helpers import auth_headers

TEST_PASSWORD = "Tango7Delta9"


@pytest.fixture
async def test_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return session_factory_for(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    rate_limiter.clear_all()
    yield
    rate_limiter.clear_all()


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client whose sessions come from a manager bound to the test engine."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user (with an empty profile) and return it."""
    async def _make(
        email: str = "ana@example.com", name: str = "Ana", role: str = "user",
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(
            email=email, name=name, role=role,
            password_hash=hash_password(password),
        )
        test_db.add(user)
        await test_db.flush()
        test_db.add(UserProfile(user_id=user.id))
        await test_db.commit()
        return user
    return _make


@pytest.fixture
async def user(make_user):
    return await make_user()


@pytest.fixture
async def admin_user(make_user):
    return await make_user(email="admin@example.com", name="Admin", role="admin")


@pytest.fixture
async def invitation_code(test_db):
    code = InvitationCode(code="WELCOME1")
    test_db.add(code)
    await test_db.commit()
    return code


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)
