"""Database Session Manager — error mapping, generic client messages, SQLite foreign keys."""

import uuid

import pytest
from sqlalchemy import select, text

from finanwas.core.errors import (
    DATABASE_UNAVAILABLE, ConflictError, DatabaseError, ResourceNotFoundError,
)
from finanwas.infrastructure.database import DatabaseSessionManager
from finanwas.models.invitation_code import InvitationCode
from finanwas.models.user_profile import UserProfile


@pytest.fixture
def manager(test_engine, test_session_factory):
    mgr = DatabaseSessionManager.__new__(DatabaseSessionManager)
    mgr.engine = test_engine
    mgr._session_factory = test_session_factory
    return mgr


async def test_unique_violation_becomes_conflict(manager):
    with pytest.raises(ConflictError) as exc:
        async with manager.session() as db:
            db.add(InvitationCode(code="DUPLICAT"))
            db.add(InvitationCode(code="DUPLICAT"))
            await db.commit()

    assert exc.value.http_status == 409


async def test_domain_errors_pass_through_and_roll_back(manager):
    with pytest.raises(ResourceNotFoundError):
        async with manager.session() as db:
            db.add(InvitationCode(code="ROLLBACK"))
            await db.flush()
            raise ResourceNotFoundError("note", "x")

    async with manager.session() as db:
        rows = (await db.execute(select(InvitationCode))).scalars().all()
    assert rows == []


async def test_foreign_keys_are_enforced_on_sqlite(manager):
    async with manager.session() as db:
        assert (await db.execute(text("PRAGMA foreign_keys"))).scalar_one() == 1

    with pytest.raises(ConflictError):
        async with manager.session() as db:
            db.add(UserProfile(user_id=uuid.uuid4()))
            await db.commit()


async def test_health_check(manager):
    assert await manager.health_check() is True


async def test_operational_error_keeps_detail_server_side(manager):
    with pytest.raises(DatabaseError) as exc:
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM missing_table"))

    assert exc.value.http_status == 503
    assert exc.value.message == DATABASE_UNAVAILABLE
    assert "missing_table" in exc.value.detail


async def test_database_failure_response_is_generic(client, user_headers, test_engine):
    async with test_engine.begin() as conn:
        await conn.execute(text("DROP TABLE notes"))

    res = await client.get("/api/v1/notes", headers=user_headers)

    assert res.status_code == 503
    error = res.json()["error"]
    assert error["code"] == "DATABASE_ERROR"
    assert error["message"] == DATABASE_UNAVAILABLE
    assert "notes" not in error["message"]
