"""Maintenance CLI — invitation codes, admin accounts and snapshot retention."""

import asyncio
from datetime import date, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from finanwas import maintenance
from finanwas.config import get_settings
from finanwas.core.dates import utc_today
from finanwas.db.base import Base
from finanwas.models.portfolio_snapshot import PortfolioSnapshot
from finanwas.models.user import User
from finanwas.services.snapshots import SnapshotService


async def _create_schema(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


async def _users(url: str) -> list[tuple]:
    engine = create_async_engine(url)
    async with engine.connect() as conn:
        rows = (await conn.execute(select(User.email, User.role))).all()
    await engine.dispose()
    return rows


async def _seed_snapshots(url: str, ages_in_days: list[int]) -> None:
    engine = create_async_engine(url)
    async with async_sessionmaker(engine)() as db:
        user = User(email="viejo@example.com", name="Viejo", password_hash="x")
        db.add(user)
        await db.flush()
        for age in ages_in_days:
            db.add(PortfolioSnapshot(
                user_id=user.id, snapshot_date=utc_today() - timedelta(days=age),
            ))
        await db.commit()
    await engine.dispose()


async def _snapshot_count(url: str) -> int:
    engine = create_async_engine(url)
    async with engine.connect() as conn:
        rows = (await conn.execute(select(PortfolioSnapshot.id))).all()
    await engine.dispose()
    return len(rows)


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'maintenance.db'}"
    asyncio.run(_create_schema(url))
    settings = get_settings().model_copy(update={"database_url": url})
    monkeypatch.setattr(maintenance, "get_settings", lambda: settings)
    return url


def test_create_code_prints_code(database_url, capsys):
    assert maintenance.main(["create-code"]) == 0

    code = capsys.readouterr().out.strip()
    assert len(code) == 8


def test_create_admin(database_url, capsys):
    exit_code = maintenance.main([
        "create-admin", "--email", "root@example.com",
        "--name", " Root ", "--password", "Tango7Delta9",
    ])

    assert exit_code == 0
    assert "root@example.com" in capsys.readouterr().out
    assert asyncio.run(_users(database_url)) == [("root@example.com", "admin")]

    again = maintenance.main([
        "create-admin", "--email", "root@example.com",
        "--name", "Root", "--password", "Tango7Delta9",
    ])
    assert again == 1
    assert "already exists" in capsys.readouterr().err


def test_create_admin_rejects_weak_password(database_url, capsys):
    exit_code = maintenance.main([
        "create-admin", "--email", "root@example.com", "--name", "Root", "--password", "abc",
    ])

    assert exit_code == 1
    assert capsys.readouterr().err
    assert asyncio.run(_users(database_url)) == []


def test_cleanup_requires_positive_days(database_url, capsys):
    assert maintenance.main(["cleanup-snapshots", "--days", "0"]) == 1
    assert maintenance.main(["cleanup-snapshots", "--days", "30"]) == 0
    assert "Deleted 0 snapshots" in capsys.readouterr().out


def test_cleanup_deletes_snapshots_past_the_window(database_url, capsys):
    asyncio.run(_seed_snapshots(database_url, [5, 29, 31, 200]))

    assert maintenance.main(["cleanup-snapshots", "--days", "30"]) == 0

    assert "Deleted 2 snapshots" in capsys.readouterr().out
    assert asyncio.run(_snapshot_count(database_url)) == 2


async def test_retention_keeps_the_cutoff_day(make_user, test_db):
    user = await make_user()
    today = date(2026, 3, 1)
    for age in (10, 364, 365, 366, 400):
        test_db.add(PortfolioSnapshot(
            user_id=user.id, snapshot_date=today - timedelta(days=age),
        ))
    await test_db.commit()

    deleted = await SnapshotService(test_db).cleanup_old_snapshots(365, today=today)

    assert deleted == 2
    kept = (await test_db.execute(
        select(PortfolioSnapshot.snapshot_date).order_by(PortfolioSnapshot.snapshot_date),
    )).scalars().all()
    assert kept == [today - timedelta(days=age) for age in (365, 364, 10)]
