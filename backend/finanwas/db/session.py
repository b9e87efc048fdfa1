"""Engine & Session Helpers — engine creation shared by the API, CLI and tests.

Invariants:
    - SQLite connections run with PRAGMA foreign_keys=ON, so ON DELETE CASCADE
      behaves as on PostgreSQL
    - Sessions never expire attributes on commit
    - create_session_factory() callers own the engine (dispose via factory.kw["bind"])
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> AsyncEngine:
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    return enable_sqlite_foreign_keys(create_async_engine(database_url, **kwargs))


def session_factory_for(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Standalone engine + factory for code running outside FastAPI."""
    return session_factory_for(build_engine(database_url))
