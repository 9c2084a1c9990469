"""Async SQLAlchemy plumbing for the ``kv_store`` table.

One engine per process. Routers get a session through :func:`get_db`, which
commits when the request handler returns and rolls back when it raises.
"""


from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from covera.core.config import settings


class Base(DeclarativeBase):
    pass


def _enable_sqlite_wal(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """Create the engine for *url*; file-backed SQLite gets its folder and WAL mode."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_async_engine(url, pool_pre_ping=True)

    if parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    sqlite_engine = create_async_engine(url, connect_args={"check_same_thread": False})
    if parsed.database and parsed.database != ":memory:":
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_wal)
    return sqlite_engine


engine = build_engine(settings.database_url)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create ``kv_store`` if it does not exist yet."""
    import covera.domain  # noqa: F401  (registers KVEntry on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
