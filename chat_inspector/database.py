"""
Database connection and session management.

The inspector only reads from the chat store, so connections are opened
read-only unless tables are created on startup. Seeding scripts and tests
build their own writable engine with ``create_engine(..., read_only=False)``.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from chat_inspector.config import get_settings
from chat_inspector.logging_config import get_logger

settings = get_settings()
logger = get_logger(__name__)


def _sqlite_engine(database_url: str, read_only: bool, echo: bool) -> AsyncEngine:
    engine = create_async_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        if read_only:
            cursor.execute("PRAGMA query_only=ON")
        cursor.close()

    return engine


def _postgres_engine(database_url: str, read_only: bool, echo: bool) -> AsyncEngine:
    connect_args = {}
    if read_only and database_url.startswith("postgresql+asyncpg"):
        connect_args["server_settings"] = {"default_transaction_read_only": "on"}
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


def create_engine(
    database_url: str,
    *,
    read_only: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """
    Build an async engine for the chat store.

    Args:
        database_url: SQLAlchemy URL (sqlite+aiosqlite or postgresql+asyncpg)
        read_only: Reject writes at the connection level
        echo: Log SQL statements
    """
    if database_url.startswith("sqlite"):
        engine = _sqlite_engine(database_url, read_only, echo)
    else:
        engine = _postgres_engine(database_url, read_only, echo)
    logger.debug(
        "Database engine created",
        extra={"dialect": engine.dialect.name, "read_only": read_only},
    )
    return engine


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = create_engine(
    settings.database_url,
    read_only=not settings.create_tables_on_startup,
    echo=settings.debug,
)
async_session_maker = create_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create any missing tables (local development against an empty database)."""
    from chat_inspector.kernel.models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
