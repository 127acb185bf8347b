"""
Database session and engine configuration.

This file sets up the async database connection using SQLAlchemy.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from taskboard.core.config import settings
from taskboard.db.base import Base


def build_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign key enforcement."""
    engine = create_async_engine(database_url, echo=echo, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,  # Keeps data accessible after commit
    )


# Create the async database engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create a session factory
async_session_maker = build_session_maker(engine)

# Alias for dependencies
AsyncSessionLocal = async_session_maker


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create any missing tables (development and tests; production uses alembic)."""
    # Register every model on the metadata
    import taskboard.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    The session is rolled back if the request fails and always closed.
    Services commit their own units of work.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

