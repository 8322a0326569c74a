"""Database configuration with async SQLAlchemy support."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from microblog.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine.

    On SQLite, foreign keys are enforced and transactions are begun
    explicitly so that SAVEPOINTs (``Session.begin_nested``) work with the
    aiosqlite driver.
    """
    new_engine = create_async_engine(database_url, echo=echo)

    if new_engine.dialect.name == "sqlite":

        @event.listens_for(new_engine.sync_engine, "connect")
        def _configure_connection(dbapi_connection, _connection_record) -> None:
            # Stop the driver from emitting its own BEGIN
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(new_engine.sync_engine, "begin")
        def _begin(conn) -> None:
            conn.exec_driver_sql("BEGIN")

    return new_engine


settings = get_settings()

# Create async engine
engine = create_engine(settings.database_url, echo=settings.debug)

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Provide an async database session for one unit of work.

    Commits when the caller finishes cleanly and rolls back on any exception.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they are registered with Base.metadata
    from microblog import models  # noqa: F401

    target = bind or engine
    logger.info("Creating tables on %s", target.url.render_as_string(hide_password=True))
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
