"""Pytest fixtures and configuration."""

import os
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Set test environment variables before importing the package
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-at-least-32-characters-long")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from microblog.database import create_engine, init_db
from microblog.models.user import User
from microblog.services.users import create_user


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession]:
    """Fresh in-memory database and session for each test."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """A signed-up user."""
    return await create_user(
        db,
        name="Example User",
        email="user@example.com",
        password="foobar",
        password_confirmation="foobar",
    )


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    """A second signed-up user."""
    return await create_user(
        db,
        name="Other User",
        email="other@example.com",
        password="foobar",
        password_confirmation="foobar",
    )
