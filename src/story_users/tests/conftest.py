"""
Core pytest configuration shared by the whole suite.

Repository/service tests run against an in-memory SQLite database (aiosqlite) created fresh for
every test, so no MySQL server is needed. Domain-specific fixtures live in `test_fixtures/` and are
imported at the bottom of this module to make them globally available.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before they get a chance to initialize.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# Ensure 'src' on sys.path so `import story_users...` works without an install
SRC = Path(__file__).resolve().parents[2]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from story_users.config.settings import Settings
from story_users.core.logging.builder import setup_logging
from story_users.database.base import Base
from story_users import models  # noqa: F401  registers tables on Base.metadata

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# -------------------------------
# Logging
# -------------------------------
@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the application logging config once; text format keeps test output readable."""
    setup_logging(Settings(LOG_FORMAT="text", LOG_LEVEL="DEBUG", LOG_TO_STDOUT=True, _env_file=None))
    yield


# -------------------------------
# Database
# -------------------------------
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    # StaticPool: every session shares the single in-memory database connection
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
        await session.rollback()


# Repository / service fixtures
from story_users.tests.test_fixtures.repository_fixtures import (  # noqa: E402,F401
    create_user,
    created_user,
    id_generator,
    sample_user,
    user_repository,
    user_service,
)
