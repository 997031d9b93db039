"""Shared fixtures: test environment and an in-memory ledger database."""

import os

# Must run before anything imports ledger_db.db, which builds its engine at import time
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
for _name in ("MONEYMOTION_API_KEY", "MONEYMOTION_WEBHOOK_SECRET", "MONEYMOTION_API_URL", "WEBHOOK_SIGNATURE_HEADER"):
    os.environ.pop(_name, None)

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ledger_db.db.init_db import init_db  # noqa: E402


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    # StaticPool keeps one connection, so every session sees the same in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session
