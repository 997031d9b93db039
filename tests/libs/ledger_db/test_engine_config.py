"""Tests for database URL handling."""

import pytest

from ledger_db.db import create_engine_for_url, to_async_database_url


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql://u:p@db:5432/ledger", "postgresql+asyncpg://u:p@db:5432/ledger"),
        ("postgres://u:p@db/ledger", "postgresql+asyncpg://u:p@db/ledger"),
        ("sqlite:///./ledger.db", "sqlite+aiosqlite:///./ledger.db"),
        ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
        ("postgresql+asyncpg://u@db/ledger", "postgresql+asyncpg://u@db/ledger"),
    ],
)
def test_to_async_database_url(url: str, expected: str) -> None:
    assert to_async_database_url(url) == expected


@pytest.mark.asyncio
async def test_sqlite_engine_uses_aiosqlite() -> None:
    engine = create_engine_for_url("sqlite:///:memory:")
    try:
        assert engine.dialect.name == "sqlite"
        assert engine.dialect.driver == "aiosqlite"
    finally:
        await engine.dispose()
