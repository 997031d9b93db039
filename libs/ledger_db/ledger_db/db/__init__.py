# Ledger database configuration
from datetime import datetime
from typing import Any

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase as _DeclarativeBase
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from common.core.config_service import ConfigService
from common.db.db_utils import DateTimeUTC, create_metadata

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def to_async_database_url(database_url: str) -> str:
    """Map plain driver URLs onto the async drivers (aiosqlite, asyncpg)."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def create_engine_for_url(database_url: str) -> AsyncEngine:
    async_database_url = to_async_database_url(database_url)
    if async_database_url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            async_database_url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS},
            echo=False,
        )

        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _sqla_on_connect(dbapi_connection: Any, _: Any) -> None:  # pyright: ignore[reportUnusedFunction]
            """Disable the driver's implicit BEGIN so the begin hook below is the only one."""
            dbapi_connection.isolation_level = None

        @event.listens_for(sqlite_engine.sync_engine, "begin")
        def _sqla_on_begin(connection: Any) -> None:  # pyright: ignore[reportUnusedFunction]
            # Take the write lock up front: concurrent writers queue on the busy timeout
            # instead of failing to upgrade a read lock with "database is locked"
            connection.exec_driver_sql("BEGIN IMMEDIATE")

        return sqlite_engine

    engine_kwargs: dict[str, Any] = {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_pre_ping": True,
    }
    return create_async_engine(async_database_url, **engine_kwargs)


config_service = ConfigService()
DATABASE_URL = config_service.get_database_url()

engine = create_engine_for_url(DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


class Base(_DeclarativeBase):
    __abstract__ = True

    metadata: MetaData = create_metadata()

    created_at: Mapped[datetime] = mapped_column(DateTimeUTC(), server_default=func.current_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        DateTimeUTC(),
        server_default=func.current_timestamp(),
        server_onupdate=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )
