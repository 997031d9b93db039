import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

from common.utils.utils import get_logger
from ledger_db.db import Base, engine

# Registers every table on Base.metadata
from ledger_db import models  # noqa: F401  # pyright: ignore[reportUnusedImport]

logger = get_logger()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create any missing ledger tables.

    Errors propagate: a service that cannot reach its ledger must not start.
    """
    target = bind or engine
    logger.info("Creating ledger tables with create_all()", operation="create_tables", dialect=target.dialect.name)
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ledger tables ready", operation="create_tables", status="success")


if __name__ == "__main__":
    asyncio.run(init_db())
