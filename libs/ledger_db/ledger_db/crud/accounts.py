from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_db.models.account import Account
from ledger_db.schemas.account import AccountResponse


class AccountDAO:
    """Data Access Object for account balances.
    Returns Pydantic objects instead of SQLAlchemy models.
    """

    async def get_by_username(self, db: AsyncSession, username: str) -> AccountResponse | None:
        result = await db.execute(select(Account).where(Account.username == username))
        account = result.scalar_one_or_none()
        return AccountResponse.model_validate(account) if account else None

    async def get_balance(self, db: AsyncSession, username: str) -> int:
        """Balance in minor units; unknown accounts hold zero."""
        result = await db.execute(select(Account.balance_minor).where(Account.username == username))
        balance = result.scalar_one_or_none()
        return int(balance or 0)

    async def ensure_exists(self, db: AsyncSession, username: str) -> None:
        """Create an empty account for ``username`` if none exists, inside the caller's transaction.

        A single ``INSERT ... ON CONFLICT DO NOTHING``, so two transactions creating the same
        account both succeed and the later one simply sees the committed row.
        """
        insert = sqlite_insert if db.get_bind().dialect.name == "sqlite" else pg_insert
        stmt = insert(Account).values(username=username, balance_minor=0).on_conflict_do_nothing(index_elements=[Account.username])
        _ = await db.execute(stmt)

    async def add_to_balance(self, db: AsyncSession, username: str, amount_minor: int) -> None:
        """Increment in SQL so concurrent credits to one account never lose an update."""
        _ = await db.execute(
            update(Account).where(Account.username == username).values(balance_minor=Account.balance_minor + amount_minor)
        )
