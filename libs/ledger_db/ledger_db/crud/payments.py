"""DAO for deposit ledger operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from common.utils.utils import get_logger
from ledger_db.crud.accounts import AccountDAO
from ledger_db.models.payments import DepositLedger, LedgerStatus
from ledger_db.schemas.payments import DepositLedgerEntry

logger = get_logger(__name__)


class PaymentLedgerDAO:
    def __init__(self, account_dao: AccountDAO | None = None) -> None:
        self.account_dao = account_dao or AccountDAO()

    async def credit_once(
        self,
        db: AsyncSession,
        *,
        idempotency_key: str,
        username: str,
        amount_minor: int,
        event_id: str | None = None,
        currency: str | None = None,
    ) -> DepositLedgerEntry | None:
        """Record ``idempotency_key`` and credit ``username`` in a single transaction.

        Returns the created entry, or None if the key was already recorded (nothing is applied).
        Any other database error rolls the transaction back and propagates.
        """
        entry = DepositLedger(
            idempotency_key=idempotency_key,
            event_id=event_id,
            username=username,
            amount_minor=amount_minor,
            currency=currency,
            status=LedgerStatus.CREDITED,
        )
        db.add(entry)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Duplicate idempotency key, skipping credit", idempotency_key=idempotency_key, event_id=event_id)
            await db.rollback()
            return None

        try:
            await self.account_dao.ensure_exists(db, username)
            await self.account_dao.add_to_balance(db, username, amount_minor)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            raise

        await db.refresh(entry)
        return DepositLedgerEntry.model_validate(entry)

    async def get_by_key(self, db: AsyncSession, *, idempotency_key: str) -> DepositLedgerEntry | None:
        result = await db.execute(select(DepositLedger).where(DepositLedger.idempotency_key == idempotency_key))
        row = result.scalar_one_or_none()
        return DepositLedgerEntry.model_validate(row) if row else None

    async def list_for_user(self, db: AsyncSession, *, username: str) -> list[DepositLedgerEntry]:
        result = await db.execute(
            select(DepositLedger).where(DepositLedger.username == username).order_by(DepositLedger.id)
        )
        return [DepositLedgerEntry.model_validate(row) for row in result.scalars().all()]
