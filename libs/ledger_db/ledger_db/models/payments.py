"""Deposit ledger models.
One row per applied credit; the unique idempotency key is what prevents double-crediting.
"""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_db.db import Base


class LedgerStatus(StrEnum):
    CREDITED = "credited"


class DepositLedger(Base):
    """Idempotency ledger keyed by provider checkout session id (or event id)."""

    __tablename__ = "deposit_ledger"
    __table_args__ = (UniqueConstraint("idempotency_key", name="uq_deposit_ledger_idempotency_key"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    event_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str | None] = mapped_column(String(16), nullable=True)
    status: Mapped[LedgerStatus] = mapped_column(String(32), nullable=False, default=LedgerStatus.CREDITED)
