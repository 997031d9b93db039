"""Pydantic schemas for the deposit ledger."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ledger_db.models.payments import LedgerStatus


class DepositLedgerEntry(BaseModel):
    id: int
    idempotency_key: str
    event_id: str | None
    username: str
    amount_minor: int
    currency: str | None
    status: LedgerStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
