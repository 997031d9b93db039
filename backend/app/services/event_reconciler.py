"""Applies authenticated payment events to the ledger, at most once per checkout session."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.events import CheckoutSessionCompletedEvent, UnknownPaymentEvent
from common.core.app_error import Errors
from common.utils.utils import get_logger
from ledger_db.crud.payments import PaymentLedgerDAO

logger = get_logger()


class ReconcileOutcome(StrEnum):
    APPLIED = "applied"
    IGNORED = "ignored"
    ALREADY_APPLIED = "already_applied"


class ReconcileResult(BaseModel):
    outcome: ReconcileOutcome
    event_id: str | None = None
    username: str | None = None
    amount: Decimal | None = None
    idempotency_key: str | None = None


class EventReconciler:
    def __init__(self, ledger_dao: PaymentLedgerDAO, minor_unit_factor: int = 100, currency: str = "usd") -> None:
        self.ledger_dao = ledger_dao
        self.minor_unit_factor = minor_unit_factor
        self.currency = currency.lower()

    async def reconcile(self, db: AsyncSession, event: CheckoutSessionCompletedEvent | UnknownPaymentEvent) -> ReconcileResult:
        """Credit a completed checkout session exactly once.

        Non-completion events are ignored. Database errors propagate so the delivery fails
        and the provider redelivers; the ledger key makes that redelivery safe.
        """
        if not isinstance(event, CheckoutSessionCompletedEvent):
            event_id = str(event.id) if event.id is not None else None
            logger.info("Ignoring payment event", event_id=event_id, event_type=event.type)
            return ReconcileResult(outcome=ReconcileOutcome.IGNORED, event_id=event_id)

        session = event.session
        username = (event.username or "").strip()
        if not username:
            raise Errors.Webhook.UNATTRIBUTABLE_EVENT.create(details={"event_id": event.id, "session_id": session.id})

        amount_total = session.amount_total
        if amount_total is None or amount_total <= 0:
            raise Errors.Webhook.MALFORMED_EVENT.create(details={"event_id": event.id, "reason": "amount_total", "amount_total": amount_total})

        # Amounts are credited 1:1 in minor units, so only the configured currency is accepted
        currency = (session.currency or self.currency).strip().lower()
        if currency != self.currency:
            raise Errors.Webhook.MALFORMED_EVENT.create(
                details={"event_id": event.id, "reason": "currency", "currency": session.currency, "expected": self.currency}
            )

        idempotency_key = (session.id or "").strip() or event.id.strip()
        if not idempotency_key:
            raise Errors.Webhook.MALFORMED_EVENT.create(details={"event_id": event.id, "reason": "idempotency_key"})

        amount = Decimal(amount_total) / Decimal(self.minor_unit_factor)
        entry = await self.ledger_dao.credit_once(
            db,
            idempotency_key=idempotency_key,
            username=username,
            amount_minor=amount_total,
            event_id=event.id,
            currency=currency,
        )
        if entry is None:
            logger.info("Payment already credited", event_id=event.id, idempotency_key=idempotency_key, username=username)
            outcome = ReconcileOutcome.ALREADY_APPLIED
        else:
            logger.info("Credited deposit", event_id=event.id, idempotency_key=idempotency_key, username=username, amount=str(amount))
            outcome = ReconcileOutcome.APPLIED

        return ReconcileResult(outcome=outcome, event_id=event.id, username=username, amount=amount, idempotency_key=idempotency_key)
