"""Provider webhook route: verify, then reconcile into the ledger."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_event_reconciler, get_webhook_verifier
from app.services.event_reconciler import EventReconciler
from app.services.webhook_verifier import WebhookVerifier
from common.core.app_error import AppException, Errors
from common.core.request_context import RequestContext
from common.utils.utils import get_logger

router = APIRouter()
logger = get_logger()


def _acknowledge() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.post("/moneymotion-webhook")
async def moneymotion_webhook(
    request: Request,
    verifier: Annotated[WebhookVerifier, Depends(get_webhook_verifier)],
    reconciler: Annotated[EventReconciler, Depends(get_event_reconciler)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    # Signature covers the exact bytes received, so the body is read raw
    payload = await request.body()
    signature = request.headers.get(verifier.signature_header)

    try:
        event = verifier.verify(payload, signature)
    except AppException as e:
        if not Errors.Webhook.MALFORMED_EVENT.is_(e):
            raise
        # Authenticated sender, so a retry would carry the same bad event
        logger.error("Acknowledging malformed payment event; needs manual reconciliation", details=e.details.details)
        return _acknowledge()

    RequestContext.update(event_id=str(event.id) if event.id is not None else None)

    try:
        result = await reconciler.reconcile(db, event)
    except AppException as e:
        if not AppException.is_any_of(e, Errors.Webhook.UNATTRIBUTABLE_EVENT, Errors.Webhook.MALFORMED_EVENT):
            raise
        logger.error("Acknowledging payment event that cannot be credited; needs manual reconciliation", code=e.details.code, details=e.details.details)
        return _acknowledge()

    logger.info("Webhook processed", outcome=result.outcome, event_id=result.event_id, idempotency_key=result.idempotency_key)
    return _acknowledge()
