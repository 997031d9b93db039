"""Deposit routes: turn a client deposit request into a hosted checkout session."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_amount_normalizer, get_session_requester
from app.schemas.payments import CreatePaymentRequest, CreatePaymentResponse
from app.services.amount_normalizer import AmountNormalizer
from app.services.session_requester import SessionRequester
from common.core.app_error import Errors
from common.core.request_context import RequestContext
from common.utils.utils import get_logger, is_dict

router = APIRouter()
logger = get_logger()

MAX_USERNAME_LENGTH = 255


def _clean_username(username: Any) -> str:
    if not isinstance(username, str) or not username.strip():
        raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "username_missing"})
    cleaned = username.strip()
    if len(cleaned) > MAX_USERNAME_LENGTH:
        raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "username_too_long", "length": len(cleaned)})
    return cleaned


@router.post("/create-payment", response_model=CreatePaymentResponse)
async def create_payment(
    request: Request,
    session_requester: Annotated[SessionRequester, Depends(get_session_requester)],
    amount_normalizer: Annotated[AmountNormalizer, Depends(get_amount_normalizer)],
) -> CreatePaymentResponse:
    # Configuration is checked before the body is even read
    session_requester.ensure_configured()

    try:
        raw_body: Any = await request.json()
    except ValueError as e:
        raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "body_not_json"}, cause=e) from e
    if not is_dict(raw_body):
        raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "body_not_object"})

    req = CreatePaymentRequest.model_validate(raw_body)
    username = _clean_username(req.username)
    RequestContext.update(username=username)
    amount_minor = amount_normalizer.normalize(req.amount)

    result = await session_requester.create_session(username, amount_minor)
    logger.info("Deposit session issued", username=username, amount_minor=amount_minor, session_id=result.id)
    return CreatePaymentResponse(payment_url=result.url)
