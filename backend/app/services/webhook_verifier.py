"""Authenticates provider webhook deliveries and parses them into payment events.

Signatures use the timestamped HMAC-SHA256 scheme ``t=<unix ts>,v1=<hex>`` computed over
``"<t>.<raw body>"``. Verification (constant-time compare plus freshness window) is delegated
to ``stripe.WebhookSignature``, which implements exactly this scheme.
"""

from __future__ import annotations

from typing import Any

import stripe
from pydantic import ValidationError

from app.schemas.events import CheckoutSessionCompletedEvent, UnknownPaymentEvent, parse_payment_event
from common.core.app_error import Errors
from common.utils.msgspec import SerializationError, decode_json
from common.utils.utils import get_logger, is_dict

logger = get_logger()

DEFAULT_SIGNATURE_HEADER = "MoneyMotion-Signature"


class WebhookVerifier:
    def __init__(self, secret: str, tolerance_seconds: int = 300, signature_header: str = DEFAULT_SIGNATURE_HEADER) -> None:
        self.secret = secret
        # 0 disables the freshness check
        self.tolerance_seconds = tolerance_seconds
        self.signature_header = signature_header

    @property
    def is_configured(self) -> bool:
        return bool(self.secret)

    def verify(self, payload: bytes, signature_header_value: str | None) -> CheckoutSessionCompletedEvent | UnknownPaymentEvent:
        """Return the parsed event, or raise without touching any state.

        Raises:
            AppException: ``CONFIGURATION_ERROR`` without a secret, ``SIGNATURE_INVALID`` for a
                missing, mismatched or stale signature, ``MALFORMED_PAYLOAD`` for a body that is
                not a UTF-8 JSON object, ``MALFORMED_EVENT`` for a known event type with a bad shape.
        """
        if not self.is_configured:
            logger.error("Webhook secret is missing in configuration; refusing delivery")
            raise Errors.Payment.CONFIGURATION_ERROR.create(details={"missing": "webhook_secret"})

        if not signature_header_value:
            logger.warning("Webhook delivery without signature header", header=self.signature_header)
            raise Errors.Webhook.SIGNATURE_INVALID.create(details={"reason": "missing_header"})

        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Webhook payload is not valid UTF-8")
            raise Errors.Webhook.MALFORMED_PAYLOAD.create(details={"reason": "not_utf8"}, cause=e) from e

        try:
            stripe.WebhookSignature.verify_header(  # pyright: ignore[reportUnknownMemberType]
                text,
                signature_header_value,
                self.secret,
                self.tolerance_seconds or None,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed", reason=str(e))
            raise Errors.Webhook.SIGNATURE_INVALID.create(details={"reason": str(e)}, cause=e) from e

        try:
            body: Any = decode_json(payload)
        except SerializationError as e:
            logger.warning("Webhook payload is not valid JSON")
            raise Errors.Webhook.MALFORMED_PAYLOAD.create(details={"reason": "not_json"}, cause=e) from e

        if not is_dict(body):
            raise Errors.Webhook.MALFORMED_PAYLOAD.create(details={"reason": "not_an_object"})

        try:
            return parse_payment_event(body)
        except ValidationError as e:
            raise Errors.Webhook.MALFORMED_EVENT.create(
                details={"event_id": body.get("id"), "event_type": body.get("type"), "errors": e.errors(include_url=False, include_input=False)},
                cause=e,
            ) from e
