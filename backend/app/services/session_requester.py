"""SessionRequester creates hosted checkout sessions at the payment provider.
It holds no state about created sessions: the username travels in the session metadata and
comes back in the completion webhook.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.schemas.payments import CheckoutSessionPayload, CheckoutSessionResult, SessionMetadata
from common.core.app_error import Errors
from common.core.config_service import PaymentsSection
from common.utils.msgspec import SerializationError, decode_json
from common.utils.utils import get_logger, is_dict

logger = get_logger()

# Provider error bodies are logged, but only up to this many characters
_MAX_LOGGED_BODY = 2000


class SessionRequester:
    def __init__(self, payments: PaymentsSection, http_client: httpx.AsyncClient) -> None:
        self.payments = payments
        self.http_client = http_client

    @property
    def is_configured(self) -> bool:
        return self.payments.is_configured

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error("Payment provider API key is missing in configuration")
            raise Errors.Payment.CONFIGURATION_ERROR.create()

    def build_payload(self, username: str, amount_minor: int) -> CheckoutSessionPayload:
        return CheckoutSessionPayload(
            amount=amount_minor,
            currency=self.payments.currency,
            success_url=self.payments.success_url,
            cancel_url=self.payments.cancel_url,
            metadata=SessionMetadata(username=username),
        )

    async def create_session(self, username: str, amount_minor: int) -> CheckoutSessionResult:
        """Make exactly one session-creation call to the provider; failures are never retried here."""
        self.ensure_configured()
        if not isinstance(username, str) or not username.strip():
            raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "username"})
        if isinstance(amount_minor, bool) or not isinstance(amount_minor, int) or amount_minor <= 0:
            raise Errors.Payment.INVALID_REQUEST.create(details={"reason": "amount_minor"})

        payload = self.build_payload(username, amount_minor)
        logger.info("Creating checkout session", username=username, amount_minor=amount_minor, currency=payload.currency)

        try:
            response = await self.http_client.post(
                self.payments.api_url,
                json=payload.to_dict(mode="json"),
                headers={"Authorization": f"Bearer {self.payments.api_key}"},
                timeout=self.payments.request_timeout_seconds,
            )
        except httpx.TransportError as e:
            logger.exception("Payment provider unreachable", error_type=type(e).__name__)
            raise Errors.Payment.PROVIDER_UNREACHABLE.create(details={"error_type": type(e).__name__}, cause=e) from e

        if not response.is_success:
            provider_error = response.text[:_MAX_LOGGED_BODY]
            logger.error("Payment provider rejected checkout session", status_code=response.status_code, provider_error=provider_error)
            raise Errors.Payment.PROVIDER_REJECTED.create(details={"status_code": response.status_code, "provider_error": provider_error})

        return self._parse_session(response)

    def _parse_session(self, response: httpx.Response) -> CheckoutSessionResult:
        try:
            body: Any = decode_json(response.content)
        except SerializationError as e:
            logger.exception("Payment provider returned a non-JSON session body", status_code=response.status_code)
            raise Errors.Payment.PROVIDER_REJECTED.create(details={"reason": "non_json_body"}, cause=e) from e

        url = body.get("url") if is_dict(body) else None
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            logger.error("Payment provider session has no usable url", status_code=response.status_code)
            raise Errors.Payment.PROVIDER_REJECTED.create(details={"reason": "missing_url"})

        session_id = body.get("id")
        result = CheckoutSessionResult(id=session_id if isinstance(session_id, str) else None, url=url)
        logger.info("Checkout session created", session_id=result.id)
        return result
