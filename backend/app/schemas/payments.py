"""Deposit-related Pydantic schemas (client request/response and provider checkout session)."""

from typing import Any

from pydantic import BaseModel, Field

from common.utils.json_model import JsonModel, JsonSnakeCaseModel


class CreatePaymentRequest(JsonModel):
    """Client deposit request.

    Fields stay untyped here: type and range checks happen in the services so a bad value
    maps to the deposit error codes instead of a generic validation error.
    """

    amount: Any = None
    username: Any = None


class CreatePaymentResponse(JsonModel):
    payment_url: str = Field(..., description="Hosted checkout page to redirect the user to")


class SessionMetadata(JsonSnakeCaseModel):
    username: str


class CheckoutSessionPayload(JsonSnakeCaseModel):
    """Outbound body for the provider's create-checkout-session endpoint."""

    amount: int = Field(..., gt=0, description="Amount in minor currency units")
    currency: str
    success_url: str
    cancel_url: str
    metadata: SessionMetadata


class CheckoutSessionResult(BaseModel):
    id: str | None = None
    url: str
