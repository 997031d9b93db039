"""Backend-specific schemas."""

from app.schemas.events import CheckoutSessionCompletedEvent, PaymentEvent, UnknownPaymentEvent, parse_payment_event
from app.schemas.payments import CheckoutSessionPayload, CheckoutSessionResult, CreatePaymentRequest, CreatePaymentResponse

__all__ = [
    "CheckoutSessionCompletedEvent",
    "CheckoutSessionPayload",
    "CheckoutSessionResult",
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "PaymentEvent",
    "UnknownPaymentEvent",
    "parse_payment_event",
]
