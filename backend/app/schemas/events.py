"""Provider webhook event schemas.

Events are a tagged union on ``type``: completed checkout sessions are interpreted, every other
type parses into ``UnknownPaymentEvent`` so new provider event types are acknowledged and ignored.
"""

from typing import Annotated, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

CHECKOUT_SESSION_COMPLETED: Final = "checkout.session.completed"
_UNKNOWN_TAG: Final = "unknown"


class SessionMetadata(BaseModel):
    username: str | None = None


class CheckoutSessionObject(BaseModel):
    id: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    metadata: SessionMetadata | None = None


class CheckoutSessionData(BaseModel):
    object: CheckoutSessionObject


class CheckoutSessionCompletedEvent(BaseModel):
    id: str
    type: Literal["checkout.session.completed"]
    data: CheckoutSessionData

    @property
    def session(self) -> CheckoutSessionObject:
        return self.data.object

    @property
    def username(self) -> str | None:
        metadata = self.data.object.metadata
        return metadata.username if metadata is not None else None


class UnknownPaymentEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    type: Any = None
    data: Any = Field(default=None)


def _event_tag(value: Any) -> str:
    event_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return CHECKOUT_SESSION_COMPLETED if event_type == CHECKOUT_SESSION_COMPLETED else _UNKNOWN_TAG


PaymentEvent = Annotated[
    Annotated[CheckoutSessionCompletedEvent, Tag(CHECKOUT_SESSION_COMPLETED)] | Annotated[UnknownPaymentEvent, Tag(_UNKNOWN_TAG)],
    Discriminator(_event_tag),
]

_payment_event_adapter: TypeAdapter[CheckoutSessionCompletedEvent | UnknownPaymentEvent] = TypeAdapter(PaymentEvent)


def parse_payment_event(payload: dict[str, Any]) -> CheckoutSessionCompletedEvent | UnknownPaymentEvent:
    """Raises ``pydantic.ValidationError`` when a known event type has the wrong shape."""
    return _payment_event_adapter.validate_python(payload)
