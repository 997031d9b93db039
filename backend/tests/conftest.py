"""App-level fixtures: a stub payment provider, a configured service container and an API client."""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.dependencies import get_db, get_services
from app.main import app
from app.service_container import Services
from common.core.config_service import ConfigService
from common.utils.msgspec import decode_json, encode_json

TEST_API_KEY = "mm_test_key"
TEST_WEBHOOK_SECRET = "whsec_test_secret"
TEST_PROVIDER_URL = "https://provider.test/v1/checkout/sessions"
CHECKOUT_URL = "https://checkout.provider.test/session/cs_test_1"

type Signer = Callable[..., str]


class ProviderStub:
    """Records outbound session-creation calls and answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {"id": "cs_test_1", "url": CHECKOUT_URL}
        self.error: Exception | None = None

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict[str, Any]:
        return decode_json(self.requests[-1].content)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, bytes):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)


def make_config(**payment_overrides: Any) -> ConfigService:
    config_service = ConfigService()
    defaults: dict[str, Any] = {
        "api_key": TEST_API_KEY,
        "webhook_secret": TEST_WEBHOOK_SECRET,
        "api_url": TEST_PROVIDER_URL,
    }
    config_service.payments = config_service.payments.model_copy(update=defaults | payment_overrides)
    return config_service


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a ``t=<ts>,v1=<hex>`` header the way the provider does."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode() + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def completed_event(
    event_id: str = "evt_1",
    username: str | None = "alice",
    amount_total: int | None = 500,
    session_id: str | None = "cs_test_1",
) -> bytes:
    session: dict[str, Any] = {"id": session_id, "amount_total": amount_total, "currency": "usd"}
    if username is not None:
        session["metadata"] = {"username": username}
    return encode_json({"id": event_id, "type": "checkout.session.completed", "data": {"object": session}})


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def config_service() -> ConfigService:
    return make_config()


@pytest_asyncio.fixture
async def services(config_service: ConfigService, provider: ProviderStub) -> AsyncGenerator[Services]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(provider.handle))
    async with Services(config_service=config_service, http_client=http_client) as started:
        yield started


@pytest_asyncio.fixture
async def client(services: Services, session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[httpx.AsyncClient]:
    async def _get_test_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_db] = _get_test_db
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def signer() -> Signer:
    return sign_payload


@pytest.fixture
def event_factory() -> Callable[..., bytes]:
    return completed_event


@pytest.fixture
def config_factory() -> Callable[..., ConfigService]:
    return make_config
