"""Unit tests for SessionRequester against a stub provider."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from app.services.session_requester import SessionRequester
from common.core.app_error import AppException, Errors
from common.core.config_service import PaymentsSection

PROVIDER_URL = "https://provider.test/v1/checkout/sessions"


@pytest_asyncio.fixture
async def http_client(provider: Any) -> AsyncGenerator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider.handle)) as client:
        yield client


def _requester(http_client: httpx.AsyncClient, **overrides: Any) -> SessionRequester:
    payments = PaymentsSection(api_key="mm_test_key", api_url=PROVIDER_URL).model_copy(update=overrides)
    return SessionRequester(payments=payments, http_client=http_client)


@pytest.mark.asyncio
async def test_create_session_posts_expected_payload(http_client: httpx.AsyncClient, provider: Any) -> None:
    requester = _requester(http_client)

    result = await requester.create_session("bob", 500)

    assert result.url == provider.body["url"]
    assert result.id == "cs_test_1"
    assert provider.calls == 1
    request = provider.requests[0]
    assert request.method == "POST"
    assert str(request.url) == PROVIDER_URL
    assert request.headers["Authorization"] == "Bearer mm_test_key"
    assert provider.last_json() == {
        "amount": 500,
        "currency": "usd",
        "success_url": "https://your-website-url.com/payment-success",
        "cancel_url": "https://your-website-url.com/payment-cancelled",
        "metadata": {"username": "bob"},
    }


@pytest.mark.asyncio
async def test_create_session_uses_configured_currency_and_urls(http_client: httpx.AsyncClient, provider: Any) -> None:
    requester = _requester(http_client, currency="eur", success_url="https://shop.test/ok", cancel_url="https://shop.test/cancel")

    await requester.create_session("carol", 1999)

    body = provider.last_json()
    assert body["currency"] == "eur"
    assert body["success_url"] == "https://shop.test/ok"
    assert body["cancel_url"] == "https://shop.test/cancel"
    assert body["amount"] == 1999


@pytest.mark.asyncio
async def test_unconfigured_requester_makes_no_call(http_client: httpx.AsyncClient, provider: Any) -> None:
    requester = _requester(http_client, api_key="")

    assert requester.is_configured is False
    with pytest.raises(AppException) as exc_info:
        await requester.create_session("bob", 500)

    assert Errors.Payment.CONFIGURATION_ERROR.is_(exc_info.value)
    assert exc_info.value.http_status == 500
    assert provider.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(("username", "amount_minor"), [("", 500), ("   ", 500), (None, 500), ("bob", 0), ("bob", -100), ("bob", True), ("bob", 5.0)])
async def test_invalid_arguments_are_rejected_before_network(
    http_client: httpx.AsyncClient, provider: Any, username: Any, amount_minor: Any
) -> None:
    requester = _requester(http_client)

    with pytest.raises(AppException) as exc_info:
        await requester.create_session(username, amount_minor)

    assert Errors.Payment.INVALID_REQUEST.is_(exc_info.value)
    assert exc_info.value.http_status == 400
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_provider_error_status_is_rejected_without_retry(http_client: httpx.AsyncClient, provider: Any) -> None:
    provider.status_code = 402
    provider.body = {"error": {"message": "card_declined: internal provider detail"}}
    requester = _requester(http_client)

    with pytest.raises(AppException) as exc_info:
        await requester.create_session("bob", 500)

    error = exc_info.value
    assert Errors.Payment.PROVIDER_REJECTED.is_(error)
    assert error.details.details is not None
    assert error.details.details["status_code"] == 402
    # Provider detail stays internal; the client-facing message is generic
    assert "card_declined" not in error.to_response().error
    assert provider.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [httpx.ConnectError("connection refused"), httpx.ReadTimeout("timed out")])
async def test_transport_failure_is_unreachable(http_client: httpx.AsyncClient, provider: Any, error: Exception) -> None:
    provider.error = error
    requester = _requester(http_client)

    with pytest.raises(AppException) as exc_info:
        await requester.create_session("bob", 500)

    assert Errors.Payment.PROVIDER_UNREACHABLE.is_(exc_info.value)
    assert exc_info.value.retryable is True
    assert exc_info.value.cause is error
    assert provider.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"id": "cs_1"}, {"url": None}, {"url": "ftp://checkout.test/x"}, {"url": 42}, ["https://x.test"], b"<html>ok</html>"])
async def test_success_without_usable_url_is_rejected(http_client: httpx.AsyncClient, provider: Any, body: Any) -> None:
    provider.body = body
    requester = _requester(http_client)

    with pytest.raises(AppException) as exc_info:
        await requester.create_session("bob", 500)

    assert Errors.Payment.PROVIDER_REJECTED.is_(exc_info.value)


@pytest.mark.asyncio
async def test_build_payload_serializes_snake_case(http_client: httpx.AsyncClient) -> None:
    payload = _requester(http_client).build_payload("dave", 250)

    assert payload.to_dict(mode="json") == {
        "amount": 250,
        "currency": "usd",
        "success_url": "https://your-website-url.com/payment-success",
        "cancel_url": "https://your-website-url.com/payment-cancelled",
        "metadata": {"username": "dave"},
    }
