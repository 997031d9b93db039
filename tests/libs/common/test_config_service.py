"""Tests for ConfigService payment settings."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from common.core.config_service import DEFAULT_PROVIDER_API_URL, ConfigService, PaymentsSection, Settings

_PAYMENT_ENV = (
    "MONEYMOTION_API_KEY",
    "MONEYMOTION_WEBHOOK_SECRET",
    "MONEYMOTION_API_URL",
    "PAYMENT_SUCCESS_URL",
    "PAYMENT_CANCEL_URL",
    "PAYMENT_CURRENCY",
    "PAYMENT_MIN_AMOUNT",
    "PAYMENT_MAX_AMOUNT",
    "PAYMENT_MINOR_UNIT_FACTOR",
    "PAYMENT_PROVIDER_TIMEOUT_SECONDS",
    "WEBHOOK_TOLERANCE_SECONDS",
    "WEBHOOK_SIGNATURE_HEADER",
    "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _PAYMENT_ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults_leave_payments_unconfigured() -> None:
    config = ConfigService()

    assert config.payments.is_configured is False
    assert config.payments.api_url == DEFAULT_PROVIDER_API_URL
    assert config.payments.currency == "usd"
    assert config.payments.min_amount == Decimal("1.00")
    assert config.payments.minor_unit_factor == 100
    assert config.payments.webhook_tolerance_seconds == 300
    assert config.payments.signature_header == "MoneyMotion-Signature"
    assert config.get("port") == 3000
    assert config.is_testing() is True


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONEYMOTION_API_KEY", "mm_live_key")
    monkeypatch.setenv("MONEYMOTION_WEBHOOK_SECRET", "whsec_live")
    monkeypatch.setenv("PAYMENT_CURRENCY", "EUR")
    monkeypatch.setenv("PAYMENT_MIN_AMOUNT", "2.50")
    monkeypatch.setenv("PAYMENT_PROVIDER_TIMEOUT_SECONDS", "3.5")
    monkeypatch.setenv("WEBHOOK_SIGNATURE_HEADER", "X-Signature")
    monkeypatch.setenv("PORT", "8080")

    config = ConfigService()

    assert config.payments.is_configured is True
    assert config.payments.api_key == "mm_live_key"
    assert config.payments.webhook_secret == "whsec_live"
    assert config.payments.currency == "eur"
    assert config.payments.min_amount == Decimal("2.50")
    assert config.payments.request_timeout_seconds == 3.5
    assert config.payments.signature_header == "X-Signature"
    assert config.get("port") == 8080


def test_blank_api_key_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONEYMOTION_API_KEY", "   ")

    assert ConfigService().payments.is_configured is False


def test_payments_section_is_immutable() -> None:
    payments = PaymentsSection(api_key="k")

    with pytest.raises(ValidationError):
        payments.api_key = "other"  # pyright: ignore[reportAttributeAccessIssue]


def test_get_falls_back_to_default() -> None:
    assert ConfigService().get("does.not.exist", "fallback") == "fallback"


def test_database_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://ledger@db/ledger")

    assert ConfigService().get_database_url() == "postgresql://ledger@db/ledger"


def test_cors_origins_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")

    assert Settings().BACKEND_CORS_ORIGINS == ["https://a.test", "https://b.test"]
