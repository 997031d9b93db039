from __future__ import annotations

import httpx

from app.services.amount_normalizer import AmountNormalizer
from app.services.event_reconciler import EventReconciler
from app.services.session_requester import SessionRequester
from app.services.webhook_verifier import WebhookVerifier
from common.core.config_service import ConfigService
from common.core.lifecycle import Lifecycle
from common.utils.utils import cached_classmethod, get_logger
from ledger_db.crud.accounts import AccountDAO
from ledger_db.crud.payments import PaymentLedgerDAO

logger = get_logger()


class Services(Lifecycle):
    config_service: ConfigService
    http_client: httpx.AsyncClient

    account_dao: AccountDAO
    payment_ledger_dao: PaymentLedgerDAO

    amount_normalizer: AmountNormalizer
    session_requester: SessionRequester
    webhook_verifier: WebhookVerifier
    event_reconciler: EventReconciler

    def __init__(self, config_service: ConfigService | None = None, http_client: httpx.AsyncClient | None = None) -> None:
        super().__init__()

        # Initialize core infrastructure
        self.config_service = config_service or self._create_config_service()
        self.http_client = http_client or self._create_http_client(config_service=self.config_service)

        # Initialize database access objects
        self.account_dao = self._create_account_dao()
        self.payment_ledger_dao = self._create_payment_ledger_dao(account_dao=self.account_dao)

        # Initialize payment services
        self.amount_normalizer = self._create_amount_normalizer(config_service=self.config_service)
        self.session_requester = self._create_session_requester(config_service=self.config_service, http_client=self.http_client)
        self.webhook_verifier = self._create_webhook_verifier(config_service=self.config_service)
        self.event_reconciler = self._create_event_reconciler(config_service=self.config_service, payment_ledger_dao=self.payment_ledger_dao)

    async def _start(self) -> None:
        if not self.session_requester.is_configured:
            logger.warning("Payment provider API key is not set; deposits will be refused until it is configured")
        if not self.webhook_verifier.is_configured:
            logger.warning("Webhook secret is not set; webhook deliveries will be refused until it is configured")

    async def _stop(self) -> None:
        await self.http_client.aclose()

    # Protected creation methods for dependency injection/overriding
    def _create_config_service(self) -> ConfigService:
        return ConfigService()

    def _create_http_client(self, config_service: ConfigService) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=config_service.payments.request_timeout_seconds)

    def _create_account_dao(self) -> AccountDAO:
        return AccountDAO()

    def _create_payment_ledger_dao(self, account_dao: AccountDAO) -> PaymentLedgerDAO:
        return PaymentLedgerDAO(account_dao=account_dao)

    def _create_amount_normalizer(self, config_service: ConfigService) -> AmountNormalizer:
        payments = config_service.payments
        return AmountNormalizer(min_amount=payments.min_amount, max_amount=payments.max_amount, minor_unit_factor=payments.minor_unit_factor)

    def _create_session_requester(self, config_service: ConfigService, http_client: httpx.AsyncClient) -> SessionRequester:
        return SessionRequester(payments=config_service.payments, http_client=http_client)

    def _create_webhook_verifier(self, config_service: ConfigService) -> WebhookVerifier:
        payments = config_service.payments
        return WebhookVerifier(
            secret=payments.webhook_secret,
            tolerance_seconds=payments.webhook_tolerance_seconds,
            signature_header=payments.signature_header,
        )

    def _create_event_reconciler(self, config_service: ConfigService, payment_ledger_dao: PaymentLedgerDAO) -> EventReconciler:
        payments = config_service.payments
        return EventReconciler(ledger_dao=payment_ledger_dao, minor_unit_factor=payments.minor_unit_factor, currency=payments.currency)

    @cached_classmethod
    def instance(cls) -> Services:
        """Get the singleton instance of Services."""
        return Services()
