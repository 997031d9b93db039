from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.service_container import Services
from app.services.amount_normalizer import AmountNormalizer
from app.services.event_reconciler import EventReconciler
from app.services.session_requester import SessionRequester
from app.services.webhook_verifier import WebhookVerifier
from ledger_db.db import AsyncSessionLocal


def get_services() -> Services:
    """Process-wide service container; overridden in tests."""
    return Services.instance()


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Dependency for async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_amount_normalizer(services: Annotated[Services, Depends(get_services)]) -> AmountNormalizer:
    """Dependency for AmountNormalizer instance."""
    return services.amount_normalizer


def get_session_requester(services: Annotated[Services, Depends(get_services)]) -> SessionRequester:
    """Dependency for SessionRequester instance."""
    return services.session_requester


def get_webhook_verifier(services: Annotated[Services, Depends(get_services)]) -> WebhookVerifier:
    """Dependency for WebhookVerifier instance."""
    return services.webhook_verifier


def get_event_reconciler(services: Annotated[Services, Depends(get_services)]) -> EventReconciler:
    """Dependency for EventReconciler instance."""
    return services.event_reconciler
