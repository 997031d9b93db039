# backend/app/routers/__init__.py

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_services
from app.schemas.health import HealthCheckResponse
from app.service_container import Services
from common.utils.utils import get_logger

from .payments import router as payments_router
from .webhooks import router as webhooks_router

logger = get_logger(__name__)

router = APIRouter()


# Health check endpoint
@router.get("/health")
async def health_check(services: Annotated[Services, Depends(get_services)]) -> HealthCheckResponse:
    """Health check endpoint for monitoring; never touches the provider or the ledger."""
    config_service = services.config_service
    return HealthCheckResponse(
        status="healthy",
        service="deposit-gateway",
        environment=config_service.get_environment(),
        payments_configured=services.session_requester.is_configured,
        database_type="sqlite" if config_service.get_database_url().startswith("sqlite") else "postgresql",
    )


# Include route definitions
router.include_router(payments_router, tags=["payments"])
router.include_router(webhooks_router, tags=["webhooks"])
