"""Health check schemas."""

from pydantic import Field

from common.utils.json_model import JsonModel


class HealthCheckResponse(JsonModel):
    """Health check response."""

    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    environment: str = Field(..., description="Environment name")
    payments_configured: bool = Field(..., description="Whether the provider API key is set")
    database_type: str = Field(..., description="Database type (sqlite/postgresql)")
