"""Health check schemas for the Search Service."""

from pydantic import Field

from core.models.common import HealthCheck


class HealthResponse(HealthCheck):
    """Health check response for the Search Service."""

    database_connected: bool = Field(..., description="Database connection status")
    embedding_circuit_state: str = Field(..., description="Embedding provider circuit state")
