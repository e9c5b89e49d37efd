"""Response envelopes shared by the Search Service endpoints."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Overall service health.

    DEGRADED means the service still answers searches, but with reduced
    capability (e.g. semantic search falling back to keyword search).
    """

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in ErrorResponse."""

    INTERNAL_ERROR = "INTERNAL_ERROR"


class HealthCheck(BaseModel):
    """Base health check payload."""

    status: HealthStatus = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(default="1.0.0", description="Service version")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check time (UTC)")


class ErrorResponse(BaseModel):
    """Body returned for unexpected server errors."""

    error: ErrorCode = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    request_id: Optional[str] = Field(None, description="X-Request-ID of the failed request")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error time (UTC)")
