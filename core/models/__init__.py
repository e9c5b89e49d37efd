"""Core models package."""

from core.models.common import ErrorCode, ErrorResponse, HealthCheck, HealthStatus

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "HealthCheck",
    "HealthStatus",
]
