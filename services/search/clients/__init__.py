"""Clients for services the Search Service depends on."""

from services.search.clients.circuit_breaker import CircuitBreaker, CircuitState
from services.search.clients.embeddings import (
    EmbeddingClient,
    EmbeddingProvider,
    EmbeddingResult,
    EmbeddingUnavailable,
    EmbeddingVector,
)
from services.search.clients.retry import RetryConfig, calculate_backoff_delay

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "EmbeddingClient",
    "EmbeddingProvider",
    "EmbeddingResult",
    "EmbeddingUnavailable",
    "EmbeddingVector",
    "RetryConfig",
    "calculate_backoff_delay",
]
