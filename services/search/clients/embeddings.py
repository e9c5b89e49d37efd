"""Embedding provider client.

Talks to an OpenAI-compatible ``/embeddings`` endpoint and reports every
call as one of two outcomes: an :class:`EmbeddingVector`, or an
:class:`EmbeddingUnavailable` carrying the reason. Timeouts, transport and
status errors, malformed payloads and an open circuit all become
``EmbeddingUnavailable``; callers never see provider exceptions.

Cancellation (``asyncio.CancelledError``) is re-raised, so cancelling a
search aborts an outstanding embedding request.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

import httpx
import numpy as np

from core.config.settings import Settings, get_settings
from services.search import prometheus
from services.search.clients.circuit_breaker import CircuitBreaker
from services.search.clients.retry import RetryConfig, calculate_backoff_delay

logger = logging.getLogger(__name__)

# Unavailability reasons
REASON_EMPTY_INPUT = "empty_input"
REASON_CIRCUIT_OPEN = "circuit_open"
REASON_TIMEOUT = "timeout"
REASON_HTTP_ERROR = "http_error"
REASON_REQUEST_ERROR = "request_error"
REASON_INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class EmbeddingVector:
    """A successfully computed embedding."""

    vector: np.ndarray


@dataclass(frozen=True)
class EmbeddingUnavailable:
    """The provider could not produce an embedding."""

    reason: str
    detail: Optional[str] = None


EmbeddingResult = Union[EmbeddingVector, EmbeddingUnavailable]


class EmbeddingProvider(Protocol):
    """Anything that can embed a query string."""

    async def embed(self, text: str) -> EmbeddingResult:
        ...


class InvalidEmbeddingResponse(ValueError):
    """The provider answered with a payload that holds no usable vector."""


class EmbeddingClient:
    """HTTP embedding client with per-attempt timeout, retry and circuit breaker."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        dimension: Optional[int] = None,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the embedding client.

        Args:
            base_url: Provider base URL, e.g. ``https://api.openai.com/v1``
            model: Embedding model name
            api_key: Optional bearer token
            timeout: Upper bound in seconds for a single attempt
            dimension: Expected vector length; None or 0 skips the check
            retry_config: Retry behavior for transient failures
            circuit_breaker: Breaker shared across calls
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.dimension = dimension or None
        self.retry_config = retry_config or RetryConfig()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="embedding")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EmbeddingClient":
        """Build a client from application settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.embedding_service_url,
            model=settings.embedding_model,
            api_key=settings.embedding_api_key,
            timeout=settings.embedding_timeout_seconds,
            dimension=settings.embedding_dimension,
            retry_config=RetryConfig(max_retries=settings.embedding_max_retries),
            circuit_breaker=CircuitBreaker(
                name="embedding",
                failure_threshold=settings.embedding_circuit_failure_threshold,
                recovery_timeout=settings.embedding_circuit_recovery_seconds,
            ),
        )

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _request_embedding(self, text: str) -> np.ndarray:
        client = await self.get_client()
        response = await client.post("embeddings", json={"model": self.model, "input": text})
        response.raise_for_status()

        payload = response.json()
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise InvalidEmbeddingResponse("No embeddings returned from provider")

        try:
            vector = np.asarray(data[0].get("embedding") or [], dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise InvalidEmbeddingResponse(f"Malformed embedding: {e}") from e
        if vector.ndim != 1 or vector.size == 0:
            raise InvalidEmbeddingResponse("Provider returned an empty embedding")
        if not np.isfinite(vector).all():
            raise InvalidEmbeddingResponse("Provider returned non-finite values")
        if self.dimension and vector.shape[0] != self.dimension:
            raise InvalidEmbeddingResponse(
                f"Expected {self.dimension} dimensions, got {vector.shape[0]}"
            )
        return vector

    def _classify_error(self, error: Exception) -> tuple[str, bool]:
        """Map an error to (reason, retryable)."""
        if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
            return REASON_TIMEOUT, True
        if isinstance(error, httpx.HTTPStatusError):
            retryable = error.response.status_code in self.retry_config.retryable_status_codes
            return REASON_HTTP_ERROR, retryable
        if isinstance(error, httpx.RequestError):
            return REASON_REQUEST_ERROR, True
        return REASON_INVALID_RESPONSE, False

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            EmbeddingVector on success, EmbeddingUnavailable otherwise
        """
        if not text or not text.strip():
            return EmbeddingUnavailable(reason=REASON_EMPTY_INPUT)

        if not self.circuit_breaker.can_execute():
            logger.warning("Embedding circuit open, skipping provider call")
            prometheus.record_embedding_request(REASON_CIRCUIT_OPEN)
            return EmbeddingUnavailable(reason=REASON_CIRCUIT_OPEN)

        reason = REASON_INVALID_RESPONSE
        detail: Optional[str] = None
        attempts = self.retry_config.max_retries + 1

        try:
            for attempt in range(attempts):
                try:
                    vector = await asyncio.wait_for(
                        self._request_embedding(text), timeout=self.timeout
                    )
                except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as e:
                    reason, retryable = self._classify_error(e)
                    detail = str(e) or type(e).__name__

                    if retryable and attempt < attempts - 1:
                        delay = calculate_backoff_delay(attempt, self.retry_config)
                        logger.warning(
                            f"Retrying embedding request (attempt {attempt + 1}/{attempts}) "
                            f"after {delay:.2f}s: {reason}: {detail}"
                        )
                        await asyncio.sleep(delay)
                        continue
                    break
                else:
                    self.circuit_breaker.record_success()
                    prometheus.record_embedding_request("success")
                    return EmbeddingVector(vector=vector)
        except asyncio.CancelledError:
            # A cancelled half-open call must not hold the only slot
            self.circuit_breaker.release()
            raise

        self.circuit_breaker.record_failure()
        prometheus.record_embedding_request(reason)
        logger.error(f"Embedding provider unavailable ({reason}) after {attempt + 1} attempt(s): {detail}")
        return EmbeddingUnavailable(reason=reason, detail=detail)
