"""Circuit breaker guarding the embedding provider.

Three states (CLOSED, OPEN, HALF_OPEN). While OPEN, calls are refused
without touching the network so semantic search falls back immediately.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Failure-counting circuit breaker."""

    name: str = "embedding"
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    half_open_max_calls: int = 1

    state: CircuitState = field(default=CircuitState.CLOSED)
    failure_count: int = field(default=0)
    opened_at: float = field(default=0.0)
    half_open_calls: int = field(default=0)

    def record_success(self) -> None:
        """Record a successful call."""
        self.failure_count = 0
        if self.state != CircuitState.CLOSED:
            logger.info(f"Circuit '{self.name}' closed")
        self.state = CircuitState.CLOSED
        self.half_open_calls = 0

    def record_failure(self) -> None:
        """Record a failed call."""
        self.failure_count += 1
        if self.state == CircuitState.HALF_OPEN:
            self._open("half-open probe failed")
        elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            self._open(f"{self.failure_count} consecutive failures")

    def can_execute(self) -> bool:
        """Check if a call can be executed."""
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if time.monotonic() - self.opened_at < self.recovery_timeout:
                return False
            self.state = CircuitState.HALF_OPEN
            self.half_open_calls = 0
            logger.info(f"Circuit '{self.name}' half-open, probing provider")

        if self.half_open_calls < self.half_open_max_calls:
            self.half_open_calls += 1
            return True
        return False

    def release(self) -> None:
        """Give back a half-open slot taken by a call that never finished."""
        if self.state == CircuitState.HALF_OPEN and self.half_open_calls > 0:
            self.half_open_calls -= 1

    def _open(self, reason: str) -> None:
        self.state = CircuitState.OPEN
        self.opened_at = time.monotonic()
        logger.warning(f"Circuit '{self.name}' opened: {reason}")
