"""Retry policy for outbound provider calls."""

import random
from dataclasses import dataclass


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 1
    base_delay: float = 0.2  # Base delay in seconds
    max_delay: float = 2.0  # Maximum delay in seconds
    exponential_base: float = 2.0
    jitter: bool = True

    # HTTP status codes that should trigger a retry
    retryable_status_codes: tuple[int, ...] = (
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    )


def calculate_backoff_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate the delay before the next retry attempt.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds before next retry
    """
    delay = min(config.base_delay * (config.exponential_base ** attempt), config.max_delay)

    if config.jitter:
        # Up to 25% jitter
        delay += delay * 0.25 * random.random()

    return delay
