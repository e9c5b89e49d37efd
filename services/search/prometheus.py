"""Prometheus metrics for the Search Service."""

from prometheus_client import Counter, Histogram

# Counters
search_requests = Counter(
    "search_requests_total",
    "Total number of search operations executed",
    ["operation"],
)

semantic_fallbacks = Counter(
    "search_semantic_fallbacks_total",
    "Semantic searches answered by full-text search instead",
    ["reason"],
)

embedding_requests = Counter(
    "search_embedding_requests_total",
    "Embedding provider requests by outcome",
    ["outcome"],
)

# Histograms
search_latency_seconds = Histogram(
    "search_latency_seconds",
    "Search operation latency in seconds",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def record_search(operation: str, latency_seconds: float) -> None:
    """Count a completed search and observe its latency."""
    search_requests.labels(operation=operation).inc()
    search_latency_seconds.labels(operation=operation).observe(latency_seconds)


def record_semantic_fallback(reason: str) -> None:
    """Count a semantic search that fell back to full-text search."""
    semantic_fallbacks.labels(reason=reason).inc()


def record_embedding_request(outcome: str) -> None:
    """Count an embedding provider call by outcome."""
    embedding_requests.labels(outcome=outcome).inc()
