"""Search Service - FastAPI application.

Hybrid search over a user's conversations, messages and knowledge base:
lexical scoring for all three entity types plus embedding-based semantic
search over knowledge items, which degrades to lexical search when the
embedding provider is unavailable.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from core.config.settings import get_settings
from core.models.common import ErrorCode, ErrorResponse, HealthStatus
from services.search import schemas as search_schemas
from services.search.clients.circuit_breaker import CircuitState
from services.search.clients.embeddings import EmbeddingClient
from services.search.database import SqlAlchemySearchRepository, create_database_manager
from services.search.routers import search as search_router
from services.search.service import SearchService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Search Service...")

    db_manager = create_database_manager()
    embedding_client = EmbeddingClient.from_settings(settings)

    app.state.db_manager = db_manager
    app.state.embedding_client = embedding_client
    app.state.search_service = SearchService(
        repository=SqlAlchemySearchRepository(db_manager),
        embedding_provider=embedding_client,
        settings=settings,
    )

    if await db_manager.check_health():
        logger.info("Database connection successful")
    else:
        logger.warning("Database connection failed - searches will fail until it recovers")

    logger.info(
        f"Search Service started (embedding model={settings.embedding_model}, "
        f"similarity threshold={settings.semantic_similarity_threshold})"
    )

    yield

    logger.info("Shutting down Search Service...")
    await embedding_client.close()
    await db_manager.disconnect()


# Create FastAPI application
app = FastAPI(
    title="Search Service",
    description="Hybrid full-text and semantic search over conversations, messages "
    "and knowledge items, with automatic lexical fallback when embeddings are unavailable.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests with request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID", "unknown")
    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} "
        f"request_id={request_id}"
    )

    response = await call_next(request)

    elapsed_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={elapsed_ms:.2f}ms "
        f"request_id={request_id}"
    )

    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a uniform error body for unexpected failures."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    body = ErrorResponse(
        error=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        request_id=request.headers.get("X-Request-ID"),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )


app.include_router(search_router.router)

if settings.metrics_enabled:
    app.mount("/metrics/prometheus", make_asgi_app())


@app.get("/health", response_model=search_schemas.HealthResponse)
async def health_check(request: Request) -> search_schemas.HealthResponse:
    """Health check endpoint.

    Returns:
        Database connectivity and embedding circuit state. An open circuit
        only degrades semantic search, so it reports "degraded".
    """
    database_connected = await request.app.state.db_manager.check_health()
    circuit_state = request.app.state.embedding_client.circuit_breaker.state

    healthy = database_connected and circuit_state != CircuitState.OPEN

    return search_schemas.HealthResponse(
        status=HealthStatus.HEALTHY if healthy else HealthStatus.DEGRADED,
        service="search",
        database_connected=database_connected,
        embedding_circuit_state=circuit_state.value,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.search.main:app",
        host="0.0.0.0",
        port=settings.search_service_port,
        reload=settings.debug,
    )
