"""Search router for the Search Service.

Every endpoint is scoped to the user identified by the bearer token.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from core.security import get_current_user_id
from services.search import schemas as search_schemas
from services.search.schemas.entities import (
    KnowledgeItem,
    SearchableConversation,
    SearchableMessage,
)
from services.search.service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(request: Request) -> SearchService:
    """Get the SearchService created during application startup."""
    return request.app.state.search_service


def _search_failed(e: Exception) -> HTTPException:
    logger.error(f"Search failed: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Search failed",
    )


@router.post("", response_model=search_schemas.GlobalSearchResult)
async def search_global(
    request: search_schemas.GlobalSearchRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
) -> search_schemas.GlobalSearchResult:
    """Search conversations, messages and knowledge items at once.

    Returns the top ``limit`` results of each type, each list in its own
    relevance order.
    """
    try:
        results = await service.search_global(user_id, request.query, request.limit)
    except Exception as e:
        raise _search_failed(e)

    logger.info(
        f"User {user_id} performed global search, "
        f"found {results.total_count} total results in {results.query_time_ms:.2f}ms"
    )
    return results


@router.post(
    "/conversations",
    response_model=search_schemas.SearchResultSet[SearchableConversation],
)
async def search_conversations(
    request: search_schemas.SearchRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
):
    """Search conversations by title."""
    try:
        results = await service.search_conversations(user_id, request.query, request.limit)
    except Exception as e:
        raise _search_failed(e)

    logger.info(
        f"User {user_id} searched conversations, "
        f"found {results.returned_count} results in {results.query_time_ms:.2f}ms"
    )
    return results


@router.post(
    "/messages",
    response_model=search_schemas.SearchResultSet[SearchableMessage],
)
async def search_messages(
    request: search_schemas.SearchRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
):
    """Search message content, with a highlight per result."""
    try:
        results = await service.search_messages(user_id, request.query, request.limit)
    except Exception as e:
        raise _search_failed(e)

    logger.info(
        f"User {user_id} searched messages, "
        f"found {results.returned_count} results in {results.query_time_ms:.2f}ms"
    )
    return results


@router.post(
    "/knowledge",
    response_model=search_schemas.SearchResultSet[KnowledgeItem],
)
async def search_knowledge(
    request: search_schemas.SearchRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
):
    """Keyword search over knowledge item titles, content and tags."""
    try:
        results = await service.search_knowledge_full_text(
            user_id, request.query, request.limit
        )
    except Exception as e:
        raise _search_failed(e)

    logger.info(
        f"User {user_id} searched knowledge, "
        f"found {results.returned_count} results in {results.query_time_ms:.2f}ms"
    )
    return results


@router.post(
    "/knowledge/semantic",
    response_model=search_schemas.SearchResultSet[KnowledgeItem],
)
async def search_knowledge_semantic(
    request: search_schemas.SemanticSearchRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
):
    """Find knowledge items by meaning using embeddings.

    Falls back to keyword search when the embedding provider is
    unavailable; the response shape is the same either way.
    """
    try:
        results = await service.search_knowledge_semantic(
            user_id,
            request.query,
            limit=request.limit,
            threshold=request.threshold,
        )
    except Exception as e:
        raise _search_failed(e)

    logger.info(
        f"User {user_id} performed semantic search, "
        f"found {results.returned_count} results in {results.query_time_ms:.2f}ms"
    )
    return results
