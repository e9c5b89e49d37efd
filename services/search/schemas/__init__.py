"""Search Service schemas."""

from services.search.schemas.entities import (
    KnowledgeItem,
    MessageRole,
    SearchableConversation,
    SearchableMessage,
)
from services.search.schemas.health import HealthResponse
from services.search.schemas.search import (
    GlobalSearchRequest,
    GlobalSearchResult,
    SearchRequest,
    SearchResult,
    SearchResultSet,
    SemanticSearchRequest,
)

__all__ = [
    "GlobalSearchRequest",
    "GlobalSearchResult",
    "HealthResponse",
    "KnowledgeItem",
    "MessageRole",
    "SearchRequest",
    "SearchResult",
    "SearchResultSet",
    "SearchableConversation",
    "SearchableMessage",
    "SemanticSearchRequest",
]
