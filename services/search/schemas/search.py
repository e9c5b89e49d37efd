"""Search request and result schemas for the Search Service."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, computed_field

from services.search.schemas.entities import (
    KnowledgeItem,
    SearchableConversation,
    SearchableMessage,
)

T = TypeVar("T")


class SearchRequest(BaseModel):
    """Request schema for per-entity search endpoints."""

    query: str = Field(..., description="Search query text", min_length=1, max_length=1000)
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        le=50,
        description="Maximum number of results; omitted uses the configured default",
    )


class SemanticSearchRequest(SearchRequest):
    """Request schema for semantic knowledge search."""

    threshold: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity; omitted uses the configured default",
    )


class GlobalSearchRequest(BaseModel):
    """Request schema for global search."""

    query: str = Field(..., description="Search query text", min_length=1, max_length=1000)
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        le=20,
        description="Maximum results per category; omitted uses the configured default",
    )


class SearchResult(BaseModel, Generic[T]):
    """A ranked entity with its score and optional excerpt."""

    item: T = Field(..., description="Matched entity")
    score: float = Field(..., description="Lexical score (0-1) or cosine similarity")
    highlight: Optional[str] = Field(default=None, description="Excerpt around the match")


class SearchResultSet(BaseModel, Generic[T]):
    """Ordered results for one entity type."""

    results: list[SearchResult[T]] = Field(default_factory=list, description="Ranked results")
    query: str = Field(..., description="Original query string")
    total_count: int = Field(..., description="Matches found before the limit was applied")
    query_time_ms: float = Field(..., description="End-to-end query time in milliseconds")

    @computed_field
    @property
    def returned_count(self) -> int:
        return len(self.results)


class GlobalSearchResult(BaseModel):
    """Combined envelope for global search."""

    conversations: SearchResultSet[SearchableConversation]
    messages: SearchResultSet[SearchableMessage]
    knowledge_items: SearchResultSet[KnowledgeItem]
    total_count: int = Field(..., description="Sum of the per-category totals")
    query: str = Field(..., description="Original query string")
    query_time_ms: float = Field(..., description="End-to-end query time in milliseconds")
