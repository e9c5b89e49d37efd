"""Tests for Search Service schemas."""

import numpy as np
import pytest
from pydantic import ValidationError

from services.search.schemas import (
    GlobalSearchRequest,
    GlobalSearchResult,
    HealthResponse,
    KnowledgeItem,
    SearchableConversation,
    SearchRequest,
    SearchResult,
    SearchResultSet,
    SemanticSearchRequest,
)
from tests.fixtures import BASE_TIME, TEST_USER_ID, make_conversation, make_knowledge_item


class TestSearchRequest:
    """Test cases for SearchRequest model."""

    def test_search_request_valid(self):
        """Test SearchRequest with valid data."""
        request = SearchRequest(query="database", limit=25)

        assert request.query == "database"
        assert request.limit == 25

    def test_search_request_defaults(self):
        """Test that an omitted limit is left to the configured default."""
        request = SearchRequest(query="database")

        assert request.limit is None

    def test_search_request_empty_query(self):
        """Test SearchRequest with empty query."""
        with pytest.raises(ValidationError):
            SearchRequest(query="")

    def test_search_request_query_too_long(self):
        """Test SearchRequest with query too long."""
        with pytest.raises(ValidationError):
            SearchRequest(query="a" * 1001)

    @pytest.mark.parametrize("limit", [0, 51, -1])
    def test_search_request_invalid_limit(self, limit):
        """Test SearchRequest with limit outside 1-50."""
        with pytest.raises(ValidationError):
            SearchRequest(query="database", limit=limit)


class TestSemanticSearchRequest:
    """Test cases for SemanticSearchRequest model."""

    def test_default_threshold(self):
        """Test that an omitted threshold is left to the configured default."""
        request = SemanticSearchRequest(query="database")

        assert request.threshold is None
        assert request.limit is None

    @pytest.mark.parametrize("threshold", [-0.1, 1.1])
    def test_threshold_out_of_range(self, threshold):
        """Test that thresholds outside 0-1 are rejected."""
        with pytest.raises(ValidationError):
            SemanticSearchRequest(query="database", threshold=threshold)


class TestGlobalSearchRequest:
    """Test cases for GlobalSearchRequest model."""

    def test_defaults(self):
        """Test that an omitted per-category limit is left to the configured default."""
        assert GlobalSearchRequest(query="api").limit is None

    def test_limit_above_max(self):
        """Test that limits above 20 are rejected."""
        with pytest.raises(ValidationError):
            GlobalSearchRequest(query="api", limit=21)


class TestKnowledgeItem:
    """Test cases for the KnowledgeItem entity."""

    def test_tags_deduplicated(self):
        """Test that duplicate tags collapse."""
        item = make_knowledge_item("ki-1", "Title", tags=["api", "rest", "api"])

        assert item.tags == ["api", "rest"]

    def test_missing_tags_become_empty(self):
        """Test that null tags are treated as no tags."""
        item = KnowledgeItem(
            id="ki-1", user_id=TEST_USER_ID, title="Title", tags=None, created_at=BASE_TIME
        )

        assert item.tags == []

    def test_empty_embedding_is_missing(self):
        """Test that an empty vector counts as no embedding."""
        item = make_knowledge_item("ki-1", "Title", embedding=[])

        assert item.embedding is None
        assert item.has_embedding is False

    def test_numpy_embedding_accepted(self):
        """Test that vectors loaded by pgvector as numpy arrays become plain lists."""
        item = KnowledgeItem(
            id="ki-1",
            user_id=TEST_USER_ID,
            title="Title",
            embedding=np.array([0.5, 0.25], dtype=np.float32),
            created_at=BASE_TIME,
        )

        assert item.embedding == [0.5, 0.25]
        assert item.has_embedding is True

    def test_embedding_not_serialized(self):
        """Test that embeddings never leave the service."""
        item = make_knowledge_item("ki-1", "Title", embedding=[0.1, 0.2, 0.3])

        assert "embedding" not in item.model_dump()

    def test_immutable(self):
        """Test that entities are read-only snapshots."""
        item = make_knowledge_item("ki-1", "Title")

        with pytest.raises(ValidationError):
            item.title = "Changed"


class TestSearchResultSet:
    """Test cases for result envelopes."""

    def test_returned_count(self):
        """Test that returned_count reflects the truncated list."""
        conversation = make_conversation("conv-1", "API Design Discussion")
        result_set = SearchResultSet[SearchableConversation](
            results=[SearchResult[SearchableConversation](item=conversation, score=1.0)],
            query="API",
            total_count=3,
            query_time_ms=1.5,
        )

        dumped = result_set.model_dump()
        assert dumped["returned_count"] == 1
        assert dumped["total_count"] == 3
        assert dumped["results"][0]["highlight"] is None

    def test_global_result_shape(self):
        """Test that the global envelope holds three typed result sets."""
        empty = dict(results=[], query="api", total_count=0, query_time_ms=0.0)
        result = GlobalSearchResult(
            conversations=empty,
            messages=empty,
            knowledge_items=empty,
            total_count=0,
            query="api",
            query_time_ms=0.1,
        )

        assert result.conversations.returned_count == 0
        assert set(result.model_dump()) == {
            "conversations",
            "messages",
            "knowledge_items",
            "total_count",
            "query",
            "query_time_ms",
        }


class TestHealthResponse:
    """Test cases for HealthResponse model."""

    def test_health_response_valid(self):
        """Test HealthResponse with valid data."""
        response = HealthResponse(
            status="healthy",
            service="search",
            database_connected=True,
            embedding_circuit_state="closed",
        )

        assert response.status == "healthy"
        assert response.database_connected is True
        assert response.embedding_circuit_state == "closed"
        assert response.timestamp is not None
