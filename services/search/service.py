"""Hybrid search over conversations, messages and knowledge items.

Lexical search scores candidates with a pluggable relevance scorer.
Semantic search ranks knowledge items by cosine similarity between the
query embedding and each item's precomputed embedding, as computed by the
repository, and degrades to lexical knowledge search whenever the
embedding provider is unavailable.
Global search fans out to the three lexical searches concurrently.

Every operation is a stateless read scoped to one user.
"""

import asyncio
import logging
import time
from typing import Iterable, Optional, TypeVar

from core.config.settings import Settings, get_settings
from services.search import prometheus
from services.search.clients.embeddings import EmbeddingProvider, EmbeddingUnavailable
from services.search.database.repository import SearchRepository
from services.search.retrieval.scoring import RelevanceScorer, build_highlight, score
from services.search.retrieval.similarity import clamp_similarity
from services.search.schemas.entities import (
    KnowledgeItem,
    SearchableConversation,
    SearchableMessage,
)
from services.search.schemas.search import GlobalSearchResult, SearchResult, SearchResultSet

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


class SearchService:
    """Search operations for a single workspace database."""

    def __init__(
        self,
        repository: SearchRepository,
        embedding_provider: EmbeddingProvider,
        scorer: RelevanceScorer = score,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the search service.

        Args:
            repository: Tenant-scoped data source
            embedding_provider: Query embedding boundary
            scorer: Lexical relevance strategy, ``(query, text) -> float``
            settings: Application settings (defaults to the cached settings)
        """
        self._repository = repository
        self._embedding_provider = embedding_provider
        self._scorer = scorer
        self._settings = settings or get_settings()

    # --- Input normalization ---

    def _resolve_limit(self, limit: Optional[int], default: int) -> int:
        if limit is None:
            limit = default
        return max(0, min(limit, self._settings.search_max_limit))

    def _resolve_threshold(self, threshold: Optional[float]) -> float:
        if threshold is None:
            threshold = self._settings.semantic_similarity_threshold
        return max(-1.0, min(threshold, 1.0))

    # --- Ranking ---

    @staticmethod
    def _rank(results: list[SearchResult[T]]) -> list[SearchResult[T]]:
        """Sort by score, newest first among equal scores."""
        return sorted(results, key=lambda r: (r.score, r.item.created_at), reverse=True)

    def _build_result_set(
        self,
        operation: str,
        item_type: type[T],
        matches: list[SearchResult[T]],
        query: str,
        limit: int,
        start_time: float,
    ) -> SearchResultSet[T]:
        ranked = self._rank(matches)[:limit]
        query_time_ms = _elapsed_ms(start_time)
        prometheus.record_search(operation, query_time_ms / 1000)
        logger.info(
            f"{operation} search found {len(matches)} matches, "
            f"returned {len(ranked)} in {query_time_ms:.2f}ms"
        )
        return SearchResultSet[item_type](
            results=ranked,
            query=query,
            total_count=len(matches),
            query_time_ms=query_time_ms,
        )

    def _best_field(self, query: str, fields: Iterable[str]) -> tuple[float, Optional[str]]:
        """Score several fields and keep the best one.

        Returns:
            (score, text of the best-scoring field)
        """
        best_score, best_text = 0.0, None
        for text in fields:
            field_score = self._scorer(query, text)
            if field_score > best_score:
                best_score, best_text = field_score, text
        return best_score, best_text

    # --- Full-text operations ---

    async def search_conversations(
        self, user_id: str, query: str, limit: Optional[int] = None
    ) -> SearchResultSet[SearchableConversation]:
        """Search the user's conversations by title.

        Args:
            user_id: Requesting user
            query: Free-text query
            limit: Maximum results (defaults to the configured limit)

        Returns:
            Ranked conversations; empty when nothing matches
        """
        start_time = time.time()
        limit = self._resolve_limit(limit, self._settings.search_default_limit)

        conversations = await self._repository.list_conversations(user_id)

        matches: list[SearchResult[SearchableConversation]] = []
        for conversation in conversations:
            if conversation.user_id != user_id:
                continue
            title_score = self._scorer(query, conversation.title)
            if title_score <= 0:
                continue
            matches.append(SearchResult[SearchableConversation](
                item=conversation,
                score=title_score,
                highlight=build_highlight(
                    conversation.title, query, self._settings.title_highlight_width
                ),
            ))

        return self._build_result_set(
            "conversations", SearchableConversation, matches, query, limit, start_time
        )

    async def search_messages(
        self, user_id: str, query: str, limit: Optional[int] = None
    ) -> SearchResultSet[SearchableMessage]:
        """Search message content across the user's conversations.

        Every result carries a highlight window around the first match.
        """
        start_time = time.time()
        limit = self._resolve_limit(limit, self._settings.search_default_limit)

        messages = await self._repository.list_messages(user_id)

        matches: list[SearchResult[SearchableMessage]] = []
        for message in messages:
            if message.user_id != user_id:
                continue
            content_score = self._scorer(query, message.content)
            if content_score <= 0:
                continue
            matches.append(SearchResult[SearchableMessage](
                item=message,
                score=content_score,
                highlight=build_highlight(message.content, query, self._settings.highlight_width),
            ))

        return self._build_result_set(
            "messages", SearchableMessage, matches, query, limit, start_time
        )

    async def search_knowledge_full_text(
        self, user_id: str, query: str, limit: Optional[int] = None
    ) -> SearchResultSet[KnowledgeItem]:
        """Search the user's knowledge items by title, content and tags.

        An item's score is the best score of any of those fields.
        """
        start_time = time.time()
        limit = self._resolve_limit(limit, self._settings.search_default_limit)

        items = await self._repository.list_knowledge_items(user_id)

        matches: list[SearchResult[KnowledgeItem]] = []
        for item in items:
            if item.user_id != user_id:
                continue
            item_score, best_text = self._best_field(query, [item.title, item.content, *item.tags])
            if item_score <= 0:
                continue
            matches.append(SearchResult[KnowledgeItem](
                item=item,
                score=item_score,
                highlight=build_highlight(best_text, query, self._settings.highlight_width),
            ))

        return self._build_result_set(
            "knowledge_full_text", KnowledgeItem, matches, query, limit, start_time
        )

    # --- Semantic operation ---

    async def search_knowledge_semantic(
        self,
        user_id: str,
        query: str,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> SearchResultSet[KnowledgeItem]:
        """Search the user's knowledge items by embedding similarity.

        Only items with a precomputed embedding are candidates. If the
        provider cannot embed the query, the full-text knowledge search
        answers instead with the same arguments.

        Args:
            user_id: Requesting user
            query: Natural language query
            limit: Maximum results (defaults to the configured limit)
            threshold: Minimum cosine similarity (defaults to the configured threshold)

        Returns:
            Knowledge items ranked by similarity, or the full-text results
        """
        start_time = time.time()

        outcome = await self._embedding_provider.embed(query)

        if isinstance(outcome, EmbeddingUnavailable):
            logger.warning(
                f"Embedding unavailable ({outcome.reason}), "
                f"falling back to full-text knowledge search for user {user_id}"
            )
            prometheus.record_semantic_fallback(outcome.reason)
            return await self.search_knowledge_full_text(user_id, query, limit)

        resolved_limit = self._resolve_limit(limit, self._settings.search_default_limit)
        resolved_threshold = self._resolve_threshold(threshold)

        ranked = await self._repository.rank_knowledge_items(
            user_id, outcome.vector, resolved_threshold
        )

        matches: list[SearchResult[KnowledgeItem]] = []
        for item, raw_similarity in ranked:
            if item.user_id != user_id or not item.has_embedding:
                continue
            similarity = clamp_similarity(raw_similarity)
            if similarity is None or similarity < resolved_threshold:
                continue
            matches.append(SearchResult[KnowledgeItem](
                item=item,
                score=similarity,
                highlight=build_highlight(item.content, query, self._settings.highlight_width),
            ))

        return self._build_result_set(
            "knowledge_semantic", KnowledgeItem, matches, query, resolved_limit, start_time
        )

    # --- Aggregation ---

    async def search_global(
        self, user_id: str, query: str, limit: Optional[int] = None
    ) -> GlobalSearchResult:
        """Search conversations, messages and knowledge items at once.

        Each category is capped at ``limit`` and keeps its own order.
        Semantic search is not part of the global path.
        """
        start_time = time.time()
        limit = self._resolve_limit(limit, self._settings.global_search_default_limit)

        conversations, messages, knowledge_items = await asyncio.gather(
            self.search_conversations(user_id, query, limit),
            self.search_messages(user_id, query, limit),
            self.search_knowledge_full_text(user_id, query, limit),
        )

        query_time_ms = _elapsed_ms(start_time)
        prometheus.record_search("global", query_time_ms / 1000)

        return GlobalSearchResult(
            conversations=conversations,
            messages=messages,
            knowledge_items=knowledge_items,
            total_count=(
                conversations.total_count + messages.total_count + knowledge_items.total_count
            ),
            query=query,
            query_time_ms=query_time_ms,
        )
