"""Common test fixtures for unit tests.

In-memory stand-ins for the repository and embedding provider, plus a
small seeded workspace for two users.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

import numpy as np

from services.search.clients.embeddings import (
    EmbeddingResult,
    EmbeddingUnavailable,
    EmbeddingVector,
)
from services.search.retrieval.similarity import cosine_similarity
from services.search.schemas.entities import (
    KnowledgeItem,
    MessageRole,
    SearchableConversation,
    SearchableMessage,
)


# Test user data
TEST_USER_ID = "12345678-1234-1234-1234-123456789012"
OTHER_USER_ID = "87654321-4321-4321-4321-210987654321"
TEST_WORKSPACE_ID = "ws-test-1"
OTHER_WORKSPACE_ID = "ws-other-1"

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def _rank_by_similarity(
    items: Sequence[KnowledgeItem], query_vector, threshold: float
) -> list[tuple[KnowledgeItem, float]]:
    """Rank items the way the database does: embedded items above threshold, closest first."""
    ranked = []
    for item in items:
        if not item.has_embedding:
            continue
        similarity = cosine_similarity(query_vector, item.embedding)
        if similarity is not None and similarity >= threshold:
            ranked.append((item, similarity))
    return sorted(ranked, key=lambda pair: pair[1], reverse=True)


class InMemorySearchRepository:
    """SearchRepository over plain lists, filtered by owner."""

    def __init__(
        self,
        conversations: Sequence[SearchableConversation] = (),
        messages: Sequence[SearchableMessage] = (),
        knowledge_items: Sequence[KnowledgeItem] = (),
    ):
        self.conversations = list(conversations)
        self.messages = list(messages)
        self.knowledge_items = list(knowledge_items)
        self.calls: list[tuple[str, str]] = []

    async def list_conversations(self, user_id: str) -> list[SearchableConversation]:
        self.calls.append(("conversations", user_id))
        return [c for c in self.conversations if c.user_id == user_id]

    async def list_messages(self, user_id: str) -> list[SearchableMessage]:
        self.calls.append(("messages", user_id))
        return [m for m in self.messages if m.user_id == user_id]

    async def list_knowledge_items(self, user_id: str) -> list[KnowledgeItem]:
        self.calls.append(("knowledge_items", user_id))
        return [k for k in self.knowledge_items if k.user_id == user_id]

    async def rank_knowledge_items(
        self, user_id: str, query_vector, threshold: float
    ) -> list[tuple[KnowledgeItem, float]]:
        self.calls.append(("knowledge_items", user_id))
        return _rank_by_similarity(
            [k for k in self.knowledge_items if k.user_id == user_id], query_vector, threshold
        )


class LeakyRepository(InMemorySearchRepository):
    """Repository that ignores the owner filter."""

    async def list_conversations(self, user_id: str) -> list[SearchableConversation]:
        return list(self.conversations)

    async def list_messages(self, user_id: str) -> list[SearchableMessage]:
        return list(self.messages)

    async def list_knowledge_items(self, user_id: str) -> list[KnowledgeItem]:
        return list(self.knowledge_items)

    async def rank_knowledge_items(
        self, user_id: str, query_vector, threshold: float
    ) -> list[tuple[KnowledgeItem, float]]:
        return _rank_by_similarity(self.knowledge_items, query_vector, threshold)


class FakeEmbeddingProvider:
    """EmbeddingProvider returning a fixed vector, or a fixed unavailability."""

    def __init__(
        self,
        vector: Optional[Sequence[float]] = None,
        unavailable_reason: Optional[str] = None,
    ):
        self.vector = vector
        self.unavailable_reason = unavailable_reason
        self.calls: list[str] = []

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        if self.unavailable_reason is not None or self.vector is None:
            return EmbeddingUnavailable(reason=self.unavailable_reason or "timeout")
        return EmbeddingVector(vector=np.asarray(self.vector, dtype=np.float32))


def make_conversation(
    id: str,
    title: str,
    user_id: str = TEST_USER_ID,
    workspace_id: str = TEST_WORKSPACE_ID,
    minutes: int = 0,
) -> SearchableConversation:
    return SearchableConversation(
        id=id,
        title=title,
        workspace_id=workspace_id,
        user_id=user_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def make_message(
    id: str,
    content: str,
    conversation_id: str = "conv-1",
    user_id: str = TEST_USER_ID,
    role: MessageRole = MessageRole.USER,
    minutes: int = 0,
) -> SearchableMessage:
    return SearchableMessage(
        id=id,
        conversation_id=conversation_id,
        user_id=user_id,
        role=role,
        content=content,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def make_knowledge_item(
    id: str,
    title: str,
    content: str = "",
    tags: Sequence[str] = (),
    embedding: Optional[Sequence[float]] = None,
    user_id: str = TEST_USER_ID,
    minutes: int = 0,
) -> KnowledgeItem:
    return KnowledgeItem(
        id=id,
        user_id=user_id,
        title=title,
        content=content,
        tags=list(tags),
        embedding=list(embedding) if embedding is not None else None,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


def build_seed_data() -> dict:
    """Seed a small workspace for the test user.

    The other user owns look-alike records that must never leak into the
    test user's results.
    """
    conversations = [
        make_conversation("conv-1", "API Design Discussion", minutes=1),
        make_conversation("conv-2", "Database Optimization", minutes=2),
        make_conversation(
            "conv-other",
            "API Gateway Secrets",
            user_id=OTHER_USER_ID,
            workspace_id=OTHER_WORKSPACE_ID,
            minutes=3,
        ),
    ]
    messages = [
        make_message(
            "msg-1",
            "How should we design the authentication API endpoints?",
            conversation_id="conv-1",
            minutes=1,
        ),
        make_message(
            "msg-2",
            "For authentication, I recommend using JWT tokens with refresh tokens.",
            conversation_id="conv-1",
            role=MessageRole.ASSISTANT,
            minutes=2,
        ),
        make_message(
            "msg-3",
            "The database queries are running slow on large datasets.",
            conversation_id="conv-2",
            minutes=3,
        ),
        make_message(
            "msg-other",
            "Our API keys for authentication live in the vault.",
            conversation_id="conv-other",
            user_id=OTHER_USER_ID,
            minutes=4,
        ),
    ]
    knowledge_items = [
        make_knowledge_item(
            "ki-1",
            "REST API Best Practices",
            content=(
                "Always use proper HTTP methods (GET, POST, PUT, DELETE). "
                "Design endpoints with clear naming conventions."
            ),
            tags=["api", "rest", "best-practices"],
            embedding=[0.1, 0.2, 0.3],
            minutes=1,
        ),
        make_knowledge_item(
            "ki-2",
            "Database Indexing",
            content="Use indexes on frequently queried columns to improve database performance.",
            tags=["database", "performance", "indexing"],
            embedding=[0.4, 0.5, 0.6],
            minutes=2,
        ),
        make_knowledge_item(
            "ki-other",
            "API Secrets Runbook",
            content="Rotate API credentials monthly.",
            tags=["api"],
            embedding=[0.1, 0.2, 0.3],
            user_id=OTHER_USER_ID,
            minutes=3,
        ),
    ]
    return {
        "conversations": conversations,
        "messages": messages,
        "knowledge_items": knowledge_items,
    }
