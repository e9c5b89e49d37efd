"""Tenant-scoped, read-only access to searchable entities."""

import logging
from typing import Protocol, Sequence, Union

import numpy as np
from sqlalchemy import select

from services.search.database.models import (
    ConversationRecord,
    KnowledgeItemRecord,
    MessageRecord,
)
from services.search.database.session import DatabaseManager
from services.search.schemas.entities import (
    KnowledgeItem,
    SearchableConversation,
    SearchableMessage,
)

logger = logging.getLogger(__name__)

QueryVector = Union[np.ndarray, Sequence[float]]


class SearchRepository(Protocol):
    """Read-only data source for the search service.

    Every method returns only entities owned by ``user_id``. Errors are
    raised to the caller as-is.
    """

    async def list_conversations(self, user_id: str) -> list[SearchableConversation]:
        ...

    async def list_messages(self, user_id: str) -> list[SearchableMessage]:
        ...

    async def list_knowledge_items(self, user_id: str) -> list[KnowledgeItem]:
        ...

    async def rank_knowledge_items(
        self, user_id: str, query_vector: QueryVector, threshold: float
    ) -> list[tuple[KnowledgeItem, float]]:
        """Items with an embedding whose cosine similarity is at least ``threshold``.

        Returns (item, similarity) pairs, most similar first.
        """
        ...


class SqlAlchemySearchRepository:
    """SearchRepository backed by the shared workspace database."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def list_conversations(self, user_id: str) -> list[SearchableConversation]:
        query = select(ConversationRecord).where(ConversationRecord.user_id == user_id)
        async with self._db.session() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [SearchableConversation.model_validate(row) for row in rows]

    async def list_messages(self, user_id: str) -> list[SearchableMessage]:
        query = select(MessageRecord).where(MessageRecord.user_id == user_id)
        async with self._db.session() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [SearchableMessage.model_validate(row) for row in rows]

    async def list_knowledge_items(self, user_id: str) -> list[KnowledgeItem]:
        query = select(KnowledgeItemRecord).where(KnowledgeItemRecord.user_id == user_id)
        async with self._db.session() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [KnowledgeItem.model_validate(row) for row in rows]

    async def rank_knowledge_items(
        self, user_id: str, query_vector: QueryVector, threshold: float
    ) -> list[tuple[KnowledgeItem, float]]:
        """Rank the user's knowledge items with pgvector's cosine distance.

        The threshold is applied in SQL; no LIMIT is applied so callers can
        report how many items matched in total.
        """
        distance = KnowledgeItemRecord.embedding.cosine_distance(
            np.asarray(query_vector, dtype=np.float32).tolist()
        )
        query = (
            select(KnowledgeItemRecord, (1 - distance).label("similarity"))
            .where(
                KnowledgeItemRecord.user_id == user_id,
                KnowledgeItemRecord.embedding.is_not(None),
                distance <= 1 - threshold,
            )
            .order_by(distance)
        )

        async with self._db.session() as session:
            result = await session.execute(query)
            rows = result.all()

        ranked = [(KnowledgeItem.model_validate(row), float(similarity)) for row, similarity in rows]
        logger.debug(f"Ranked {len(ranked)} knowledge items for user {user_id}")
        return ranked
