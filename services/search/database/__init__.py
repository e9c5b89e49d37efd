"""Database access for the Search Service."""

from services.search.database.models import (
    Base,
    ConversationRecord,
    KnowledgeItemRecord,
    MessageRecord,
    WorkspaceRecord,
)
from services.search.database.repository import SearchRepository, SqlAlchemySearchRepository
from services.search.database.session import DatabaseManager, create_database_manager

__all__ = [
    "Base",
    "ConversationRecord",
    "DatabaseManager",
    "KnowledgeItemRecord",
    "MessageRecord",
    "SearchRepository",
    "SqlAlchemySearchRepository",
    "WorkspaceRecord",
    "create_database_manager",
]
