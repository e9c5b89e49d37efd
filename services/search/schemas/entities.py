"""Read-only snapshots of the entities the search service ranks."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageRole(str, Enum):
    """Author role of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class SearchableConversation(BaseModel):
    """Conversation as seen by search."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Conversation ID")
    title: str = Field(..., description="Conversation title")
    workspace_id: str = Field(..., description="Owning workspace ID")
    user_id: str = Field(..., description="Owner of the workspace")
    created_at: datetime = Field(..., description="Creation timestamp")


class SearchableMessage(BaseModel):
    """Message as seen by search."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Message ID")
    conversation_id: str = Field(..., description="Parent conversation ID")
    user_id: str = Field(..., description="Owner of the conversation's workspace")
    role: MessageRole = Field(..., description="Message author role")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(..., description="Creation timestamp")


class KnowledgeItem(BaseModel):
    """Knowledge base item as seen by search.

    The embedding is produced out-of-band when the item is written and is
    never serialized back to API clients.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Knowledge item ID")
    user_id: str = Field(..., description="Owner ID")
    title: str = Field(..., description="Item title")
    content: str = Field(default="", description="Item body")
    tags: list[str] = Field(default_factory=list, description="Unique, unordered tags")
    embedding: Optional[list[float]] = Field(
        default=None,
        exclude=True,
        description="Precomputed embedding vector",
    )
    created_at: datetime = Field(..., description="Creation timestamp")

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value):
        if value is None:
            return []
        return list(dict.fromkeys(value))

    @field_validator("embedding", mode="before")
    @classmethod
    def _empty_embedding_is_missing(cls, value):
        if value is None:
            return None
        # pgvector loads numpy arrays
        if hasattr(value, "tolist"):
            value = value.tolist()
        if len(value) == 0:
            return None
        return value

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None
