"""
AI Message Model

Stores individual chat turns (user, assistant or system) within conversations.
Messages are immutable once created.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship, Column
from sqlalchemy import JSON, String, Text

from app.utils.time import utcnow, new_id

if TYPE_CHECKING:
    from .ai_conversation import AIConversation


class MessageRole(str, Enum):
    """Message sender role"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class AIMessage(SQLModel, table=True):
    """
    Individual chat turn.

    Relationships:
    - Belongs to one AIConversation

    Append-only: messages are never updated after creation.
    """
    __tablename__ = "ai_messages"

    id: str = Field(default_factory=new_id, primary_key=True)
    conversation_id: str = Field(foreign_key="ai_conversations.id", index=True)
    role: str = Field(sa_column=Column(String(20), nullable=False))  # MessageRole value
    content: str = Field(sa_column=Column(Text, nullable=False))
    record_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, index=True)

    conversation: "AIConversation" = Relationship(
        back_populates="messages",
        sa_relationship_kwargs={"lazy": "select"}
    )
