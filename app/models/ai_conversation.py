"""
AI Conversation Model

Stores chat sessions between a user and the AI assistant.
Each conversation belongs to one user, carries the case records it talks
about (its context) and contains multiple messages.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON

from app.utils.time import utcnow, new_id

if TYPE_CHECKING:
    from .ai_message import AIMessage

CONTEXT_KEYS = ("document_ids", "incident_ids", "communication_ids")


def empty_context() -> Dict[str, List[str]]:
    return {key: [] for key in CONTEXT_KEYS}


class AIConversation(SQLModel, table=True):
    """
    Chat session scoped to case context.

    Relationships:
    - Belongs to one User
    - Has many AIMessages

    The context only grows: ids are attached, never detached.
    """
    __tablename__ = "ai_conversations"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: Optional[str] = Field(default=None, max_length=255)
    context: Dict[str, Any] = Field(default_factory=empty_context, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    messages: List["AIMessage"] = Relationship(
        back_populates="conversation",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "lazy": "select"}
    )
