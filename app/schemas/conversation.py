"""AI conversation and message schemas."""
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models.ai_message import MessageRole


class ConversationContext(BaseModel):
    """Case records a conversation is about."""
    document_ids: List[str] = Field(default_factory=list)
    incident_ids: List[str] = Field(default_factory=list)
    communication_ids: List[str] = Field(default_factory=list)


class ConversationCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    context: ConversationContext = Field(default_factory=ConversationContext)


class ConversationRead(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    context: ConversationContext
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConversationListItem(BaseModel):
    """Conversation list item schema"""
    id: str
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    message_count: int
    last_message: Optional[str] = None


class ConversationListResponse(BaseModel):
    conversations: List[ConversationListItem]


class MessageCreate(BaseModel):
    role: MessageRole
    content: str = Field(..., min_length=1, max_length=20000)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        use_enum_values = True


class MessageRead(BaseModel):
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("record_metadata", "metadata"),
    )
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationMessagesResponse(BaseModel):
    messages: List[MessageRead]
