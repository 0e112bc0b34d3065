"""
Communication Model

An imported message (email, SMS, iMessage, OurFamilyWizard or other).
Core fields are written once on import; only the analysis results and the
flag can change afterwards. Communications are never deleted.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, ForeignKey, JSON, String, Text

from app.utils.time import utcnow, new_id


class CommunicationType(str, Enum):
    """Channel the message came from"""
    EMAIL = "email"
    SMS = "sms"
    IMESSAGE = "imessage"
    OUR_FAMILY_WIZARD = "our_family_wizard"
    OTHER = "other"


class CommunicationDirection(str, Enum):
    SENT = "sent"
    RECEIVED = "received"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Communication(SQLModel, table=True):
    """
    Imported message record.

    Invariants:
    - flagged is True exactly when flag_reason is set
    - (user_id, original_id) identifies a message from its source system
    - contact_id, when set, is a Contact of the same user
    """
    __tablename__ = "communications"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: str = Field(sa_column=Column(String(50), nullable=False, index=True))
    direction: str = Field(sa_column=Column(String(10), nullable=False))
    sender: Optional[str] = Field(default=None, max_length=255)
    recipient: Optional[str] = Field(default=None, max_length=255)
    subject: Optional[str] = Field(default=None, sa_column=Column(Text))
    body: Optional[str] = Field(default=None, sa_column=Column(Text))
    attachments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # "metadata" is reserved on SQLAlchemy declarative classes
    record_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    sent_at: Optional[datetime] = Field(default=None, index=True)
    received_at: Optional[datetime] = Field(default=None)
    imported_at: datetime = Field(default_factory=utcnow)
    analysis_results: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    flagged: bool = Field(default=False, index=True)
    flag_reason: Optional[str] = Field(default=None, sa_column=Column(Text))
    thread_id: Optional[str] = Field(default=None, max_length=255, index=True)
    original_id: Optional[str] = Field(default=None, max_length=255, index=True)
    contact_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String, ForeignKey("contacts.id", ondelete="SET NULL"), index=True, nullable=True)
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
