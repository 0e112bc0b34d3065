"""
Contact Model

A person the user corresponds with. A contact has a primary email and
phone plus any number of extra identifiers (other addresses, numbers, name
spellings) used to match imported communications to the person.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, ForeignKey, JSON, String, UniqueConstraint

from app.utils.time import utcnow, new_id


class IdentifierType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    NAME_VARIATION = "name_variation"


class Contact(SQLModel, table=True):
    """
    Correspondent of one user.

    primary_email and primary_phone are unique per user; emails are stored
    lowercase.
    """
    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("user_id", "primary_email"),
        UniqueConstraint("user_id", "primary_phone"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    name: str = Field(max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255)
    primary_email: Optional[str] = Field(default=None, max_length=255, index=True)
    primary_phone: Optional[str] = Field(default=None, max_length=50, index=True)
    record_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    identifiers: List["ContactIdentifier"] = Relationship(
        back_populates="contact",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "lazy": "select"}
    )


class ContactIdentifier(SQLModel, table=True):
    """Extra email, phone or name spelling that belongs to a contact."""
    __tablename__ = "contact_identifiers"
    __table_args__ = (
        UniqueConstraint("contact_id", "identifier_type", "identifier_value"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    contact_id: str = Field(
        sa_column=Column(String, ForeignKey("contacts.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    identifier_type: str = Field(sa_column=Column(String(20), nullable=False))  # IdentifierType value
    identifier_value: str = Field(max_length=255, index=True)
    confidence_score: float = Field(default=1.0)  # 0..1, how sure the match is
    verified: bool = Field(default=False)
    source: Optional[str] = Field(default=None, max_length=100)  # e.g. gmail, messages, manual
    created_at: datetime = Field(default_factory=utcnow)

    contact: Contact = Relationship(
        back_populates="identifiers",
        sa_relationship_kwargs={"lazy": "select"}
    )
