"""Document model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, String, Text
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from app.utils.time import utcnow, new_id


class DocumentType(str, Enum):
    COURT_ORDER = "court_order"
    AGREEMENT = "agreement"
    FINANCIAL = "financial"
    MEDICAL = "medical"
    SCHOOL = "school"
    LEGAL = "legal"
    CORRESPONDENCE = "correspondence"
    OTHER = "other"


class Document(SQLModel, table=True):
    """Uploaded file record. The file itself lives at s3_bucket/s3_key."""
    __tablename__ = "documents"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    type: Optional[str] = Field(default=None, sa_column=Column(String(100), index=True))
    file_name: str = Field(max_length=255)
    file_size: Optional[int] = Field(default=None)
    mime_type: Optional[str] = Field(default=None, max_length=100)
    s3_key: str = Field(max_length=500)
    s3_bucket: str = Field(max_length=255)
    checksum: Optional[str] = Field(default=None, max_length=64)  # SHA-256 hex, write-once
    encrypted: bool = Field(default=True)
    ocr_text: Optional[str] = Field(default=None, sa_column=Column(Text))
    record_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    related_incident_id: Optional[str] = Field(default=None, index=True)
    uploaded_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
