"""Document schemas for the records API."""
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models.document import DocumentType


class DocumentCreate(BaseModel):
    """Schema for registering an uploaded document."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[DocumentType] = None
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, max_length=100)
    s3_key: str = Field(..., min_length=1, max_length=500)
    s3_bucket: str = Field(..., min_length=1, max_length=255)
    checksum: Optional[str] = Field(None, max_length=64)  # SHA-256 hex digest
    encrypted: bool = True
    ocr_text: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list, max_length=50)
    related_incident_id: Optional[str] = None

    class Config:
        use_enum_values = True


class DocumentUpdate(BaseModel):
    """Schema for updating document metadata. Absent fields are left alone."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[DocumentType] = None
    mime_type: Optional[str] = Field(None, max_length=100)
    checksum: Optional[str] = Field(None, max_length=64)
    encrypted: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = Field(None, max_length=50)
    related_incident_id: Optional[str] = None

    class Config:
        use_enum_values = True


class DocumentChecksum(BaseModel):
    checksum: str = Field(..., min_length=64, max_length=64)


class DocumentOCR(BaseModel):
    ocr_text: str
    tags: Optional[List[str]] = Field(None, max_length=50)


class DocumentRead(BaseModel):
    """Schema for document API responses."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    type: Optional[DocumentType] = None
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    s3_key: str
    s3_bucket: str
    checksum: Optional[str] = None
    encrypted: bool
    ocr_text: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("record_metadata", "metadata"),
    )
    tags: List[str] = Field(default_factory=list)
    related_incident_id: Optional[str] = None
    uploaded_at: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
