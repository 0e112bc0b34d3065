"""Contact schemas for the records API."""
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models.contact import IdentifierType


class ContactCreate(BaseModel):
    """Schema for adding a contact by hand."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    primary_email: Optional[str] = Field(None, min_length=3, max_length=255)
    primary_phone: Optional[str] = Field(None, min_length=1, max_length=50)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ContactUpdate(BaseModel):
    """Absent fields are left alone; null clears an optional field."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    primary_email: Optional[str] = Field(None, min_length=3, max_length=255)
    primary_phone: Optional[str] = Field(None, min_length=1, max_length=50)
    metadata: Optional[Dict[str, Any]] = None


class FindOrCreateContact(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=255)


class IdentifierCreate(BaseModel):
    identifier_type: IdentifierType
    identifier_value: str = Field(..., min_length=1, max_length=255)
    confidence_score: float = Field(1.0, ge=0.0, le=1.0)
    verified: bool = False
    source: Optional[str] = Field(None, max_length=100)

    class Config:
        use_enum_values = True


class IdentifierRead(BaseModel):
    id: str
    contact_id: str
    identifier_type: IdentifierType
    identifier_value: str
    confidence_score: float
    verified: bool
    source: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ContactRead(BaseModel):
    id: str
    user_id: str
    name: str
    display_name: Optional[str] = None
    primary_email: Optional[str] = None
    primary_phone: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("record_metadata", "metadata"),
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContactDetail(ContactRead):
    """Contact with every known identifier, most confident first."""
    identifiers: List[IdentifierRead] = Field(default_factory=list)


class ContactSummary(ContactDetail):
    """Contact with how much and when the user has heard from them."""
    message_count: int = 0
    first_communication: Optional[datetime] = None
    last_communication: Optional[datetime] = None
