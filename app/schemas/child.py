"""Child schemas for the records API."""
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class ChildCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    medical_notes: Optional[str] = None


class ChildUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    medical_notes: Optional[str] = None


class ChildRead(BaseModel):
    id: str
    user_id: str
    first_name: str
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    medical_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
