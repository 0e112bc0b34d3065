"""Child model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from datetime import date, datetime
from typing import Optional

from app.utils.time import utcnow, new_id


class Child(SQLModel, table=True):
    """A dependent of the owning user."""
    __tablename__ = "children"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    first_name: str = Field(max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    date_of_birth: Optional[date] = Field(default=None)
    medical_notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
