"""User model for SQLModel."""
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional

from app.utils.time import utcnow, new_id


class User(SQLModel, table=True):
    """Account holder. Every other record is owned by exactly one user."""
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, index=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    mfa_enabled: bool = Field(default=False)
    email_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login: Optional[datetime] = Field(default=None)
    is_active: bool = Field(default=True)
