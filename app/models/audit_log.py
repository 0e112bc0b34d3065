"""Audit log model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime
from typing import Any, Dict, Optional

from app.utils.time import utcnow, new_id


class AuditLog(SQLModel, table=True):
    """One entry per record write (create, update, flag, delete...)."""
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    action: str = Field(max_length=100, index=True)  # e.g. incident.created
    resource_type: Optional[str] = Field(default=None, max_length=50)
    resource_id: Optional[str] = Field(default=None, max_length=36)
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, index=True)
