"""Incident model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, String, Text
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional

from app.utils.time import utcnow, new_id


class IncidentType(str, Enum):
    CONFLICT = "conflict"
    VIOLATION = "violation"
    CONCERN = "concern"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    LEGAL = "legal"
    MEDICAL = "medical"
    SCHOOL = "school"
    OTHER = "other"


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Incident(SQLModel, table=True):
    """
    Logged event of concern.

    evidence is a list of {"document_ids": [...], "communication_ids": [...]}
    groups; every id must resolve to a record of the same user.
    child_involved holds Child ids.
    """
    __tablename__ = "incidents"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    description: str = Field(sa_column=Column(Text, nullable=False))
    incident_date: date = Field(index=True)
    incident_time: Optional[time] = Field(default=None)
    location: Optional[str] = Field(default=None, max_length=500)
    type: Optional[str] = Field(default=None, sa_column=Column(String(100), index=True))
    severity: Optional[str] = Field(default=None, sa_column=Column(String(20), index=True))
    parties_involved: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    witnesses: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    police_involved: bool = Field(default=False)
    police_report_number: Optional[str] = Field(default=None, max_length=100)
    child_involved: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    evidence: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    follow_up_required: bool = Field(default=False)
    follow_up_notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
