"""Calendar event model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, ForeignKey, JSON, String, Text
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Optional

from app.utils.time import utcnow, new_id


class EventType(str, Enum):
    CUSTODY = "custody"
    COURT = "court"
    MEDICAL = "medical"
    SCHOOL = "school"
    ACTIVITY = "activity"
    OTHER = "other"


class CalendarEvent(SQLModel, table=True):
    """Scheduled event, optionally about one child."""
    __tablename__ = "calendar_events"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    event_type: Optional[str] = Field(default=None, sa_column=Column(String(50)))
    start_date: date = Field(index=True)
    start_time: Optional[time] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    end_time: Optional[time] = Field(default=None)
    all_day: bool = Field(default=False)
    location: Optional[str] = Field(default=None, max_length=500)
    child_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String, ForeignKey("children.id", ondelete="SET NULL"), index=True, nullable=True)
    )
    recurring: bool = Field(default=False)
    recurrence_rule: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    reminder_minutes: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
