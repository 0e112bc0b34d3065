"""Calendar event schemas for the records API."""
from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from app.models.calendar_event import EventType


class CalendarEventCreate(BaseModel):
    """Schema for scheduling an event."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    start_date: date
    start_time: Optional[time] = None
    end_date: Optional[date] = None
    end_time: Optional[time] = None
    all_day: bool = False
    location: Optional[str] = Field(None, max_length=500)
    child_id: Optional[str] = None
    recurring: bool = False
    recurrence_rule: Optional[Dict[str, Any]] = None  # e.g. {"freq": "weekly", "by_day": ["FR"]}
    reminder_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_schedule(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.recurrence_rule is not None and not self.recurring:
            raise ValueError("recurrence_rule is only allowed on recurring events")
        return self


class CalendarEventUpdate(BaseModel):
    """Schema for updating an event. Absent fields are left alone."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    start_date: Optional[date] = None
    start_time: Optional[time] = None
    end_date: Optional[date] = None
    end_time: Optional[time] = None
    all_day: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=500)
    child_id: Optional[str] = None
    recurring: Optional[bool] = None
    recurrence_rule: Optional[Dict[str, Any]] = None
    reminder_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    class Config:
        use_enum_values = True


class CalendarEventRead(BaseModel):
    """Schema for calendar event API responses."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    start_date: date
    start_time: Optional[time] = None
    end_date: Optional[date] = None
    end_time: Optional[time] = None
    all_day: bool
    location: Optional[str] = None
    child_id: Optional[str] = None
    recurring: bool
    recurrence_rule: Optional[Dict[str, Any]] = None
    reminder_minutes: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
