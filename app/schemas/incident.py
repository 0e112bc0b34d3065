"""Incident schemas for the records API."""
from pydantic import BaseModel, Field
from datetime import date, datetime, time
from typing import List, Optional

from app.models.incident import IncidentSeverity, IncidentType


class EvidenceLink(BaseModel):
    """A group of documents and communications supporting an incident."""
    document_ids: List[str] = Field(default_factory=list)
    communication_ids: List[str] = Field(default_factory=list)


class IncidentCreate(BaseModel):
    """Schema for logging an incident."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    incident_date: date
    incident_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=500)
    type: Optional[IncidentType] = None
    severity: Optional[IncidentSeverity] = None
    parties_involved: List[str] = Field(default_factory=list)
    witnesses: List[str] = Field(default_factory=list)
    police_involved: bool = False
    police_report_number: Optional[str] = Field(None, max_length=100)
    child_involved: List[str] = Field(default_factory=list)  # Child ids
    evidence: List[EvidenceLink] = Field(default_factory=list)
    follow_up_required: bool = False
    follow_up_notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    class Config:
        use_enum_values = True


class IncidentUpdate(BaseModel):
    """Schema for updating an incident. Absent fields are left alone."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    incident_date: Optional[date] = None
    incident_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=500)
    type: Optional[IncidentType] = None
    severity: Optional[IncidentSeverity] = None
    parties_involved: Optional[List[str]] = None
    witnesses: Optional[List[str]] = None
    police_involved: Optional[bool] = None
    police_report_number: Optional[str] = Field(None, max_length=100)
    child_involved: Optional[List[str]] = None
    evidence: Optional[List[EvidenceLink]] = None
    follow_up_required: Optional[bool] = None
    follow_up_notes: Optional[str] = None
    tags: Optional[List[str]] = None

    class Config:
        use_enum_values = True


class IncidentRead(BaseModel):
    """Schema for incident API responses."""
    id: str
    user_id: str
    title: str
    description: str
    incident_date: date
    incident_time: Optional[time] = None
    location: Optional[str] = None
    type: Optional[IncidentType] = None
    severity: Optional[IncidentSeverity] = None
    parties_involved: List[str] = Field(default_factory=list)
    witnesses: List[str] = Field(default_factory=list)
    police_involved: bool
    police_report_number: Optional[str] = None
    child_involved: List[str] = Field(default_factory=list)
    evidence: List[EvidenceLink] = Field(default_factory=list)
    follow_up_required: bool
    follow_up_notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TimelineEntry(BaseModel):
    id: str
    title: str
    incident_date: date
    incident_time: Optional[time] = None
    type: Optional[IncidentType] = None
    severity: Optional[IncidentSeverity] = None
    evidence_count: int


class IncidentTimeline(BaseModel):
    timeline: List[TimelineEntry]
    total_incidents: int
