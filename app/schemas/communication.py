"""Communication schemas for the records API."""
from pydantic import AliasChoices, BaseModel, Field, model_validator
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models.communication import CommunicationDirection, CommunicationType, Sentiment


class AnalysisResults(BaseModel):
    """Output of whatever analysis process looked at the message."""
    sentiment: Optional[Sentiment] = None
    keywords: Optional[List[str]] = None
    flags: Optional[List[str]] = None

    class Config:
        use_enum_values = True


class CommunicationCreate(BaseModel):
    """Schema for importing a communication."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    type: CommunicationType
    direction: CommunicationDirection
    sender: Optional[str] = Field(None, max_length=255)
    recipient: Optional[str] = Field(None, max_length=255)
    subject: Optional[str] = None
    body: Optional[str] = None
    attachments: List[Any] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    sent_at: Optional[datetime] = None
    received_at: Optional[datetime] = None
    analysis_results: AnalysisResults = Field(default_factory=AnalysisResults)
    flagged: bool = False
    flag_reason: Optional[str] = None
    thread_id: Optional[str] = Field(None, max_length=255)
    original_id: Optional[str] = Field(None, max_length=255)  # Message id in the source system
    contact_id: Optional[str] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def flag_matches_reason(self):
        if self.flagged != bool(self.flag_reason and self.flag_reason.strip()):
            raise ValueError("flagged must be true if and only if flag_reason is set")
        return self


class CommunicationBatch(BaseModel):
    communications: List[CommunicationCreate] = Field(..., min_length=1, max_length=500)


class CommunicationBatchResult(BaseModel):
    imported: int
    skipped: int
    ids: List[str]


class CommunicationFlag(BaseModel):
    """Body for flagging a communication."""
    reason: str = Field(..., min_length=1, max_length=1000)


class CommunicationAnalysisUpdate(BaseModel):
    analysis_results: AnalysisResults


class CommunicationStats(BaseModel):
    total: int
    flagged: int
    by_type: Dict[str, int]
    by_direction: Dict[str, int]


class CommunicationRead(BaseModel):
    """Schema for communication API responses."""
    id: str
    user_id: str
    type: CommunicationType
    direction: CommunicationDirection
    sender: Optional[str] = None
    recipient: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    attachments: List[Any] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("record_metadata", "metadata"),
    )
    sent_at: Optional[datetime] = None
    received_at: Optional[datetime] = None
    imported_at: datetime
    analysis_results: AnalysisResults = Field(default_factory=AnalysisResults)
    flagged: bool
    flag_reason: Optional[str] = None
    thread_id: Optional[str] = None
    original_id: Optional[str] = None
    contact_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
