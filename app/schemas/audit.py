"""Audit log schemas."""
from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, Optional


class AuditLogRead(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    details: Dict[str, Any]
    created_at: datetime

    class Config:
        from_attributes = True
