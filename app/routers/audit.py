"""Audit log router (read-only)."""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.schemas.audit import AuditLogRead
from app.services.audit_service import AuditService
from sqlmodel import Session

router = APIRouter(tags=["Audit"])  # No prefix since main.py adds /api prefix


@router.get("/{user_id}/audit-logs", response_model=List[AuditLogRead])
async def list_audit_logs(
    user_id: str = Depends(verify_user_access),
    session: Session = Depends(get_session),
    resource_type: Optional[str] = Query(None, description="e.g. incident, document"),
    resource_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
):
    entries = AuditService(session).list_for_user(
        user_id, resource_type=resource_type, resource_id=resource_id, limit=limit
    )
    return [AuditLogRead.model_validate(entry) for entry in entries]
