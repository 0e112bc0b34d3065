"""Audit trail for record writes."""
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional

from app.models.audit_log import AuditLog


class AuditService:
    """Append and read audit entries. Entries are added to the caller's transaction."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        user_id: Optional[str],
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
        )
        self.session.add(entry)
        return entry

    def list_for_user(
        self,
        user_id: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: int = 100
    ) -> List[AuditLog]:
        """Most recent entries first."""
        statement = select(AuditLog).where(AuditLog.user_id == user_id)
        if resource_type:
            statement = statement.where(AuditLog.resource_type == resource_type)
        if resource_id:
            statement = statement.where(AuditLog.resource_id == resource_id)
        statement = statement.order_by(AuditLog.created_at.desc()).limit(limit)
        return list(self.session.exec(statement).all())
