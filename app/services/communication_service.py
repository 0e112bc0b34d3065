"""
Communication Service

Import and annotation of communication records.

Communications are written once on import. Afterwards only the analysis
results and the flag may change, and they are never deleted.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.communication import Communication
from app.schemas.communication import AnalysisResults, CommunicationBatch, CommunicationCreate
from app.services.audit_service import AuditService
from app.services.record_validator import RecordValidator, check_flag_consistency
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

# When the message happened, falling back to when we learned about it
OCCURRED_AT = func.coalesce(Communication.sent_at, Communication.received_at, Communication.imported_at)


class CommunicationService:
    """Service for importing, searching and flagging communications"""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def _build(self, user_id: str, data: CommunicationCreate) -> Communication:
        check_flag_consistency(data.flagged, data.flag_reason)
        fields = data.model_dump(exclude={"metadata", "analysis_results", "flag_reason"}, exclude_none=True)
        return Communication(
            user_id=user_id,
            record_metadata=data.metadata,
            analysis_results=data.analysis_results.model_dump(exclude_none=True),
            flag_reason=data.flag_reason.strip() if data.flag_reason else None,
            **fields,
        )

    def import_one(self, user_id: str, data: CommunicationCreate) -> Communication:
        """Store one imported communication."""
        validator = RecordValidator(self.session, user_id)
        validator.require_unused_id(Communication, data.id)
        validator.check_contact(data.contact_id)
        communication = self._build(user_id, data)

        self.session.add(communication)
        self.audit.record(user_id, "communication.imported", "communication", communication.id,
                          {"type": communication.type, "direction": communication.direction})
        self.session.commit()
        self.session.refresh(communication)
        logger.info("Communication imported", user_id=user_id, communication_id=communication.id)
        return communication

    def import_batch(self, user_id: str, batch: CommunicationBatch) -> Tuple[List[Communication], int]:
        """
        Store a batch of communications in one transaction.

        Records whose original_id is already stored for this user (or repeated
        within the batch) are skipped. Returns the created records and the
        number skipped.
        """
        validator = RecordValidator(self.session, user_id)
        original_ids = [item.original_id for item in batch.communications if item.original_id]
        known = set()
        if original_ids:
            known = set(self.session.exec(
                select(Communication.original_id)
                .where(Communication.user_id == user_id)
                .where(Communication.original_id.in_(original_ids))
            ).all())

        created: List[Communication] = []
        skipped = 0
        for item in batch.communications:
            if item.original_id and item.original_id in known:
                skipped += 1
                continue
            validator.require_unused_id(Communication, item.id)
            validator.check_contact(item.contact_id)
            communication = self._build(user_id, item)
            self.session.add(communication)
            created.append(communication)
            if item.original_id:
                known.add(item.original_id)

        self.audit.record(user_id, "communication.batch_imported", "communication", None,
                          {"imported": len(created), "skipped": skipped})
        self.session.commit()
        for communication in created:
            self.session.refresh(communication)

        logger.info("Communication batch imported", user_id=user_id, imported=len(created), skipped=skipped)
        return created, skipped

    def get_by_id(self, communication_id: str, user_id: str) -> Optional[Communication]:
        """Get communication ensuring ownership"""
        statement = select(Communication).where(
            Communication.id == communication_id,
            Communication.user_id == user_id
        )
        return self.session.exec(statement).first()

    def search(
        self,
        user_id: str,
        type: Optional[str] = None,
        direction: Optional[str] = None,
        flagged: Optional[bool] = None,
        thread_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[Communication]:
        """Search a user's communications, most recent first."""
        statement = select(Communication).where(Communication.user_id == user_id)

        if type:
            statement = statement.where(Communication.type == type)
        if direction:
            statement = statement.where(Communication.direction == direction)
        if flagged is not None:
            statement = statement.where(Communication.flagged == flagged)
        if thread_id:
            statement = statement.where(Communication.thread_id == thread_id)
        if contact_id:
            statement = statement.where(Communication.contact_id == contact_id)
        if date_from:
            statement = statement.where(OCCURRED_AT >= date_from)
        if date_to:
            statement = statement.where(OCCURRED_AT <= date_to)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(or_(
                Communication.subject.ilike(pattern),
                Communication.body.ilike(pattern),
                Communication.sender.ilike(pattern),
                Communication.recipient.ilike(pattern),
            ))

        statement = statement.order_by(OCCURRED_AT.desc(), Communication.id).offset(offset).limit(limit)
        return list(self.session.exec(statement).all())

    def get_thread(self, user_id: str, thread_id: str) -> List[Communication]:
        """Messages of one thread in the order they happened."""
        statement = (
            select(Communication)
            .where(Communication.user_id == user_id)
            .where(Communication.thread_id == thread_id)
            .order_by(OCCURRED_AT.asc(), Communication.id)
        )
        return list(self.session.exec(statement).all())

    def get_stats(self, user_id: str) -> Dict[str, Any]:
        """Totals by type and direction plus the flagged count."""
        by_type = dict(self.session.exec(
            select(Communication.type, func.count())
            .where(Communication.user_id == user_id)
            .group_by(Communication.type)
        ).all())
        by_direction = dict(self.session.exec(
            select(Communication.direction, func.count())
            .where(Communication.user_id == user_id)
            .group_by(Communication.direction)
        ).all())
        flagged = self.session.exec(
            select(func.count())
            .select_from(Communication)
            .where(Communication.user_id == user_id)
            .where(Communication.flagged == True)  # noqa: E712
        ).one()

        return {
            "total": sum(by_type.values()),
            "flagged": flagged,
            "by_type": by_type,
            "by_direction": by_direction,
        }

    def record_analysis(
        self,
        communication_id: str,
        user_id: str,
        results: AnalysisResults
    ) -> Optional[Communication]:
        """Replace the analysis results of a communication."""
        communication = self.get_by_id(communication_id, user_id)
        if not communication:
            return None

        communication.analysis_results = results.model_dump(exclude_none=True)
        communication.updated_at = utcnow()
        self.session.add(communication)
        self.audit.record(user_id, "communication.analyzed", "communication", communication_id)
        self.session.commit()
        self.session.refresh(communication)
        return communication

    def flag(self, communication_id: str, user_id: str, reason: str) -> Optional[Communication]:
        """Flag a communication. A non-blank reason is required."""
        communication = self.get_by_id(communication_id, user_id)
        if not communication:
            return None

        reason = reason.strip()
        check_flag_consistency(True, reason)
        communication.flagged = True
        communication.flag_reason = reason
        communication.updated_at = utcnow()

        self.session.add(communication)
        self.audit.record(user_id, "communication.flagged", "communication", communication_id, {"reason": reason})
        self.session.commit()
        self.session.refresh(communication)
        logger.info("Communication flagged", user_id=user_id, communication_id=communication_id)
        return communication

    def unflag(self, communication_id: str, user_id: str) -> Optional[Communication]:
        """Clear the flag and its reason together."""
        communication = self.get_by_id(communication_id, user_id)
        if not communication:
            return None

        communication.flagged = False
        communication.flag_reason = None
        communication.updated_at = utcnow()

        self.session.add(communication)
        self.audit.record(user_id, "communication.unflagged", "communication", communication_id)
        self.session.commit()
        self.session.refresh(communication)
        return communication
