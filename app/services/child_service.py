"""Child service."""
from sqlmodel import Session, select
from typing import List, Optional

from app.models.calendar_event import CalendarEvent
from app.models.child import Child
from app.models.incident import Incident
from app.schemas.child import ChildCreate, ChildUpdate
from app.services.audit_service import AuditService
from app.services.errors import RecordError, REFERENCED_RECORD, VALIDATION_ERROR
from app.services.record_validator import RecordValidator
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)


class ChildService:
    """CRUD for a user's children."""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def create(self, user_id: str, data: ChildCreate) -> Child:
        RecordValidator(self.session, user_id).require_unused_id(Child, data.id)

        fields = data.model_dump(exclude_none=True)
        child = Child(user_id=user_id, **fields)
        self.session.add(child)
        self.audit.record(user_id, "child.created", "child", child.id)
        self.session.commit()
        self.session.refresh(child)
        logger.info("Child created", user_id=user_id, child_id=child.id)
        return child

    def list_for_user(self, user_id: str) -> List[Child]:
        statement = (
            select(Child)
            .where(Child.user_id == user_id)
            .order_by(Child.first_name.asc())
        )
        return list(self.session.exec(statement).all())

    def get_by_id(self, child_id: str, user_id: str) -> Optional[Child]:
        """Get a child by ID, ensuring user ownership."""
        statement = (
            select(Child)
            .where(Child.id == child_id)
            .where(Child.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def update(self, child_id: str, user_id: str, data: ChildUpdate) -> Optional[Child]:
        child = self.get_by_id(child_id, user_id)
        if not child:
            return None

        changes = data.model_dump(exclude_unset=True)
        if "first_name" in changes and changes["first_name"] is None:
            raise RecordError(
                code=VALIDATION_ERROR,
                message="first_name is a required field",
                details={"field": "first_name"},
            )
        for field, value in changes.items():
            setattr(child, field, value)
        child.updated_at = utcnow()

        self.session.add(child)
        self.audit.record(user_id, "child.updated", "child", child_id, {"fields": sorted(changes)})
        self.session.commit()
        self.session.refresh(child)
        return child

    def delete(self, child_id: str, user_id: str) -> bool:
        """
        Delete a child.

        Rejected while an incident lists the child; calendar events about the
        child lose their link.
        """
        child = self.get_by_id(child_id, user_id)
        if not child:
            return False

        incidents = self.session.exec(select(Incident).where(Incident.user_id == user_id)).all()
        referencing = [incident.id for incident in incidents if child_id in incident.child_involved]
        if referencing:
            logger.warning("Child delete rejected", user_id=user_id, child_id=child_id, incident_ids=referencing)
            raise RecordError(
                code=REFERENCED_RECORD,
                message="Child is still listed in incidents",
                details={"incident_ids": referencing},
            )

        events = self.session.exec(
            select(CalendarEvent)
            .where(CalendarEvent.user_id == user_id)
            .where(CalendarEvent.child_id == child_id)
        ).all()
        for event in events:
            event.child_id = None
            event.updated_at = utcnow()
            self.session.add(event)

        self.session.delete(child)
        self.audit.record(user_id, "child.deleted", "child", child_id, {"unlinked_events": len(events)})
        self.session.commit()
        return True
