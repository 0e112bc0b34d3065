"""Calendar service."""
from datetime import date
from sqlalchemy import or_
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional

from app.models.calendar_event import CalendarEvent
from app.schemas.calendar_event import CalendarEventCreate, CalendarEventUpdate
from app.services.audit_service import AuditService
from app.services.errors import RecordError, VALIDATION_ERROR
from app.services.record_validator import RecordValidator
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

REQUIRED_FIELDS = {"title", "start_date", "all_day", "recurring"}


def check_schedule(
    start_date: date,
    end_date: Optional[date],
    recurring: bool,
    recurrence_rule: Optional[Dict[str, Any]]
) -> None:
    """Checks that involve more than one field, run on the merged record."""
    if end_date is not None and end_date < start_date:
        raise RecordError(
            code=VALIDATION_ERROR,
            message="end_date must not be before start_date",
            details={"field": "end_date"},
        )
    if recurrence_rule is not None and not recurring:
        raise RecordError(
            code=VALIDATION_ERROR,
            message="recurrence_rule is only allowed on recurring events",
            details={"field": "recurrence_rule"},
        )


class CalendarService:
    """CRUD for calendar events."""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def create(self, user_id: str, data: CalendarEventCreate) -> CalendarEvent:
        validator = RecordValidator(self.session, user_id)
        validator.require_unused_id(CalendarEvent, data.id)
        if data.child_id:
            validator.check_children([data.child_id], "child_id")

        check_schedule(data.start_date, data.end_date, data.recurring, data.recurrence_rule)
        event = CalendarEvent(user_id=user_id, **data.model_dump(exclude_none=True))

        self.session.add(event)
        self.audit.record(user_id, "calendar_event.created", "calendar_event", event.id)
        self.session.commit()
        self.session.refresh(event)
        logger.info("Calendar event created", user_id=user_id, event_id=event.id)
        return event

    def list_for_user(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        child_id: Optional[str] = None,
        event_type: Optional[str] = None
    ) -> List[CalendarEvent]:
        """Events overlapping the [start, end] window, in start order."""
        statement = select(CalendarEvent).where(CalendarEvent.user_id == user_id)
        if start:
            # Events without an end date are single-day events
            statement = statement.where(or_(
                CalendarEvent.end_date >= start,
                (CalendarEvent.end_date.is_(None)) & (CalendarEvent.start_date >= start),
            ))
        if end:
            statement = statement.where(CalendarEvent.start_date <= end)
        if child_id:
            statement = statement.where(CalendarEvent.child_id == child_id)
        if event_type:
            statement = statement.where(CalendarEvent.event_type == event_type)

        # Untimed (all-day) events first within a day, on every backend
        statement = statement.order_by(CalendarEvent.start_date.asc(), CalendarEvent.start_time.asc().nulls_first())
        return list(self.session.exec(statement).all())

    def get_by_id(self, event_id: str, user_id: str) -> Optional[CalendarEvent]:
        statement = (
            select(CalendarEvent)
            .where(CalendarEvent.id == event_id)
            .where(CalendarEvent.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def update(self, event_id: str, user_id: str, data: CalendarEventUpdate) -> Optional[CalendarEvent]:
        event = self.get_by_id(event_id, user_id)
        if not event:
            return None

        changes = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise RecordError(
                    code=VALIDATION_ERROR,
                    message=f"{field} is a required field",
                    details={"field": field},
                )
        if changes.get("child_id"):
            RecordValidator(self.session, user_id).check_children([changes["child_id"]], "child_id")

        # Validate the merged record before touching the stored one
        check_schedule(**{
            field: changes.get(field, getattr(event, field))
            for field in ("start_date", "end_date", "recurring", "recurrence_rule")
        })

        for field, value in changes.items():
            setattr(event, field, value)
        event.updated_at = utcnow()

        self.session.add(event)
        self.audit.record(user_id, "calendar_event.updated", "calendar_event", event_id,
                          {"fields": sorted(changes)})
        self.session.commit()
        self.session.refresh(event)
        return event

    def delete(self, event_id: str, user_id: str) -> bool:
        event = self.get_by_id(event_id, user_id)
        if not event:
            return False

        self.session.delete(event)
        self.audit.record(user_id, "calendar_event.deleted", "calendar_event", event_id)
        self.session.commit()
        return True
