"""Incident service: logging incidents and linking their evidence."""
from datetime import date
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional

from app.models.document import Document
from app.models.incident import Incident
from app.schemas.incident import EvidenceLink, IncidentCreate, IncidentUpdate
from app.services.audit_service import AuditService
from app.services.errors import RecordError, REFERENCED_RECORD, VALIDATION_ERROR
from app.services.record_validator import RecordValidator
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

# Fields that may be omitted from an update but never set to null
REQUIRED_FIELDS = {"title", "description", "incident_date", "police_involved", "follow_up_required"}
LIST_FIELDS = {"parties_involved", "witnesses", "child_involved", "tags"}


class IncidentService:
    """
    Service class for incidents.

    Evidence groups and involved children are checked against the user's
    stored records before every write, so an incident never points at a
    record that does not exist.
    """

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def create(self, user_id: str, data: IncidentCreate) -> Incident:
        evidence = [link.model_dump() for link in data.evidence]

        validator = RecordValidator(self.session, user_id)
        validator.require_unused_id(Incident, data.id)
        self._check_references(validator, evidence, data.child_involved)

        fields = data.model_dump(exclude={"evidence"}, exclude_none=True)
        incident = Incident(user_id=user_id, evidence=evidence, **fields)
        self.session.add(incident)
        self.audit.record(user_id, "incident.created", "incident", incident.id,
                          {"evidence_groups": len(evidence)})
        self.session.commit()
        self.session.refresh(incident)
        logger.info("Incident created", user_id=user_id, incident_id=incident.id)
        return incident

    def _check_references(
        self,
        validator: RecordValidator,
        evidence: List[Dict[str, Any]],
        child_ids: List[str]
    ) -> None:
        try:
            validator.check_evidence(evidence)
            validator.check_children(child_ids)
        except RecordError as e:
            logger.warning("Incident write rejected", user_id=validator.user_id, code=e.code, **e.details)
            raise

    def list_for_user(
        self,
        user_id: str,
        type: Optional[str] = None,
        severity: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        follow_up_required: Optional[bool] = None
    ) -> List[Incident]:
        """Incidents most recent first."""
        statement = select(Incident).where(Incident.user_id == user_id)
        if type:
            statement = statement.where(Incident.type == type)
        if severity:
            statement = statement.where(Incident.severity == severity)
        if date_from:
            statement = statement.where(Incident.incident_date >= date_from)
        if date_to:
            statement = statement.where(Incident.incident_date <= date_to)
        if follow_up_required is not None:
            statement = statement.where(Incident.follow_up_required == follow_up_required)

        statement = statement.order_by(Incident.incident_date.desc(), Incident.created_at.desc())
        return list(self.session.exec(statement).all())

    def get_by_id(self, incident_id: str, user_id: str) -> Optional[Incident]:
        """Get an incident by ID, ensuring user ownership."""
        statement = (
            select(Incident)
            .where(Incident.id == incident_id)
            .where(Incident.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def update(self, incident_id: str, user_id: str, data: IncidentUpdate) -> Optional[Incident]:
        incident = self.get_by_id(incident_id, user_id)
        if not incident:
            return None

        changes = data.model_dump(exclude_unset=True, exclude={"evidence"})
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise RecordError(
                    code=VALIDATION_ERROR,
                    message=f"{field} is a required field",
                    details={"field": field},
                )
        for field in LIST_FIELDS:
            if field in changes and changes[field] is None:
                changes[field] = []

        evidence = incident.evidence
        if "evidence" in data.model_fields_set:
            evidence = [link.model_dump() for link in data.evidence or []]
        child_ids = changes.get("child_involved", incident.child_involved)
        self._check_references(RecordValidator(self.session, user_id), evidence, child_ids)

        for field, value in changes.items():
            setattr(incident, field, value)
        incident.evidence = evidence
        incident.updated_at = utcnow()

        self.session.add(incident)
        self.audit.record(user_id, "incident.updated", "incident", incident_id,
                          {"fields": sorted(data.model_fields_set)})
        self.session.commit()
        self.session.refresh(incident)
        return incident

    def add_evidence(self, incident_id: str, user_id: str, link: EvidenceLink) -> Optional[Incident]:
        """Append one evidence group to an incident."""
        incident = self.get_by_id(incident_id, user_id)
        if not incident:
            return None

        group = link.model_dump()
        if not group["document_ids"] and not group["communication_ids"]:
            raise RecordError(
                code=VALIDATION_ERROR,
                message="An evidence group needs at least one document or communication",
            )
        self._check_references(RecordValidator(self.session, user_id), [group], [])

        # Reassign so the JSON column registers the change
        incident.evidence = [*incident.evidence, group]
        incident.updated_at = utcnow()

        self.session.add(incident)
        self.audit.record(user_id, "incident.evidence_added", "incident", incident_id, group)
        self.session.commit()
        self.session.refresh(incident)
        logger.info("Evidence added", user_id=user_id, incident_id=incident_id)
        return incident

    def get_timeline(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Incident]:
        """Incidents in the order they happened (undated times sort first within a day)."""
        incidents = self.list_for_user(user_id, date_from=date_from, date_to=date_to)
        return sorted(
            incidents,
            key=lambda incident: (
                incident.incident_date,
                incident.incident_time is not None,
                incident.incident_time or "",
                incident.created_at,
            ),
        )

    def delete(self, incident_id: str, user_id: str) -> bool:
        """Delete an incident. Rejected while a document links to it or a conversation context lists it."""
        incident = self.get_by_id(incident_id, user_id)
        if not incident:
            return False

        linked = self.session.exec(
            select(Document.id)
            .where(Document.user_id == user_id)
            .where(Document.related_incident_id == incident_id)
        ).all()
        if linked:
            raise RecordError(
                code=REFERENCED_RECORD,
                message="Incident still has linked documents",
                details={"document_ids": list(linked)},
            )
        RecordValidator(self.session, user_id).require_not_in_context("incident_ids", incident_id)

        self.session.delete(incident)
        self.audit.record(user_id, "incident.deleted", "incident", incident_id)
        self.session.commit()
        return True
