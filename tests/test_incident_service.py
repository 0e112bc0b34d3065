"""Incident evidence references and timeline."""
from datetime import date, time

import pytest
from sqlmodel import select

from app.models.audit_log import AuditLog
from app.schemas.child import ChildCreate
from app.schemas.communication import CommunicationCreate
from app.schemas.conversation import ConversationContext, ConversationCreate
from app.schemas.document import DocumentCreate
from app.schemas.incident import EvidenceLink, IncidentCreate, IncidentUpdate
from app.services.child_service import ChildService
from app.services.communication_service import CommunicationService
from app.services.conversation_service import ConversationService
from app.services.document_service import DocumentService
from app.services.errors import RecordError, DANGLING_REFERENCE, REFERENCED_RECORD, VALIDATION_ERROR
from app.services.incident_service import IncidentService


def _document(db, user_id, document_id=None, **kwargs):
    data = DocumentCreate(
        id=document_id, title="Scan", file_name="scan.pdf", s3_key=f"{user_id}/scan.pdf", s3_bucket="records",
        **kwargs,
    )
    return DocumentService(db).create(user_id, data)


def _incident(**kwargs):
    fields = {"title": "Missed exchange", "description": "No show at exchange", "incident_date": date(2024, 3, 1)}
    fields.update(kwargs)
    return IncidentCreate(**fields)


def test_evidence_must_resolve_to_existing_document(db, user):
    service = IncidentService(db)
    data = _incident(evidence=[EvidenceLink(document_ids=["d1"], communication_ids=[])])

    with pytest.raises(RecordError) as exc_info:
        service.create(user.id, data)
    assert exc_info.value.code == DANGLING_REFERENCE
    assert exc_info.value.details == {"field": "evidence.document_ids", "missing_ids": ["d1"]}

    _document(db, user.id, "d1")
    incident = service.create(user.id, data)
    assert incident.evidence == [{"document_ids": ["d1"], "communication_ids": []}]


def test_evidence_of_another_user_is_rejected(db, user, other_user):
    document = _document(db, other_user.id)
    data = _incident(evidence=[EvidenceLink(document_ids=[document.id])])

    with pytest.raises(RecordError) as exc_info:
        IncidentService(db).create(user.id, data)
    assert exc_info.value.code == DANGLING_REFERENCE


def test_evidence_communication_must_exist(db, user):
    communication = CommunicationService(db).import_one(
        user.id, CommunicationCreate(type="sms", direction="received", body="where are you")
    )
    service = IncidentService(db)

    with pytest.raises(RecordError) as exc_info:
        service.create(user.id, _incident(evidence=[EvidenceLink(communication_ids=["nope"])]))
    assert exc_info.value.details["field"] == "evidence.communication_ids"

    incident = service.create(user.id, _incident(evidence=[EvidenceLink(communication_ids=[communication.id])]))
    assert incident.evidence[0]["communication_ids"] == [communication.id]


def test_child_involved_must_exist(db, user):
    service = IncidentService(db)
    with pytest.raises(RecordError) as exc_info:
        service.create(user.id, _incident(child_involved=["c-missing"]))
    assert exc_info.value.details["field"] == "child_involved"

    child = ChildService(db).create(user.id, ChildCreate(first_name="Sam"))
    incident = service.create(user.id, _incident(child_involved=[child.id]))
    assert incident.child_involved == [child.id]


def test_create_writes_audit_entry(db, user):
    incident = IncidentService(db).create(user.id, _incident())
    entries = db.exec(select(AuditLog).where(AuditLog.resource_id == incident.id)).all()
    assert [entry.action for entry in entries] == ["incident.created"]


def test_add_evidence_appends_group(db, user):
    service = IncidentService(db)
    incident = service.create(user.id, _incident())
    document = _document(db, user.id)

    updated = service.add_evidence(incident.id, user.id, EvidenceLink(document_ids=[document.id]))
    assert updated.evidence == [{"document_ids": [document.id], "communication_ids": []}]

    with pytest.raises(RecordError) as exc_info:
        service.add_evidence(incident.id, user.id, EvidenceLink())
    assert exc_info.value.code == VALIDATION_ERROR


def test_add_evidence_to_unknown_incident_returns_none(db, user):
    assert IncidentService(db).add_evidence("missing", user.id, EvidenceLink(document_ids=["x"])) is None


def test_update_rechecks_evidence_and_required_fields(db, user):
    service = IncidentService(db)
    incident = service.create(user.id, _incident(tags=["school"]))

    with pytest.raises(RecordError) as exc_info:
        service.update(incident.id, user.id, IncidentUpdate(evidence=[EvidenceLink(document_ids=["ghost"])]))
    assert exc_info.value.code == DANGLING_REFERENCE

    with pytest.raises(RecordError) as exc_info:
        service.update(incident.id, user.id, IncidentUpdate(title=None))
    assert exc_info.value.code == VALIDATION_ERROR

    updated = service.update(incident.id, user.id, IncidentUpdate(severity="high", tags=None))
    assert updated.severity == "high"
    assert updated.tags == []
    assert updated.title == "Missed exchange"


def test_timeline_is_chronological(db, user):
    service = IncidentService(db)
    later = service.create(user.id, _incident(title="later", incident_date=date(2024, 3, 2)))
    timed = service.create(user.id, _incident(title="timed", incident_date=date(2024, 3, 1), incident_time=time(10, 0)))
    untimed = service.create(user.id, _incident(title="untimed", incident_date=date(2024, 3, 1)))

    timeline = service.get_timeline(user.id)
    assert [incident.id for incident in timeline] == [untimed.id, timed.id, later.id]

    windowed = service.get_timeline(user.id, date_from=date(2024, 3, 2))
    assert [incident.id for incident in windowed] == [later.id]


def test_list_filters_by_severity(db, user):
    service = IncidentService(db)
    service.create(user.id, _incident(severity="low"))
    critical = service.create(user.id, _incident(severity="critical"))

    assert [incident.id for incident in service.list_for_user(user.id, severity="critical")] == [critical.id]


def test_delete_rejected_while_document_linked(db, user):
    service = IncidentService(db)
    incident = service.create(user.id, _incident())
    document = _document(db, user.id, related_incident_id=incident.id)

    with pytest.raises(RecordError) as exc_info:
        service.delete(incident.id, user.id)
    assert exc_info.value.code == REFERENCED_RECORD
    assert exc_info.value.details == {"document_ids": [document.id]}

    DocumentService(db).delete(document.id, user.id)
    assert service.delete(incident.id, user.id) is True
    assert service.get_by_id(incident.id, user.id) is None


def test_other_user_cannot_read_incident(db, user, other_user):
    incident = IncidentService(db).create(user.id, _incident())
    assert IncidentService(db).get_by_id(incident.id, other_user.id) is None


@pytest.mark.parametrize("field", ["police_involved", "follow_up_required"])
def test_update_rejects_null_flag(db, user, field):
    service = IncidentService(db)
    incident = service.create(user.id, _incident())

    with pytest.raises(RecordError) as exc_info:
        service.update(incident.id, user.id, IncidentUpdate(**{field: None}))
    assert exc_info.value.code == VALIDATION_ERROR
    assert exc_info.value.details == {"field": field}

    assert getattr(service.get_by_id(incident.id, user.id), field) is False


def test_delete_rejected_while_in_conversation_context(db, user):
    service = IncidentService(db)
    incident = service.create(user.id, _incident())
    communication = CommunicationService(db).import_one(
        user.id, CommunicationCreate(type="sms", direction="sent", body="see you at 5")
    )
    conversation = ConversationService(db).create_conversation(user.id, ConversationCreate(
        context=ConversationContext(incident_ids=[incident.id], communication_ids=[communication.id])
    ))

    with pytest.raises(RecordError) as exc_info:
        service.delete(incident.id, user.id)
    assert exc_info.value.code == REFERENCED_RECORD
    assert exc_info.value.details == {"conversation_ids": [conversation.id]}
    assert service.get_by_id(incident.id, user.id) is not None

    ConversationService(db).delete_conversation(conversation.id, user.id)
    assert service.delete(incident.id, user.id) is True
