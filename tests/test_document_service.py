"""Document checksums, OCR and delete rules."""
import pytest

from app.schemas.communication import CommunicationCreate
from app.schemas.conversation import ConversationContext, ConversationCreate
from app.schemas.document import DocumentCreate, DocumentUpdate
from app.schemas.incident import EvidenceLink, IncidentCreate
from app.services.communication_service import CommunicationService
from app.services.conversation_service import ConversationService
from app.services.document_service import DocumentService, compute_checksum
from app.services.errors import (
    RecordError,
    DANGLING_REFERENCE,
    IMMUTABLE_FIELD,
    REFERENCED_RECORD,
    VALIDATION_ERROR,
)
from app.services.incident_service import IncidentService
from app.services.record_validator import RecordValidator, check_checksum_format

HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def _create(db, user_id, **kwargs):
    fields = {"title": "Parenting plan", "file_name": "plan.pdf", "s3_key": "u/plan.pdf", "s3_bucket": "records"}
    fields.update(kwargs)
    return DocumentService(db).create(user_id, DocumentCreate(**fields))


def test_compute_checksum_is_sha256_hex():
    assert compute_checksum(b"hello") == HELLO_SHA256


def test_checksum_is_write_once(db, user):
    service = DocumentService(db)
    document = _create(db, user.id)

    service.set_checksum(document.id, user.id, HELLO_SHA256)
    # Same value again (any case) is accepted
    again = service.set_checksum(document.id, user.id, HELLO_SHA256.upper())
    assert again.checksum == HELLO_SHA256

    with pytest.raises(RecordError) as exc_info:
        service.set_checksum(document.id, user.id, compute_checksum(b"other"))
    assert exc_info.value.code == IMMUTABLE_FIELD
    assert service.get_by_id(document.id, user.id).checksum == HELLO_SHA256


def test_checksum_cannot_be_removed_or_changed_by_update(db, user):
    service = DocumentService(db)
    document = _create(db, user.id, checksum=HELLO_SHA256)

    with pytest.raises(RecordError) as exc_info:
        service.update(document.id, user.id, DocumentUpdate(checksum=None))
    assert exc_info.value.code == IMMUTABLE_FIELD

    with pytest.raises(RecordError) as exc_info:
        service.update(document.id, user.id, DocumentUpdate(checksum=compute_checksum(b"x")))
    assert exc_info.value.code == IMMUTABLE_FIELD

    updated = service.update(document.id, user.id, DocumentUpdate(title="Signed plan"))
    assert updated.title == "Signed plan"
    assert updated.checksum == HELLO_SHA256


def test_malformed_checksum_is_rejected(db, user):
    with pytest.raises(RecordError) as exc_info:
        _create(db, user.id, checksum="g" * 64)
    assert exc_info.value.code == VALIDATION_ERROR


def test_related_incident_must_exist(db, user):
    with pytest.raises(RecordError) as exc_info:
        _create(db, user.id, related_incident_id="missing")
    assert exc_info.value.code == DANGLING_REFERENCE


def test_record_ocr_merges_tags(db, user):
    service = DocumentService(db)
    document = _create(db, user.id, tags=["court"])

    updated = service.record_ocr(document.id, user.id, "IT IS ORDERED", tags=["order", "court"])
    assert updated.ocr_text == "IT IS ORDERED"
    assert updated.tags == ["court", "order"]


def test_list_filters_by_type_and_tag(db, user):
    service = DocumentService(db)
    order = _create(db, user.id, type="court_order", tags=["custody"])
    _create(db, user.id, type="financial", tags=["support"])

    assert [d.id for d in service.list_for_user(user.id, type="court_order")] == [order.id]
    assert [d.id for d in service.list_for_user(user.id, tag="custody")] == [order.id]


def test_delete_rejected_while_used_as_evidence(db, user):
    service = DocumentService(db)
    document = _create(db, user.id)
    incident = IncidentService(db).create(user.id, IncidentCreate(
        title="Threat", description="Threatening email", incident_date="2024-04-01",
        evidence=[EvidenceLink(document_ids=[document.id])],
    ))

    with pytest.raises(RecordError) as exc_info:
        service.delete(document.id, user.id)
    assert exc_info.value.code == REFERENCED_RECORD
    assert exc_info.value.details == {"incident_ids": [incident.id]}

    unused = _create(db, user.id)
    assert service.delete(unused.id, user.id) is True
    assert service.delete(unused.id, user.id) is False


def test_checksum_with_trailing_newline_is_rejected():
    check_checksum_format(HELLO_SHA256)
    with pytest.raises(RecordError) as exc_info:
        check_checksum_format(HELLO_SHA256 + "\n")
    assert exc_info.value.code == VALIDATION_ERROR


def test_update_rejects_null_encrypted(db, user):
    service = DocumentService(db)
    document = _create(db, user.id)

    with pytest.raises(RecordError) as exc_info:
        service.update(document.id, user.id, DocumentUpdate(encrypted=None))
    assert exc_info.value.code == VALIDATION_ERROR
    assert service.get_by_id(document.id, user.id).encrypted is True


def test_delete_rejected_while_in_conversation_context(db, user):
    service = DocumentService(db)
    document = _create(db, user.id)
    communication = CommunicationService(db).import_one(
        user.id, CommunicationCreate(type="email", direction="received", subject="Plan attached")
    )
    conversations = ConversationService(db)
    conversation = conversations.create_conversation(user.id, ConversationCreate(
        context=ConversationContext(document_ids=[document.id], communication_ids=[communication.id])
    ))

    with pytest.raises(RecordError) as exc_info:
        service.delete(document.id, user.id)
    assert exc_info.value.code == REFERENCED_RECORD
    assert exc_info.value.details == {"conversation_ids": [conversation.id]}

    validator = RecordValidator(db, user.id)
    assert validator.conversations_referencing("communication_ids", communication.id) == [conversation.id]
    assert validator.conversations_referencing("document_ids", "other") == []

    conversations.delete_conversation(conversation.id, user.id)
    assert service.delete(document.id, user.id) is True
