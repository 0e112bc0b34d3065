"""Contacts, their identifiers and message summaries."""
from datetime import datetime

import pytest

from app.schemas.communication import CommunicationCreate
from app.schemas.contact import ContactCreate, ContactUpdate, IdentifierCreate
from app.services.communication_service import CommunicationService
from app.services.contact_service import ContactService
from app.services.errors import RecordError, DANGLING_REFERENCE, DUPLICATE, VALIDATION_ERROR


def _contact(db, user_id, **kwargs):
    fields = {"name": "Jordan Smith", "primary_email": "Jordan@Example.com"}
    fields.update(kwargs)
    return ContactService(db).create(user_id, ContactCreate(**fields))


def _message(db, user_id, contact_id, **kwargs):
    fields = {"type": "email", "direction": "received", "contact_id": contact_id}
    fields.update(kwargs)
    return CommunicationService(db).import_one(user_id, CommunicationCreate(**fields))


def test_create_lowercases_email_and_rejects_duplicates(db, user, other_user):
    contact = _contact(db, user.id, primary_phone="555-0100")
    assert contact.primary_email == "jordan@example.com"

    with pytest.raises(RecordError) as exc_info:
        _contact(db, user.id, name="Jordan again", primary_email="JORDAN@example.com")
    assert exc_info.value.code == DUPLICATE
    assert exc_info.value.details["field"] == "primary_email"

    with pytest.raises(RecordError) as exc_info:
        _contact(db, user.id, name="Same phone", primary_email=None, primary_phone="555-0100")
    assert exc_info.value.details["field"] == "primary_phone"

    # Another user may know the same person
    assert _contact(db, other_user.id).user_id == other_user.id


def test_find_by_email_and_phone_checks_identifiers(db, user):
    service = ContactService(db)
    contact = _contact(db, user.id, primary_phone="555-0100")
    service.add_identifier(contact.id, user.id, IdentifierCreate(
        identifier_type="email", identifier_value="J.Smith@Work.example", source="gmail",
    ))
    service.add_identifier(contact.id, user.id, IdentifierCreate(
        identifier_type="phone", identifier_value="555-0199",
    ))

    assert service.find_by_email(user.id, "jordan@example.com").id == contact.id
    assert service.find_by_email(user.id, "j.smith@work.example").id == contact.id
    assert service.find_by_phone(user.id, "555-0199").id == contact.id
    assert service.find_by_email(user.id, "nobody@example.com") is None


def test_find_or_create_by_email(db, user):
    service = ContactService(db)
    existing = _contact(db, user.id)

    found, created = service.find_or_create_by_email(user.id, "JORDAN@example.com")
    assert (found.id, created) == (existing.id, False)

    new, created = service.find_or_create_by_email(user.id, "Casey@Example.com")
    assert created is True
    assert new.name == "casey@example.com"
    assert new.primary_email == "casey@example.com"


def test_add_identifier_rejects_duplicate(db, user):
    service = ContactService(db)
    contact = _contact(db, user.id)
    data = IdentifierCreate(identifier_type="name_variation", identifier_value="Jordy", confidence_score=0.4)
    service.add_identifier(contact.id, user.id, data)

    with pytest.raises(RecordError) as exc_info:
        service.add_identifier(contact.id, user.id, data)
    assert exc_info.value.code == DUPLICATE

    assert service.add_identifier("missing", user.id, data) is None


def test_identifiers_listed_most_confident_first(db, user):
    service = ContactService(db)
    contact = _contact(db, user.id)
    guess = service.add_identifier(contact.id, user.id, IdentifierCreate(
        identifier_type="name_variation", identifier_value="J. Smith", confidence_score=0.3,
    ))
    sure = service.add_identifier(contact.id, user.id, IdentifierCreate(
        identifier_type="phone", identifier_value="555-0101", verified=True,
    ))

    assert [i.id for i in service.get_identifiers(contact.id)] == [sure.id, guess.id]


def test_search_matches_name_email_and_identifier(db, user):
    service = ContactService(db)
    jordan = _contact(db, user.id)
    casey = _contact(db, user.id, name="Casey Lee", primary_email="casey@school.example")
    service.add_identifier(casey.id, user.id, IdentifierCreate(
        identifier_type="name_variation", identifier_value="Coach Lee",
    ))

    assert [c.id for c in service.search(user.id, "smith")] == [jordan.id]
    assert [c.id for c in service.search(user.id, "school")] == [casey.id]
    assert [c.id for c in service.search(user.id, "coach")] == [casey.id]
    assert [c.id for c in service.search(user.id, "example")] == [casey.id, jordan.id]


def test_summary_counts_messages_per_contact(db, user):
    quiet = _contact(db, user.id, name="Aaron Quiet", primary_email="aaron@example.com")
    busy = _contact(db, user.id)
    _message(db, user.id, busy.id, sent_at=datetime(2024, 1, 2, 9, 0))
    _message(db, user.id, busy.id, received_at=datetime(2024, 1, 9, 9, 0))
    _message(db, user.id, None)

    summary = ContactService(db).get_summary(user.id)
    assert [entry["contact"].id for entry in summary] == [busy.id, quiet.id]
    assert summary[0]["message_count"] == 2
    assert summary[0]["first_communication"] == datetime(2024, 1, 2, 9, 0)
    assert summary[0]["last_communication"] == datetime(2024, 1, 9, 9, 0)
    assert summary[1]["message_count"] == 0
    assert summary[1]["last_communication"] is None


def test_communication_contact_must_exist(db, user, other_user):
    foreign = _contact(db, other_user.id)
    with pytest.raises(RecordError) as exc_info:
        _message(db, user.id, foreign.id)
    assert exc_info.value.code == DANGLING_REFERENCE

    contact = _contact(db, user.id)
    linked = _message(db, user.id, contact.id)
    _message(db, user.id, None)
    assert [c.id for c in CommunicationService(db).search(user.id, contact_id=contact.id)] == [linked.id]


def test_update_keeps_name_required_and_emails_unique(db, user):
    service = ContactService(db)
    contact = _contact(db, user.id)
    _contact(db, user.id, name="Casey Lee", primary_email="casey@example.com")

    with pytest.raises(RecordError) as exc_info:
        service.update(contact.id, user.id, ContactUpdate(name=None))
    assert exc_info.value.code == VALIDATION_ERROR

    with pytest.raises(RecordError) as exc_info:
        service.update(contact.id, user.id, ContactUpdate(primary_email="Casey@example.com"))
    assert exc_info.value.code == DUPLICATE

    updated = service.update(contact.id, user.id, ContactUpdate(
        display_name="Jordan", primary_email="Jordan@Example.com", metadata=None,
    ))
    assert updated.display_name == "Jordan"
    assert updated.primary_email == "jordan@example.com"
    assert updated.record_metadata == {}


def test_delete_unlinks_communications(db, user):
    service = ContactService(db)
    contact = _contact(db, user.id)
    service.add_identifier(contact.id, user.id, IdentifierCreate(
        identifier_type="phone", identifier_value="555-0100",
    ))
    communication = _message(db, user.id, contact.id)

    assert service.delete(contact.id, user.id) is True
    assert service.get_by_id(contact.id, user.id) is None
    assert service.get_identifiers(contact.id) == []
    assert CommunicationService(db).get_by_id(communication.id, user.id).contact_id is None
    assert service.delete(contact.id, user.id) is False
