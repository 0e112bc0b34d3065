"""Enum rejection, flag consistency and serialisation round-trips of the record schemas."""
from datetime import date, datetime, time

import pytest
from pydantic import ValidationError

from app.models.ai_conversation import AIConversation
from app.models.ai_message import AIMessage
from app.models.calendar_event import CalendarEvent
from app.models.communication import Communication
from app.models.document import Document
from app.models.incident import Incident
from app.schemas.calendar_event import CalendarEventCreate, CalendarEventRead
from app.schemas.communication import CommunicationCreate, CommunicationRead
from app.schemas.conversation import ConversationRead, MessageCreate, MessageRead
from app.schemas.document import DocumentCreate, DocumentRead
from app.schemas.incident import IncidentCreate, IncidentRead


# =============================================================================
# Enumerations
# =============================================================================

def test_communication_type_rejects_unknown_channel():
    with pytest.raises(ValidationError):
        CommunicationCreate(type="fax", direction="sent")


def test_communication_direction_rejects_unknown_value():
    with pytest.raises(ValidationError):
        CommunicationCreate(type="email", direction="forwarded")


def test_incident_severity_rejects_unknown_value():
    with pytest.raises(ValidationError):
        IncidentCreate(title="t", description="d", incident_date=date(2024, 1, 1), severity="extreme")


def test_document_type_rejects_unknown_value():
    with pytest.raises(ValidationError):
        DocumentCreate(title="t", file_name="a.pdf", s3_key="k", s3_bucket="b", type="photo")


def test_message_role_rejects_unknown_value():
    with pytest.raises(ValidationError):
        MessageCreate(role="tool", content="hi")


def test_enum_values_stored_as_plain_strings():
    data = CommunicationCreate(type="our_family_wizard", direction="received")
    assert data.type == "our_family_wizard"
    assert data.model_dump()["direction"] == "received"


# =============================================================================
# Flag consistency
# =============================================================================

def test_flagged_without_reason_is_invalid_until_reason_added():
    with pytest.raises(ValidationError):
        CommunicationCreate(type="sms", direction="received", flagged=True)

    data = CommunicationCreate(type="sms", direction="received", flagged=True, flag_reason="harassment")
    assert data.flagged is True
    assert data.flag_reason == "harassment"


def test_blank_reason_does_not_count_as_reason():
    with pytest.raises(ValidationError):
        CommunicationCreate(type="sms", direction="received", flagged=True, flag_reason="   ")


def test_reason_without_flag_is_invalid():
    with pytest.raises(ValidationError):
        CommunicationCreate(type="sms", direction="received", flag_reason="harassment")


# =============================================================================
# Calendar schedule
# =============================================================================

def test_event_end_before_start_is_invalid():
    with pytest.raises(ValidationError):
        CalendarEventCreate(title="Visit", start_date=date(2024, 5, 2), end_date=date(2024, 5, 1))


def test_recurrence_rule_requires_recurring():
    with pytest.raises(ValidationError):
        CalendarEventCreate(title="Visit", start_date=date(2024, 5, 2), recurrence_rule={"freq": "weekly"})

    event = CalendarEventCreate(
        title="Visit", start_date=date(2024, 5, 2), recurring=True, recurrence_rule={"freq": "weekly"}
    )
    assert event.recurrence_rule == {"freq": "weekly"}


def test_negative_reminder_is_invalid():
    with pytest.raises(ValidationError):
        CalendarEventCreate(title="Visit", start_date=date(2024, 5, 2), reminder_minutes=-5)


# =============================================================================
# Round-trips
# =============================================================================

def _round_trip(schema, obj):
    read = schema.model_validate(obj)
    assert schema.model_validate_json(read.model_dump_json()) == read
    return read


def test_communication_round_trip_with_empty_collections(db, user):
    communication = Communication(user_id=user.id, type="email", direction="sent")
    db.add(communication)
    db.commit()
    db.refresh(communication)

    read = _round_trip(CommunicationRead, communication)
    assert read.attachments == []
    assert read.metadata == {}
    assert read.subject is None
    assert read.analysis_results.sentiment is None


def test_communication_round_trip_with_open_maps(db, user):
    communication = Communication(
        user_id=user.id,
        type="imessage",
        direction="received",
        attachments=[{"name": "photo.jpg", "size": 2048}],
        record_metadata={"device": "iPhone", "nested": {"any": ["thing"]}},
        analysis_results={"sentiment": "negative", "keywords": ["late"]},
        flagged=True,
        flag_reason="threat",
        sent_at=datetime(2024, 2, 1, 9, 30),
    )
    db.add(communication)
    db.commit()
    db.refresh(communication)

    read = _round_trip(CommunicationRead, communication)
    assert read.metadata["nested"] == {"any": ["thing"]}
    assert read.model_dump()["metadata"]["device"] == "iPhone"
    assert read.analysis_results.sentiment == "negative"


def test_incident_round_trip(db, user):
    incident = Incident(
        user_id=user.id,
        title="Late pickup",
        description="Arrived two hours late",
        incident_date=date(2024, 3, 1),
        incident_time=time(17, 45),
        severity="medium",
        evidence=[{"document_ids": [], "communication_ids": []}],
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)

    read = _round_trip(IncidentRead, incident)
    assert read.incident_time == time(17, 45)
    assert read.witnesses == []
    assert read.type is None


def test_document_round_trip(db, user):
    document = Document(
        user_id=user.id, title="Order", file_name="order.pdf", s3_key="k/order.pdf", s3_bucket="bucket",
        tags=["court"], record_metadata={"pages": 3},
    )
    db.add(document)
    db.commit()
    db.refresh(document)

    read = _round_trip(DocumentRead, document)
    assert read.checksum is None
    assert read.metadata == {"pages": 3}


def test_calendar_event_round_trip(db, user):
    event = CalendarEvent(user_id=user.id, title="Hearing", start_date=date(2024, 6, 3), event_type="court")
    db.add(event)
    db.commit()
    db.refresh(event)

    read = _round_trip(CalendarEventRead, event)
    assert read.recurrence_rule is None
    assert read.child_id is None


def test_conversation_and_message_round_trip(db, user):
    conversation = AIConversation(user_id=user.id, title="Custody questions")
    db.add(conversation)
    db.commit()
    message = AIMessage(conversation_id=conversation.id, role="assistant", content="Hello")
    db.add(message)
    db.commit()
    db.refresh(conversation)
    db.refresh(message)

    conversation_read = _round_trip(ConversationRead, conversation)
    assert conversation_read.context.document_ids == []
    message_read = _round_trip(MessageRead, message)
    assert message_read.metadata == {}
