"""Communication import, search and flagging."""
from datetime import datetime

import pytest

from app.schemas.communication import AnalysisResults, CommunicationBatch, CommunicationCreate
from app.services.communication_service import CommunicationService
from app.services.errors import RecordError, DUPLICATE, INCONSISTENT_FLAG


def _message(**kwargs):
    fields = {"type": "email", "direction": "received"}
    fields.update(kwargs)
    return CommunicationCreate(**fields)


def test_import_one_stores_record(db, user):
    communication = CommunicationService(db).import_one(user.id, _message(
        subject="Weekend", body="Pickup moved to 6pm", metadata={"headers": {"x": "y"}},
        flagged=True, flag_reason="  schedule change  ",
    ))

    assert communication.user_id == user.id
    assert communication.record_metadata == {"headers": {"x": "y"}}
    assert communication.flag_reason == "schedule change"
    assert communication.imported_at is not None


def test_import_rejects_taken_id(db, user):
    service = CommunicationService(db)
    service.import_one(user.id, _message(id="c1"))

    with pytest.raises(RecordError) as exc_info:
        service.import_one(user.id, _message(id="c1"))
    assert exc_info.value.code == DUPLICATE


def test_batch_import_skips_known_original_ids(db, user):
    service = CommunicationService(db)
    service.import_one(user.id, _message(original_id="msg-1"))

    batch = CommunicationBatch(communications=[
        _message(original_id="msg-1"),
        _message(original_id="msg-2"),
        _message(original_id="msg-2"),
        _message(),
    ])
    created, skipped = service.import_batch(user.id, batch)

    assert len(created) == 2
    assert skipped == 2
    assert len(service.search(user.id)) == 3


def test_search_filters_and_orders_by_occurrence(db, user):
    service = CommunicationService(db)
    older = service.import_one(user.id, _message(body="first note", sent_at=datetime(2024, 1, 1, 8, 0)))
    newer = service.import_one(user.id, _message(body="second NOTE", received_at=datetime(2024, 1, 5, 8, 0)))
    service.import_one(user.id, _message(type="sms", body="unrelated", sent_at=datetime(2024, 1, 3, 8, 0)))

    results = service.search(user.id, search="note")
    assert [c.id for c in results] == [newer.id, older.id]

    windowed = service.search(user.id, date_from=datetime(2024, 1, 2), date_to=datetime(2024, 1, 4))
    assert [c.type for c in windowed] == ["sms"]

    assert [c.id for c in service.search(user.id, type="email", limit=1)] == [newer.id]
    assert [c.id for c in service.search(user.id, type="email", limit=1, offset=1)] == [older.id]


def test_search_is_scoped_to_user(db, user, other_user):
    service = CommunicationService(db)
    service.import_one(other_user.id, _message(body="private"))
    assert service.search(user.id) == []


def test_thread_in_order(db, user):
    service = CommunicationService(db)
    second = service.import_one(user.id, _message(thread_id="t1", sent_at=datetime(2024, 2, 2)))
    first = service.import_one(user.id, _message(thread_id="t1", sent_at=datetime(2024, 2, 1)))
    service.import_one(user.id, _message(thread_id="t2"))

    assert [c.id for c in service.get_thread(user.id, "t1")] == [first.id, second.id]


def test_flag_and_unflag_keep_reason_consistent(db, user):
    service = CommunicationService(db)
    communication = service.import_one(user.id, _message())

    flagged = service.flag(communication.id, user.id, "harassment")
    assert flagged.flagged is True
    assert flagged.flag_reason == "harassment"

    unflagged = service.unflag(communication.id, user.id)
    assert unflagged.flagged is False
    assert unflagged.flag_reason is None

    with pytest.raises(RecordError) as exc_info:
        service.flag(communication.id, user.id, "   ")
    assert exc_info.value.code == INCONSISTENT_FLAG


def test_flag_unknown_communication_returns_none(db, user):
    assert CommunicationService(db).flag("missing", user.id, "reason") is None


def test_record_analysis_replaces_results(db, user):
    service = CommunicationService(db)
    communication = service.import_one(user.id, _message(analysis_results={"keywords": ["old"]}))

    updated = service.record_analysis(
        communication.id, user.id, AnalysisResults(sentiment="negative", flags=["threat"])
    )
    assert updated.analysis_results == {"sentiment": "negative", "flags": ["threat"]}


def test_stats_counts_by_type_direction_and_flag(db, user):
    service = CommunicationService(db)
    service.import_one(user.id, _message())
    service.import_one(user.id, _message(type="sms", direction="sent"))
    service.import_one(user.id, _message(type="sms", flagged=True, flag_reason="abuse"))

    stats = service.get_stats(user.id)
    assert stats == {
        "total": 3,
        "flagged": 1,
        "by_type": {"email": 1, "sms": 2},
        "by_direction": {"received": 2, "sent": 1},
    }
