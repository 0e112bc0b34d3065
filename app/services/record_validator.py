"""Reference checks shared by the record services."""
import re
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlmodel import Session, SQLModel, select

from app.models.ai_conversation import AIConversation
from app.models.child import Child
from app.models.communication import Communication
from app.models.contact import Contact
from app.models.document import Document
from app.models.incident import Incident
from app.services.errors import (
    RecordError,
    DANGLING_REFERENCE,
    DUPLICATE,
    INCONSISTENT_FLAG,
    REFERENCED_RECORD,
    VALIDATION_ERROR,
)

SHA256_PATTERN = re.compile(r"[0-9a-f]{64}")


class RecordValidator:
    """Validate cross-record references for one user's records."""

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id

    def missing_ids(self, model: Type[SQLModel], ids: Iterable[str]) -> List[str]:
        """Return the ids that do not resolve to a record of this user, in input order."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        statement = (
            select(model.id)
            .where(model.id.in_(wanted))
            .where(model.user_id == self.user_id)
        )
        found = set(self.session.exec(statement).all())
        return [record_id for record_id in wanted if record_id not in found]

    def require_existing(self, model: Type[SQLModel], ids: Iterable[str], field: str) -> None:
        missing = self.missing_ids(model, ids)
        if missing:
            raise RecordError(
                code=DANGLING_REFERENCE,
                message=f"{field} references records that do not exist",
                details={"field": field, "missing_ids": missing},
            )

    def require_unused_id(self, model: Type[SQLModel], record_id: Optional[str]) -> None:
        """Reject a caller-supplied id that is already taken."""
        if record_id is not None and self.session.get(model, record_id) is not None:
            raise RecordError(
                code=DUPLICATE,
                message=f"A record with id {record_id} already exists",
                details={"id": record_id},
            )

    def check_evidence(self, evidence: List[Dict[str, Any]]) -> None:
        """Every evidence group must point at this user's documents and communications."""
        document_ids: List[str] = []
        communication_ids: List[str] = []
        for group in evidence:
            document_ids.extend(group.get("document_ids", []))
            communication_ids.extend(group.get("communication_ids", []))

        self.require_existing(Document, document_ids, "evidence.document_ids")
        self.require_existing(Communication, communication_ids, "evidence.communication_ids")

    def check_children(self, child_ids: Iterable[str], field: str = "child_involved") -> None:
        self.require_existing(Child, child_ids, field)

    def check_incident(self, incident_id: Optional[str], field: str = "related_incident_id") -> None:
        if incident_id is not None:
            self.require_existing(Incident, [incident_id], field)

    def check_contact(self, contact_id: Optional[str], field: str = "contact_id") -> None:
        if contact_id is not None:
            self.require_existing(Contact, [contact_id], field)

    def check_context(self, context: Dict[str, List[str]]) -> None:
        self.require_existing(Document, context.get("document_ids", []), "context.document_ids")
        self.require_existing(Incident, context.get("incident_ids", []), "context.incident_ids")
        self.require_existing(Communication, context.get("communication_ids", []), "context.communication_ids")

    def conversations_referencing(self, key: str, record_id: str) -> List[str]:
        """Ids of this user's conversations whose context lists record_id under key."""
        conversations = self.session.exec(
            select(AIConversation).where(AIConversation.user_id == self.user_id)
        ).all()
        # context is a JSON map, searched here so SQLite and PostgreSQL behave the same
        return [conversation.id for conversation in conversations if record_id in conversation.context.get(key, [])]

    def require_not_in_context(self, key: str, record_id: str) -> None:
        """A record attached to a conversation context cannot be deleted."""
        referencing = self.conversations_referencing(key, record_id)
        if referencing:
            raise RecordError(
                code=REFERENCED_RECORD,
                message="Record is still attached to AI conversations",
                details={"conversation_ids": referencing},
            )


def check_flag_consistency(flagged: bool, flag_reason: Optional[str]) -> None:
    """flagged must be True exactly when a flag reason is present."""
    has_reason = bool(flag_reason and flag_reason.strip())
    if flagged != has_reason:
        raise RecordError(
            code=INCONSISTENT_FLAG,
            message="flagged must be true if and only if flag_reason is set",
            details={"flagged": flagged, "flag_reason": flag_reason},
        )


def check_checksum_format(checksum: str) -> None:
    if not SHA256_PATTERN.fullmatch(checksum):
        raise RecordError(
            code=VALIDATION_ERROR,
            message="checksum must be a lowercase SHA-256 hex digest",
            details={"field": "checksum"},
        )
