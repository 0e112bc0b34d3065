"""Document service: uploaded file records, OCR text and integrity checksums."""
import hashlib
from sqlmodel import Session, select
from typing import List, Optional

from app.models.document import Document
from app.models.incident import Incident
from app.schemas.document import DocumentCreate, DocumentUpdate
from app.services.audit_service import AuditService
from app.services.errors import (
    RecordError,
    IMMUTABLE_FIELD,
    REFERENCED_RECORD,
    VALIDATION_ERROR,
)
from app.services.record_validator import RecordValidator, check_checksum_format
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

REQUIRED_FIELDS = {"title", "encrypted"}


def compute_checksum(content: bytes) -> str:
    """SHA-256 hex digest used as the document integrity marker."""
    return hashlib.sha256(content).hexdigest()


class DocumentService:
    """Service class for document records. File bytes live in object storage, not here."""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def create(self, user_id: str, data: DocumentCreate) -> Document:
        validator = RecordValidator(self.session, user_id)
        validator.require_unused_id(Document, data.id)
        validator.check_incident(data.related_incident_id)

        fields = data.model_dump(exclude={"metadata", "checksum"}, exclude_none=True)
        checksum = None
        if data.checksum is not None:
            checksum = data.checksum.lower()
            check_checksum_format(checksum)

        document = Document(user_id=user_id, record_metadata=data.metadata, checksum=checksum, **fields)
        self.session.add(document)
        self.audit.record(user_id, "document.created", "document", document.id, {"file_name": document.file_name})
        self.session.commit()
        self.session.refresh(document)
        logger.info("Document created", user_id=user_id, document_id=document.id)
        return document

    def list_for_user(
        self,
        user_id: str,
        type: Optional[str] = None,
        tag: Optional[str] = None,
        incident_id: Optional[str] = None
    ) -> List[Document]:
        """Documents newest first, optionally filtered by type, tag or linked incident."""
        statement = select(Document).where(Document.user_id == user_id)
        if type:
            statement = statement.where(Document.type == type)
        if incident_id:
            statement = statement.where(Document.related_incident_id == incident_id)
        statement = statement.order_by(Document.created_at.desc())

        documents = list(self.session.exec(statement).all())
        if tag:
            # tags is a JSON list, filtered here so SQLite and PostgreSQL behave the same
            documents = [document for document in documents if tag in document.tags]
        return documents

    def get_by_id(self, document_id: str, user_id: str) -> Optional[Document]:
        """Get a document by ID, ensuring user ownership."""
        statement = (
            select(Document)
            .where(Document.id == document_id)
            .where(Document.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def _apply_checksum(self, document: Document, checksum: str) -> None:
        checksum = checksum.lower()
        check_checksum_format(checksum)
        if document.checksum is not None and document.checksum != checksum:
            logger.warning("Checksum change rejected", user_id=document.user_id, document_id=document.id)
            raise RecordError(
                code=IMMUTABLE_FIELD,
                message="checksum cannot be changed once set",
                details={"field": "checksum", "document_id": document.id},
            )
        document.checksum = checksum

    def update(self, document_id: str, user_id: str, data: DocumentUpdate) -> Optional[Document]:
        """Update document metadata. Setting the checksum is allowed once."""
        document = self.get_by_id(document_id, user_id)
        if not document:
            return None

        changes = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise RecordError(
                    code=VALIDATION_ERROR,
                    message=f"{field} is a required field",
                    details={"field": field},
                )
        if "related_incident_id" in changes:
            RecordValidator(self.session, user_id).check_incident(changes["related_incident_id"])

        if "checksum" in changes:
            checksum = changes.pop("checksum")
            if checksum is None:
                if document.checksum is not None:
                    raise RecordError(
                        code=IMMUTABLE_FIELD,
                        message="checksum cannot be removed once set",
                        details={"field": "checksum", "document_id": document.id},
                    )
            else:
                self._apply_checksum(document, checksum)

        if "metadata" in changes:
            document.record_metadata = changes.pop("metadata") or {}
        if "tags" in changes:
            document.tags = changes.pop("tags") or []
        for field, value in changes.items():
            setattr(document, field, value)
        document.updated_at = utcnow()

        self.session.add(document)
        self.audit.record(user_id, "document.updated", "document", document_id,
                          {"fields": sorted(data.model_dump(exclude_unset=True))})
        self.session.commit()
        self.session.refresh(document)
        return document

    def set_checksum(self, document_id: str, user_id: str, checksum: str) -> Optional[Document]:
        """Record the integrity checksum. Re-sending the same value is a no-op."""
        document = self.get_by_id(document_id, user_id)
        if not document:
            return None

        self._apply_checksum(document, checksum)
        document.updated_at = utcnow()
        self.session.add(document)
        self.audit.record(user_id, "document.checksum_set", "document", document_id)
        self.session.commit()
        self.session.refresh(document)
        return document

    def record_ocr(
        self,
        document_id: str,
        user_id: str,
        ocr_text: str,
        tags: Optional[List[str]] = None
    ) -> Optional[Document]:
        """Store OCR output, optionally merging tags found during processing."""
        document = self.get_by_id(document_id, user_id)
        if not document:
            return None

        document.ocr_text = ocr_text
        if tags:
            document.tags = list(dict.fromkeys([*document.tags, *tags]))
        document.updated_at = utcnow()

        self.session.add(document)
        self.audit.record(user_id, "document.ocr_recorded", "document", document_id,
                          {"characters": len(ocr_text)})
        self.session.commit()
        self.session.refresh(document)
        return document

    def delete(self, document_id: str, user_id: str) -> bool:
        """Delete a document record. Rejected while incident evidence or a conversation context lists it."""
        document = self.get_by_id(document_id, user_id)
        if not document:
            return False

        incidents = self.session.exec(select(Incident).where(Incident.user_id == user_id)).all()
        referencing = [
            incident.id for incident in incidents
            if any(document_id in group.get("document_ids", []) for group in incident.evidence)
        ]
        if referencing:
            logger.warning("Document delete rejected", user_id=user_id, document_id=document_id,
                           incident_ids=referencing)
            raise RecordError(
                code=REFERENCED_RECORD,
                message="Document is still used as incident evidence",
                details={"incident_ids": referencing},
            )
        RecordValidator(self.session, user_id).require_not_in_context("document_ids", document_id)

        self.session.delete(document)
        self.audit.record(user_id, "document.deleted", "document", document_id)
        self.session.commit()
        return True
