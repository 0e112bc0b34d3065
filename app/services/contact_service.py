"""
Contact Service

People the user corresponds with, and the identifiers (addresses, phone
numbers, name spellings) that tie imported communications to them.

- User isolation: every lookup filters by user_id
- primary_email and primary_phone are unique per user; emails are lowercase
- Deleting a contact keeps its communications and drops their link
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.communication import Communication
from app.models.contact import Contact, ContactIdentifier, IdentifierType
from app.schemas.contact import ContactCreate, ContactUpdate, IdentifierCreate
from app.services.audit_service import AuditService
from app.services.communication_service import OCCURRED_AT
from app.services.errors import RecordError, DUPLICATE, VALIDATION_ERROR
from app.services.record_validator import RecordValidator
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)


def normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else email


class ContactService:
    """Service for contacts and their identifiers"""

    def __init__(self, session: Session):
        self.session = session
        self.audit = AuditService(session)

    def _check_unique(self, user_id: str, field: str, value: Optional[str], contact_id: Optional[str] = None) -> None:
        """primary_email / primary_phone may belong to one contact per user."""
        if value is None:
            return
        column = getattr(Contact, field)
        statement = select(Contact.id).where(Contact.user_id == user_id).where(column == value)
        if contact_id:
            statement = statement.where(Contact.id != contact_id)
        existing = self.session.exec(statement).first()
        if existing:
            raise RecordError(
                code=DUPLICATE,
                message=f"A contact with this {field} already exists",
                details={"field": field, "contact_id": existing},
            )

    def create(self, user_id: str, data: ContactCreate) -> Contact:
        RecordValidator(self.session, user_id).require_unused_id(Contact, data.id)
        email = normalize_email(data.primary_email)
        self._check_unique(user_id, "primary_email", email)
        self._check_unique(user_id, "primary_phone", data.primary_phone)

        fields = data.model_dump(exclude={"metadata", "primary_email"}, exclude_none=True)
        contact = Contact(user_id=user_id, primary_email=email, record_metadata=data.metadata, **fields)
        self.session.add(contact)
        self.audit.record(user_id, "contact.created", "contact", contact.id)
        self.session.commit()
        self.session.refresh(contact)
        logger.info("Contact created", user_id=user_id, contact_id=contact.id)
        return contact

    def get_by_id(self, contact_id: str, user_id: str) -> Optional[Contact]:
        """Get contact ensuring ownership"""
        statement = select(Contact).where(
            Contact.id == contact_id,
            Contact.user_id == user_id
        )
        return self.session.exec(statement).first()

    def _find_by(self, user_id: str, field: str, identifier_type: IdentifierType, value: str) -> Optional[Contact]:
        # Primary value first, then the extra identifiers
        contact = self.session.exec(
            select(Contact).where(Contact.user_id == user_id).where(getattr(Contact, field) == value)
        ).first()
        if contact:
            return contact
        return self.session.exec(
            select(Contact)
            .join(ContactIdentifier, ContactIdentifier.contact_id == Contact.id)
            .where(Contact.user_id == user_id)
            .where(ContactIdentifier.identifier_type == identifier_type.value)
            .where(ContactIdentifier.identifier_value == value)
        ).first()

    def find_by_email(self, user_id: str, email: str) -> Optional[Contact]:
        return self._find_by(user_id, "primary_email", IdentifierType.EMAIL, normalize_email(email))

    def find_by_phone(self, user_id: str, phone: str) -> Optional[Contact]:
        return self._find_by(user_id, "primary_phone", IdentifierType.PHONE, phone.strip())

    def find_or_create_by_email(self, user_id: str, email: str, name: Optional[str] = None) -> Tuple[Contact, bool]:
        """Return the contact owning this address, creating one if nobody does."""
        contact = self.find_by_email(user_id, email)
        if contact:
            return contact, False
        email = normalize_email(email)
        return self.create(user_id, ContactCreate(name=name or email, primary_email=email)), True

    def search(self, user_id: str, query: str) -> List[Contact]:
        """Contacts whose name, primary values or any identifier contain query."""
        pattern = f"%{query}%"
        matching_identifiers = (
            select(ContactIdentifier.contact_id)
            .where(ContactIdentifier.identifier_value.ilike(pattern))
        )
        statement = (
            select(Contact)
            .where(Contact.user_id == user_id)
            .where(or_(
                Contact.name.ilike(pattern),
                Contact.display_name.ilike(pattern),
                Contact.primary_email.ilike(pattern),
                Contact.primary_phone.ilike(pattern),
                Contact.id.in_(matching_identifiers),
            ))
            .order_by(Contact.name.asc())
        )
        return list(self.session.exec(statement).all())

    def get_summary(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Every contact with its message count and first/last communication.

        Returns dicts with keys contact, message_count, first_communication and
        last_communication, busiest contacts first.
        """
        rows = self.session.exec(
            select(
                Communication.contact_id,
                func.count(Communication.id),
                func.min(OCCURRED_AT),
                func.max(OCCURRED_AT),
            )
            .where(Communication.user_id == user_id)
            .where(Communication.contact_id.is_not(None))
            .group_by(Communication.contact_id)
        ).all()
        stats = {contact_id: (count, first, last) for contact_id, count, first, last in rows}

        contacts = self.session.exec(select(Contact).where(Contact.user_id == user_id)).all()
        summary = []
        for contact in contacts:
            count, first, last = stats.get(contact.id, (0, None, None))
            summary.append({
                "contact": contact,
                "message_count": count,
                "first_communication": first,
                "last_communication": last,
            })
        summary.sort(key=lambda entry: (-entry["message_count"], entry["contact"].name))
        return summary

    def update(self, contact_id: str, user_id: str, data: ContactUpdate) -> Optional[Contact]:
        contact = self.get_by_id(contact_id, user_id)
        if not contact:
            return None

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            raise RecordError(
                code=VALIDATION_ERROR,
                message="name cannot be null",
                details={"field": "name"},
            )
        if "primary_email" in changes:
            changes["primary_email"] = normalize_email(changes["primary_email"])
            self._check_unique(user_id, "primary_email", changes["primary_email"], contact_id)
        if "primary_phone" in changes:
            self._check_unique(user_id, "primary_phone", changes["primary_phone"], contact_id)

        if "metadata" in changes:
            contact.record_metadata = changes.pop("metadata") or {}
        for field, value in changes.items():
            setattr(contact, field, value)
        contact.updated_at = utcnow()

        self.session.add(contact)
        self.audit.record(user_id, "contact.updated", "contact", contact_id,
                          {"fields": sorted(data.model_dump(exclude_unset=True))})
        self.session.commit()
        self.session.refresh(contact)
        return contact

    def add_identifier(self, contact_id: str, user_id: str, data: IdentifierCreate) -> Optional[ContactIdentifier]:
        """Attach another email, phone or name spelling to a contact."""
        contact = self.get_by_id(contact_id, user_id)
        if not contact:
            return None

        value = data.identifier_value.strip()
        if data.identifier_type == IdentifierType.EMAIL.value:
            value = value.lower()

        existing = self.session.exec(
            select(ContactIdentifier.id)
            .where(ContactIdentifier.contact_id == contact_id)
            .where(ContactIdentifier.identifier_type == data.identifier_type)
            .where(ContactIdentifier.identifier_value == value)
        ).first()
        if existing:
            raise RecordError(
                code=DUPLICATE,
                message="This identifier already exists for this contact",
                details={"identifier_id": existing},
            )

        identifier = ContactIdentifier(
            contact_id=contact_id,
            identifier_type=data.identifier_type,
            identifier_value=value,
            confidence_score=data.confidence_score,
            verified=data.verified,
            source=data.source,
        )
        self.session.add(identifier)
        self.audit.record(user_id, "contact.identifier_added", "contact", contact_id,
                          {"identifier_type": identifier.identifier_type})
        self.session.commit()
        self.session.refresh(identifier)
        return identifier

    def get_identifiers(self, contact_id: str) -> List[ContactIdentifier]:
        """Identifiers of a contact, most confident first."""
        statement = (
            select(ContactIdentifier)
            .where(ContactIdentifier.contact_id == contact_id)
            .order_by(ContactIdentifier.confidence_score.desc(), ContactIdentifier.created_at.asc())
        )
        return list(self.session.exec(statement).all())

    def delete(self, contact_id: str, user_id: str) -> bool:
        """Delete a contact and its identifiers; its communications stay, unlinked."""
        contact = self.get_by_id(contact_id, user_id)
        if not contact:
            return False

        communications = self.session.exec(
            select(Communication)
            .where(Communication.user_id == user_id)
            .where(Communication.contact_id == contact_id)
        ).all()
        for communication in communications:
            communication.contact_id = None
            self.session.add(communication)

        self.session.delete(contact)
        self.audit.record(user_id, "contact.deleted", "contact", contact_id,
                          {"unlinked_communications": len(communications)})
        self.session.commit()
        logger.info("Contact deleted", user_id=user_id, contact_id=contact_id)
        return True
