"""Contacts router."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.models.contact import Contact
from app.schemas.contact import (
    ContactCreate, ContactDetail, ContactRead, ContactSummary, ContactUpdate,
    FindOrCreateContact, IdentifierCreate, IdentifierRead,
)
from app.services.contact_service import ContactService
from sqlmodel import Session

router = APIRouter(tags=["Contacts"])  # No prefix since main.py adds /api prefix

SUMMARY_FIELDS = ("message_count", "first_communication", "last_communication")


def get_contact_service(session: Session = Depends(get_session)) -> ContactService:
    """Dependency for getting ContactService instance."""
    return ContactService(session)


def _with_identifiers(service: ContactService, schema, contact: Contact, **extra):
    """Read schema for contact with its identifiers in confidence order."""
    identifiers = [IdentifierRead.model_validate(i) for i in service.get_identifiers(contact.id)]
    return schema.model_validate(contact).model_copy(update={"identifiers": identifiers, **extra})


@router.get("/{user_id}/contacts", response_model=List[ContactSummary])
async def list_contacts(
    search: Optional[str] = Query(None, min_length=1, description="Match name, email, phone or identifier"),
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    """Contacts with message counts, busiest first; ``search`` narrows the list."""
    entries = service.get_summary(user_id)
    if search:
        matched = {contact.id for contact in service.search(user_id, search)}
        entries = [entry for entry in entries if entry["contact"].id in matched]
    return [
        _with_identifiers(
            service, ContactSummary, entry["contact"], **{field: entry[field] for field in SUMMARY_FIELDS}
        )
        for entry in entries
    ]


@router.post("/{user_id}/contacts", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(
    data: ContactCreate,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    return ContactRead.model_validate(service.create(user_id, data))


@router.post("/{user_id}/contacts/find-or-create", response_model=ContactRead)
async def find_or_create_contact(
    data: FindOrCreateContact,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    contact, _ = service.find_or_create_by_email(user_id, data.email, data.name)
    return ContactRead.model_validate(contact)


@router.get("/{user_id}/contacts/{contact_id}", response_model=ContactDetail)
async def get_contact(
    contact_id: str,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.get_by_id(contact_id, user_id)
    if not contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return _with_identifiers(service, ContactDetail, contact)


@router.patch("/{user_id}/contacts/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: str,
    data: ContactUpdate,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.update(contact_id, user_id, data)
    if not contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return ContactRead.model_validate(contact)


@router.delete("/{user_id}/contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    contact_id: str,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    if not service.delete(contact_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")


@router.post(
    "/{user_id}/contacts/{contact_id}/identifiers",
    response_model=IdentifierRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_identifier(
    contact_id: str,
    data: IdentifierCreate,
    user_id: str = Depends(verify_user_access),
    service: ContactService = Depends(get_contact_service),
):
    identifier = service.add_identifier(contact_id, user_id, data)
    if not identifier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return IdentifierRead.model_validate(identifier)
