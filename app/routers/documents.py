"""Documents router."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.models.document import DocumentType
from app.schemas.document import DocumentChecksum, DocumentCreate, DocumentOCR, DocumentRead, DocumentUpdate
from app.services.document_service import DocumentService
from sqlmodel import Session

router = APIRouter(tags=["Documents"])  # No prefix since main.py adds /api prefix


def get_document_service(session: Session = Depends(get_session)) -> DocumentService:
    """Dependency for getting DocumentService instance."""
    return DocumentService(session)


def _found(document) -> DocumentRead:
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentRead.model_validate(document)


@router.get("/{user_id}/documents", response_model=List[DocumentRead])
async def list_documents(
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
    type: Optional[DocumentType] = Query(None, description="Filter by document type"),
    tag: Optional[str] = Query(None, description="Filter by tag"),
    incident_id: Optional[str] = Query(None, description="Documents linked to this incident"),
):
    documents = service.list_for_user(
        user_id,
        type=type.value if type else None,
        tag=tag,
        incident_id=incident_id,
    )
    return [DocumentRead.model_validate(document) for document in documents]


@router.post("/{user_id}/documents", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def create_document(
    data: DocumentCreate,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    """Register an uploaded document (the file is already in storage)."""
    return DocumentRead.model_validate(service.create(user_id, data))


@router.get("/{user_id}/documents/{document_id}", response_model=DocumentRead)
async def get_document(
    document_id: str,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    return _found(service.get_by_id(document_id, user_id))


@router.patch("/{user_id}/documents/{document_id}", response_model=DocumentRead)
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    return _found(service.update(document_id, user_id, data))


@router.put("/{user_id}/documents/{document_id}/checksum", response_model=DocumentRead)
async def set_document_checksum(
    document_id: str,
    data: DocumentChecksum,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    """Set the SHA-256 checksum. Fails with 409 if a different checksum is already stored."""
    return _found(service.set_checksum(document_id, user_id, data.checksum))


@router.post("/{user_id}/documents/{document_id}/ocr", response_model=DocumentRead)
async def record_document_ocr(
    document_id: str,
    data: DocumentOCR,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    return _found(service.record_ocr(document_id, user_id, data.ocr_text, data.tags))


@router.delete("/{user_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    user_id: str = Depends(verify_user_access),
    service: DocumentService = Depends(get_document_service),
):
    if not service.delete(document_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
