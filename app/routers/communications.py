"""
Communications router

Import, search and flag communication records. There is no delete route:
communications are kept and flagged, never removed.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from datetime import datetime
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.models.communication import CommunicationDirection, CommunicationType
from app.schemas.communication import (
    CommunicationAnalysisUpdate,
    CommunicationBatch,
    CommunicationBatchResult,
    CommunicationCreate,
    CommunicationFlag,
    CommunicationRead,
    CommunicationStats,
)
from app.services.communication_service import CommunicationService
from sqlmodel import Session

import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Communications"])  # No prefix since main.py adds /api prefix


def get_communication_service(session: Session = Depends(get_session)) -> CommunicationService:
    """Dependency for getting CommunicationService instance."""
    return CommunicationService(session)


@router.get("/{user_id}/communications", response_model=List[CommunicationRead])
async def search_communications(
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
    type: Optional[CommunicationType] = Query(None, description="Filter by channel"),
    direction: Optional[CommunicationDirection] = Query(None, description="sent or received"),
    flagged: Optional[bool] = Query(None, description="Only flagged / unflagged records"),
    thread_id: Optional[str] = Query(None),
    contact_id: Optional[str] = Query(None, description="Only messages linked to this contact"),
    search: Optional[str] = Query(None, description="Search subject, body, sender and recipient"),
    date_from: Optional[datetime] = Query(None, description="Occurred at or after (ISO format)"),
    date_to: Optional[datetime] = Query(None, description="Occurred at or before (ISO format)"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """Search the user's communications, most recent first."""
    communications = service.search(
        user_id=user_id,
        type=type.value if type else None,
        direction=direction.value if direction else None,
        flagged=flagged,
        thread_id=thread_id,
        contact_id=contact_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return [CommunicationRead.model_validate(c) for c in communications]


@router.post("/{user_id}/communications", response_model=CommunicationRead, status_code=status.HTTP_201_CREATED)
async def import_communication(
    data: CommunicationCreate,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return CommunicationRead.model_validate(service.import_one(user_id, data))


@router.post("/{user_id}/communications/batch", response_model=CommunicationBatchResult, status_code=status.HTTP_201_CREATED)
async def import_communications(
    batch: CommunicationBatch,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    created, skipped = service.import_batch(user_id, batch)
    logger.info(f"Batch import for user {user_id}: {len(created)} imported, {skipped} skipped")
    return CommunicationBatchResult(imported=len(created), skipped=skipped, ids=[c.id for c in created])


@router.get("/{user_id}/communications/stats", response_model=CommunicationStats)
async def communication_stats(
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return CommunicationStats(**service.get_stats(user_id))


@router.get("/{user_id}/communications/thread/{thread_id}", response_model=List[CommunicationRead])
async def get_thread(
    thread_id: str,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return [CommunicationRead.model_validate(c) for c in service.get_thread(user_id, thread_id)]


@router.get("/{user_id}/communications/{communication_id}", response_model=CommunicationRead)
async def get_communication(
    communication_id: str,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    communication = service.get_by_id(communication_id, user_id)
    if not communication:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Communication not found")
    return CommunicationRead.model_validate(communication)


@router.put("/{user_id}/communications/{communication_id}/analysis", response_model=CommunicationRead)
async def record_analysis(
    communication_id: str,
    data: CommunicationAnalysisUpdate,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    """Replace the analysis results (sentiment, keywords, flags)."""
    communication = service.record_analysis(communication_id, user_id, data.analysis_results)
    if not communication:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Communication not found")
    return CommunicationRead.model_validate(communication)


@router.post("/{user_id}/communications/{communication_id}/flag", response_model=CommunicationRead)
async def flag_communication(
    communication_id: str,
    data: CommunicationFlag,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    communication = service.flag(communication_id, user_id, data.reason)
    if not communication:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Communication not found")
    return CommunicationRead.model_validate(communication)


@router.delete("/{user_id}/communications/{communication_id}/flag", response_model=CommunicationRead)
async def unflag_communication(
    communication_id: str,
    user_id: str = Depends(verify_user_access),
    service: CommunicationService = Depends(get_communication_service),
):
    communication = service.unflag(communication_id, user_id)
    if not communication:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Communication not found")
    return CommunicationRead.model_validate(communication)
