"""Calendar router."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from datetime import date
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.models.calendar_event import EventType
from app.schemas.calendar_event import CalendarEventCreate, CalendarEventRead, CalendarEventUpdate
from app.services.calendar_service import CalendarService
from sqlmodel import Session

router = APIRouter(tags=["Calendar"])  # No prefix since main.py adds /api prefix


def get_calendar_service(session: Session = Depends(get_session)) -> CalendarService:
    """Dependency for getting CalendarService instance."""
    return CalendarService(session)


@router.get("/{user_id}/calendar", response_model=List[CalendarEventRead])
async def list_events(
    user_id: str = Depends(verify_user_access),
    service: CalendarService = Depends(get_calendar_service),
    start: Optional[date] = Query(None, description="Window start (ISO date)"),
    end: Optional[date] = Query(None, description="Window end (ISO date)"),
    child_id: Optional[str] = Query(None),
    event_type: Optional[EventType] = Query(None),
):
    if start and end and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must not be before start"
        )
    events = service.list_for_user(
        user_id,
        start=start,
        end=end,
        child_id=child_id,
        event_type=event_type.value if event_type else None,
    )
    return [CalendarEventRead.model_validate(event) for event in events]


@router.post("/{user_id}/calendar", response_model=CalendarEventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: CalendarEventCreate,
    user_id: str = Depends(verify_user_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return CalendarEventRead.model_validate(service.create(user_id, data))


@router.get("/{user_id}/calendar/{event_id}", response_model=CalendarEventRead)
async def get_event(
    event_id: str,
    user_id: str = Depends(verify_user_access),
    service: CalendarService = Depends(get_calendar_service),
):
    event = service.get_by_id(event_id, user_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return CalendarEventRead.model_validate(event)


@router.patch("/{user_id}/calendar/{event_id}", response_model=CalendarEventRead)
async def update_event(
    event_id: str,
    data: CalendarEventUpdate,
    user_id: str = Depends(verify_user_access),
    service: CalendarService = Depends(get_calendar_service),
):
    event = service.update(event_id, user_id, data)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return CalendarEventRead.model_validate(event)


@router.delete("/{user_id}/calendar/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    user_id: str = Depends(verify_user_access),
    service: CalendarService = Depends(get_calendar_service),
):
    if not service.delete(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
