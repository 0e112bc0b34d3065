"""Incidents router."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from datetime import date
from typing import List, Optional

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.models.incident import IncidentSeverity, IncidentType
from app.schemas.incident import (
    EvidenceLink,
    IncidentCreate,
    IncidentRead,
    IncidentTimeline,
    IncidentUpdate,
    TimelineEntry,
)
from app.services.incident_service import IncidentService
from sqlmodel import Session

router = APIRouter(tags=["Incidents"])  # No prefix since main.py adds /api prefix


def get_incident_service(session: Session = Depends(get_session)) -> IncidentService:
    """Dependency for getting IncidentService instance."""
    return IncidentService(session)


@router.get("/{user_id}/incidents", response_model=List[IncidentRead])
async def list_incidents(
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
    type: Optional[IncidentType] = Query(None),
    severity: Optional[IncidentSeverity] = Query(None),
    date_from: Optional[date] = Query(None, description="Incidents on or after this date"),
    date_to: Optional[date] = Query(None, description="Incidents on or before this date"),
    follow_up_required: Optional[bool] = Query(None),
):
    incidents = service.list_for_user(
        user_id,
        type=type.value if type else None,
        severity=severity.value if severity else None,
        date_from=date_from,
        date_to=date_to,
        follow_up_required=follow_up_required,
    )
    return [IncidentRead.model_validate(incident) for incident in incidents]


@router.post("/{user_id}/incidents", response_model=IncidentRead, status_code=status.HTTP_201_CREATED)
async def create_incident(
    data: IncidentCreate,
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
):
    """Log an incident. Evidence ids must reference the user's own records."""
    return IncidentRead.model_validate(service.create(user_id, data))


@router.get("/{user_id}/incidents/timeline", response_model=IncidentTimeline)
async def incident_timeline(
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
):
    incidents = service.get_timeline(user_id, date_from=date_from, date_to=date_to)
    entries = [
        TimelineEntry(
            id=incident.id,
            title=incident.title,
            incident_date=incident.incident_date,
            incident_time=incident.incident_time,
            type=incident.type,
            severity=incident.severity,
            evidence_count=sum(
                len(group.get("document_ids", [])) + len(group.get("communication_ids", []))
                for group in incident.evidence
            ),
        )
        for incident in incidents
    ]
    return IncidentTimeline(timeline=entries, total_incidents=len(entries))


@router.get("/{user_id}/incidents/{incident_id}", response_model=IncidentRead)
async def get_incident(
    incident_id: str,
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
):
    incident = service.get_by_id(incident_id, user_id)
    if not incident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")
    return IncidentRead.model_validate(incident)


@router.patch("/{user_id}/incidents/{incident_id}", response_model=IncidentRead)
async def update_incident(
    incident_id: str,
    data: IncidentUpdate,
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
):
    incident = service.update(incident_id, user_id, data)
    if not incident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")
    return IncidentRead.model_validate(incident)


@router.post("/{user_id}/incidents/{incident_id}/evidence", response_model=IncidentRead, status_code=status.HTTP_201_CREATED)
async def add_incident_evidence(
    incident_id: str,
    link: EvidenceLink,
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
):
    incident = service.add_evidence(incident_id, user_id, link)
    if not incident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")
    return IncidentRead.model_validate(incident)


@router.delete("/{user_id}/incidents/{incident_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_incident(
    incident_id: str,
    user_id: str = Depends(verify_user_access),
    service: IncidentService = Depends(get_incident_service),
):
    if not service.delete(incident_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")
