"""Children router."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.db.config import get_session
from app.middleware.auth import verify_user_access
from app.schemas.child import ChildCreate, ChildRead, ChildUpdate
from app.services.child_service import ChildService
from sqlmodel import Session

router = APIRouter(tags=["Children"])  # No prefix since main.py adds /api prefix


def get_child_service(session: Session = Depends(get_session)) -> ChildService:
    """Dependency for getting ChildService instance."""
    return ChildService(session)


@router.get("/{user_id}/children", response_model=List[ChildRead])
async def list_children(
    user_id: str = Depends(verify_user_access),
    service: ChildService = Depends(get_child_service),
):
    return [ChildRead.model_validate(child) for child in service.list_for_user(user_id)]


@router.post("/{user_id}/children", response_model=ChildRead, status_code=status.HTTP_201_CREATED)
async def create_child(
    data: ChildCreate,
    user_id: str = Depends(verify_user_access),
    service: ChildService = Depends(get_child_service),
):
    return ChildRead.model_validate(service.create(user_id, data))


@router.get("/{user_id}/children/{child_id}", response_model=ChildRead)
async def get_child(
    child_id: str,
    user_id: str = Depends(verify_user_access),
    service: ChildService = Depends(get_child_service),
):
    child = service.get_by_id(child_id, user_id)
    if not child:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Child not found")
    return ChildRead.model_validate(child)


@router.patch("/{user_id}/children/{child_id}", response_model=ChildRead)
async def update_child(
    child_id: str,
    data: ChildUpdate,
    user_id: str = Depends(verify_user_access),
    service: ChildService = Depends(get_child_service),
):
    child = service.update(child_id, user_id, data)
    if not child:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Child not found")
    return ChildRead.model_validate(child)


@router.delete("/{user_id}/children/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_child(
    child_id: str,
    user_id: str = Depends(verify_user_access),
    service: ChildService = Depends(get_child_service),
):
    if not service.delete(child_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Child not found")
