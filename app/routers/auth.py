"""Authentication router for the Family Navigator records API."""
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime, timedelta, timezone
import os
import jwt

from app.schemas.auth import SignUpRequest, SignInRequest, TokenResponse, UserRead, UserUpdate
from app.db.config import get_session
from app.middleware.auth import get_current_user, CurrentUser, JWT_SECRET, JWT_ALGORITHM
from app.services.user_service import UserService
from sqlmodel import Session

router = APIRouter(tags=["Authentication"])  # No prefix since main.py adds /auth

JWT_EXPIRE_HOURS = int(os.environ.get("JWT_EXPIRE_HOURS", "24"))


def create_jwt_token(user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "exp": now + timedelta(hours=JWT_EXPIRE_HOURS),
        "iat": now,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    """Dependency for getting UserService instance."""
    return UserService(session)


@router.post("/sign-up", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: SignUpRequest, service: UserService = Depends(get_user_service)):
    user = service.register(request)
    return TokenResponse(
        token=create_jwt_token(user.id, user.email),
        user_id=user.id,
        email=user.email
    )


@router.post("/sign-in", response_model=TokenResponse)
async def sign_in(request: SignInRequest, service: UserService = Depends(get_user_service)):
    user = service.authenticate(request.email, request.password)
    return TokenResponse(
        token=create_jwt_token(user.id, user.email),
        user_id=user.id,
        email=user.email
    )


@router.get("/me", response_model=UserRead)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Current account profile."""
    user = service.get_by_id(current_user.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.patch("/me", response_model=UserRead)
async def update_me(
    data: UserUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(current_user.user_id, data)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.post("/deactivate", response_model=UserRead)
async def deactivate(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Soft-deactivate the current account."""
    user = service.deactivate(current_user.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)
