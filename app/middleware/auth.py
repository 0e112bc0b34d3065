"""
Bearer token checks for the records API.

Tokens are issued by /auth/sign-in (see app.routers.auth) and carry the
account id in ``sub``. Every /api/{user_id}/... route depends on
verify_user_access, which also refuses accounts deactivated after the
token was issued.
"""
from fastapi import Depends, HTTPException, status, Request
from jose import jwt, JWTError
from pydantic import BaseModel
from sqlmodel import Session
from typing import Optional
import os
from dotenv import load_dotenv

from app.db.config import get_session
from app.models.user import User

load_dotenv()

JWT_SECRET = os.environ.get("JWT_SECRET", "development_jwt_secret")
JWT_ALGORITHM = "HS256"

BEARER_PREFIX = "Bearer "


class CurrentUser(BaseModel):
    """Account information carried by the token."""
    user_id: str
    email: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> CurrentUser:
    """Verify signature and expiry, then read the account id out of the token."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID")
    return CurrentUser(user_id=user_id, email=payload.get("email"))


async def get_current_user(request: Request) -> CurrentUser:
    """
    Read the Bearer token from the Authorization header.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise _unauthorized("Missing or invalid Authorization header")
    return decode_token(auth_header[len(BEARER_PREFIX):])


async def verify_user_access(
    user_id: str,
    request: Request,
    session: Session = Depends(get_session)
) -> str:
    """
    Resolve the {user_id} path segment for a records route.

    Returns:
        The verified user ID

    Raises:
        HTTPException: 401 without a valid token or for a deactivated account,
            403 when the token belongs to someone else
    """
    current_user = await get_current_user(request)

    if user_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this user's records"
        )

    account = session.get(User, user_id)
    if account is None or not account.is_active:
        raise _unauthorized("Account is not active")
    return user_id
