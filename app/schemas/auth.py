"""Authentication and account schemas."""
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional


class TokenResponse(BaseModel):
    """Response containing JWT token after sign in."""
    token: str
    user_id: str
    email: str


class SignUpRequest(BaseModel):
    """Sign up request body."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class SignInRequest(BaseModel):
    """Sign in request body."""
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    """Profile fields a user may change. Absent fields are left alone."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    mfa_enabled: Optional[bool] = None


class UserRead(BaseModel):
    """Account as returned by the API. Never includes the password hash."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    mfa_enabled: bool
    email_verified: bool
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None
    is_active: bool

    class Config:
        from_attributes = True
