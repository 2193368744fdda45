"""Pydantic schemas for authentication API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import UserRole


class RegisterRequest(BaseModel):
    """Request for user registration."""

    email: EmailStr
    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        pattern=r"^[a-zA-Z][a-zA-Z0-9_.-]*$",
        description="Username (3-100 chars, must start with a letter)",
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (minimum 6 characters)",
    )
    role: UserRole = UserRole.CUSTOMER


class LoginRequest(BaseModel):
    """Request for login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Response with a freshly issued session token."""

    token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    email: str
    role: UserRole
    expires_at: datetime = Field(description="When the token stops being accepted")


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class TokenStatusResponse(BaseModel):
    """Blacklist status of the presented token plus its identity claims."""

    is_valid: bool
    is_blacklisted: bool
    user_id: str | None
    username: str | None
    email: str | None
    role: str | None
    checked_at: datetime


class UserResponse(BaseModel):
    """Response with user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    created_at: datetime
    last_login_at: datetime | None


class ProtectedDataResponse(BaseModel):
    """Claims echoed back by the protected demo endpoints."""

    message: str
    user_id: str | None
    username: str | None
    email: str | None
    role: str | None
    timestamp: datetime
