"""Pydantic schemas for Auth and User API."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from api.v1.schemas.common import EmailAddress
from domain.entities.user import PresenceStatus
from infrastructure.auth.password import BCRYPT_MAX_BYTES


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


# Length limits count characters, bcrypt counts UTF-8 bytes
Password = Annotated[str, AfterValidator(_check_password_bytes)]


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: EmailAddress
    password: Password = Field(..., min_length=6, max_length=72)
    name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(BaseModel):
    """Schema for logging in."""

    email: EmailAddress
    password: Password = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    """Public profile of a user."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "ada@example.com",
                "name": "Ada",
                "avatar_url": None,
                "status": "online",
                "last_seen": "2026-01-28T10:00:00",
                "created_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    email: str
    name: str
    avatar_url: str | None = None
    status: PresenceStatus
    last_seen: datetime
    created_at: datetime


class AuthData(BaseModel):
    """Token plus profile returned by signup and login."""

    token: str
    user: UserResponse


class AuthResponse(BaseModel):
    """Schema for signup/login response."""

    message: str
    data: AuthData


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's profile (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = Field(None, max_length=500)


class UserDetailResponse(BaseModel):
    """Schema for single user response."""

    message: str | None = None
    data: UserResponse
