"""Pydantic schemas for Group API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import EmailAddress
from domain.entities.group import GroupRole, MembershipStatus


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=100)
    members: list[EmailAddress] = Field(default_factory=list, max_length=100)


class GroupInvite(BaseModel):
    """Schema for inviting users to a group."""

    users: list[EmailAddress] = Field(..., min_length=1, max_length=100)


class GroupMemberResponse(BaseModel):
    """Schema for Group Member response."""

    model_config = ConfigDict(from_attributes=True)

    email: str
    status: MembershipStatus
    role: GroupRole
    joined_at: datetime


class GroupResponse(BaseModel):
    """Schema for Group response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_by: str
    created_at: datetime
    members: list[GroupMemberResponse] = Field(default_factory=list)


class GroupListResponse(BaseModel):
    """Schema for list of Groups response."""

    data: list[GroupResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupDetailResponse(BaseModel):
    """Schema for single Group response."""

    message: str | None = None
    data: GroupResponse
