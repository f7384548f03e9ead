"""Pydantic schemas for chat message history."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageResponse(BaseModel):
    """Schema for a stored chat message."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    group_id: UUID
    sender: str
    content: str
    created_at: datetime


class ChatMessageListResponse(BaseModel):
    """A window of group history, oldest first."""

    data: list[ChatMessageResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
