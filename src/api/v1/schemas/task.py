"""Pydantic schemas for Task API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import EmailAddress
from domain.entities.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a Task."""

    group_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., max_length=5000)
    due_date: datetime
    priority: TaskPriority
    assigned_to: list[EmailAddress] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Schema for updating a Task (all fields optional)."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    due_date: datetime | None = None
    priority: TaskPriority | None = None
    assigned_to: list[EmailAddress] | None = None
    status: TaskStatus | None = None


class TaskAssign(BaseModel):
    """Schema for adding assignees to a Task."""

    assigned_to: list[EmailAddress] = Field(..., min_length=1)


class TaskResponse(BaseModel):
    """Schema for Task response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "group_id": "456e4567-e89b-12d3-a456-426614174000",
                "title": "Write release notes",
                "description": "Summarize the sprint",
                "due_date": "2026-02-01T17:00:00",
                "priority": "high",
                "assigned_to": ["bob@example.com"],
                "status": "todo",
                "created_by": "ada@example.com",
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    group_id: UUID
    title: str
    description: str
    due_date: datetime
    priority: TaskPriority
    assigned_to: list[str]
    status: TaskStatus
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Schema for list of Tasks response."""

    data: list[TaskResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TaskDetailResponse(BaseModel):
    """Schema for single Task response."""

    message: str | None = None
    data: TaskResponse
