"""Task domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class TaskPriority(StrEnum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(StrEnum):
    """Lifecycle status of a task."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass
class Task:
    """Domain entity for a group task."""

    group_id: UUID
    title: str
    description: str
    due_date: datetime
    priority: TaskPriority
    id: UUID = field(default_factory=uuid4)
    assigned_to: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.TODO
    created_by: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def assign(self, emails: list[str]) -> None:
        """Union-merge assignees, keeping the existing order first."""
        for email in emails:
            if email not in self.assigned_to:
                self.assigned_to.append(email)
        self.touch()

    def complete(self) -> None:
        """Mark the task as completed."""
        self.status = TaskStatus.COMPLETED
        self.touch()
