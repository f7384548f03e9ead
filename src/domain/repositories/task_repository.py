"""Task repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.task import Task, TaskStatus


class ITaskRepository(Protocol):
    """Repository interface for Task entities."""

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        ...

    async def list(
        self,
        group_ids: list[UUID],
        assignee: str | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """List tasks of the given groups, optionally filtered."""
        ...

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        ...

    async def update(self, task: Task) -> Task:
        """Update an existing task, assignees included."""
        ...
