"""Task service layer with business logic."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from core.exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
    NotAGroupMemberError,
    TaskNotFoundError,
    ValidationError,
)
from domain.entities.group import Group, MembershipStatus
from domain.entities.task import Task, TaskPriority, TaskStatus
from domain.entities.user import normalize_identity
from domain.repositories.unit_of_work import IUnitOfWork

if TYPE_CHECKING:
    from domain.services.realtime_gateway import RealtimeGateway

# Fields a PATCH may touch
UPDATABLE_FIELDS = frozenset(
    {"title", "description", "due_date", "priority", "assigned_to", "status"}
)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _normalize_assignees(emails: list[str]) -> list[str]:
    result: list[str] = []
    for email in emails:
        normalized = normalize_identity(email)
        if normalized and normalized not in result:
            result.append(normalized)
    return result


class TaskService:
    """Service layer for group tasks."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: Optional["RealtimeGateway"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway

    async def create(
        self,
        user_email: str,
        group_id: UUID,
        title: str,
        description: str,
        due_date: datetime,
        priority: TaskPriority,
        assigned_to: list[str] | None = None,
    ) -> Task:
        """Create a task in a group. Requires group admin."""
        title = title.strip()
        if not title:
            raise ValidationError("Task title is required")

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_admin(group, user_email)

            task = Task(
                group_id=group_id,
                title=title,
                description=description,
                due_date=_naive_utc(due_date),
                priority=priority,
                assigned_to=_normalize_assignees(assigned_to or []),
                created_by=user_email,
            )
            created = await uow.tasks.create(task)
            await uow.commit()

        if self._gateway:
            await self._gateway.task_created(created)
        return created

    async def list_for_user(
        self,
        user_email: str,
        group_id: UUID | None = None,
        assignee: str | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """List tasks visible to the user.

        With ``group_id`` the caller must be an active member of that group;
        without it, tasks across all of the caller's active groups are returned.
        """
        async with self._uow_factory() as uow:
            if group_id is not None:
                group = await self._get_group(uow, group_id)
                self._require_member(group, user_email)
                group_ids = [group_id]
            else:
                group_ids = await uow.groups.get_active_group_ids(user_email)

            return await uow.tasks.list(
                group_ids,
                assignee=normalize_identity(assignee) if assignee else None,
                status=status,
            )

    async def get(self, task_id: UUID, user_email: str) -> Task:
        """Get a task. Requires active membership in the task's group."""
        async with self._uow_factory() as uow:
            task = await self._get_task(uow, task_id)
            await self._require_active_membership(uow, task.group_id, user_email)
            return task

    async def update(
        self, task_id: UUID, user_email: str, changes: dict[str, Any]
    ) -> Task:
        """Apply a partial update. Requires active membership in the task's group."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown task fields", details={"fields": sorted(unknown)}
            )

        async with self._uow_factory() as uow:
            task = await self._get_task(uow, task_id)
            await self._require_active_membership(uow, task.group_id, user_email)

            applied: dict[str, Any] = {}
            for key, value in changes.items():
                if value is None:
                    continue
                if key == "title":
                    value = value.strip()
                    if not value:
                        raise ValidationError("Task title is required")
                elif key == "due_date":
                    value = _naive_utc(value)
                elif key == "priority":
                    value = TaskPriority(value)
                elif key == "status":
                    value = TaskStatus(value)
                elif key == "assigned_to":
                    value = _normalize_assignees(value)
                setattr(task, key, value)
                applied[key] = value

            task.touch()
            updated = await uow.tasks.update(task)
            await uow.commit()

        if self._gateway:
            await self._gateway.task_updated(updated, applied)
        return updated

    async def assign(self, task_id: UUID, user_email: str, assigned_to: list[str]) -> Task:
        """Union-merge assignees into a task. Requires group admin."""
        emails = _normalize_assignees(assigned_to)

        async with self._uow_factory() as uow:
            task = await self._get_task(uow, task_id)
            group = await self._get_group(uow, task.group_id)
            self._require_admin(group, user_email)

            task.assign(emails)
            updated = await uow.tasks.update(task)
            await uow.commit()

        if self._gateway:
            await self._gateway.task_assigned(updated, emails)
        return updated

    async def complete(self, task_id: UUID, user_email: str) -> Task:
        """Force a task to completed. Requires group admin."""
        async with self._uow_factory() as uow:
            task = await self._get_task(uow, task_id)
            group = await self._get_group(uow, task.group_id)
            self._require_admin(group, user_email)

            task.complete()
            updated = await uow.tasks.update(task)
            await uow.commit()

        if self._gateway:
            await self._gateway.task_completed(updated)
        return updated

    # --- Helpers ---

    async def _get_task(self, uow: IUnitOfWork, task_id: UUID) -> Task:
        task = await uow.tasks.get(task_id)
        if not task:
            raise TaskNotFoundError(str(task_id))
        return task

    async def _get_group(self, uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group

    async def _require_active_membership(
        self, uow: IUnitOfWork, group_id: UUID, user_email: str
    ) -> None:
        member = await uow.groups.get_member(group_id, user_email)
        if member is None or member.status != MembershipStatus.ACTIVE:
            raise NotAGroupMemberError(str(group_id))

    def _require_member(self, group: Group, user_email: str) -> None:
        if not group.is_active_member(user_email):
            raise NotAGroupMemberError(str(group.id))

    def _require_admin(self, group: Group, user_email: str) -> None:
        if not group.is_active_admin(user_email):
            raise InsufficientPermissionsError("admin")
