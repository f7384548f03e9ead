"""Unit tests for TaskService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest

from core.exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
    NotAGroupMemberError,
    TaskNotFoundError,
    ValidationError,
)
from domain.entities.group import Group, GroupMember, GroupRole, MembershipStatus
from domain.entities.task import Task, TaskPriority, TaskStatus
from domain.services.task_service import TaskService
from tests.fakes import FakeUnitOfWork

DUE = datetime(2026, 3, 1, 17, 0)


@pytest.fixture
def gateway() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(uow: FakeUnitOfWork, gateway: AsyncMock) -> TaskService:
    return TaskService(lambda: uow, gateway=gateway)


@pytest.fixture
def group(group_id: UUID, user_email: str, other_email: str) -> Group:
    """user_email is admin, other_email is a plain active member."""
    return Group(
        id=group_id,
        name="Dev Team",
        created_by=user_email,
        members=[
            GroupMember(
                group_id=group_id,
                email=user_email,
                status=MembershipStatus.ACTIVE,
                role=GroupRole.ADMIN,
            ),
            GroupMember(group_id=group_id, email=other_email, status=MembershipStatus.ACTIVE),
        ],
    )


@pytest.fixture
def task(group_id: UUID, user_email: str) -> Task:
    return Task(
        group_id=group_id,
        title="Write notes",
        description="Sprint summary",
        due_date=DUE,
        priority=TaskPriority.MEDIUM,
        assigned_to=["bob@example.com"],
        created_by=user_email,
    )


# --- create ---


class TestCreate:
    @pytest.mark.asyncio
    async def test_admin_creates_task(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        gateway: AsyncMock,
        group: Group,
        user_email: str,
    ):
        uow.groups.get.return_value = group
        uow.tasks.create.side_effect = lambda t: t

        task = await service.create(
            user_email,
            group.id,
            " Write notes ",
            "Sprint summary",
            DUE,
            TaskPriority.HIGH,
            ["Bob@example.com", "bob@example.com", "carol@example.com"],
        )

        assert task.title == "Write notes"
        assert task.status == TaskStatus.TODO
        assert task.assigned_to == ["bob@example.com", "carol@example.com"]
        assert task.created_by == user_email
        assert uow.committed
        gateway.task_created.assert_awaited_once_with(task)

    @pytest.mark.asyncio
    async def test_aware_due_date_stored_as_naive_utc(
        self, service: TaskService, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        uow.groups.get.return_value = group
        uow.tasks.create.side_effect = lambda t: t
        due = datetime(2026, 3, 1, 19, 0, tzinfo=timezone(timedelta(hours=2)))

        task = await service.create(
            user_email, group.id, "T", "", due, TaskPriority.LOW
        )

        assert task.due_date == DUE

    @pytest.mark.asyncio
    async def test_plain_member_rejected(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        gateway: AsyncMock,
        group: Group,
        other_email: str,
    ):
        uow.groups.get.return_value = group

        with pytest.raises(InsufficientPermissionsError):
            await service.create(other_email, group.id, "T", "", DUE, TaskPriority.LOW)

        uow.tasks.create.assert_not_called()
        gateway.task_created.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_group(
        self, service: TaskService, uow: FakeUnitOfWork, group_id: UUID, user_email: str
    ):
        uow.groups.get.return_value = None

        with pytest.raises(GroupNotFoundError):
            await service.create(user_email, group_id, "T", "", DUE, TaskPriority.LOW)

    @pytest.mark.asyncio
    async def test_blank_title(
        self, service: TaskService, group_id: UUID, user_email: str
    ):
        with pytest.raises(ValidationError):
            await service.create(user_email, group_id, "  ", "", DUE, TaskPriority.LOW)


# --- list / get ---


class TestList:
    @pytest.mark.asyncio
    async def test_single_group_requires_membership(
        self, service: TaskService, uow: FakeUnitOfWork, group: Group
    ):
        uow.groups.get.return_value = group

        with pytest.raises(NotAGroupMemberError):
            await service.list_for_user("stranger@example.com", group_id=group.id)

    @pytest.mark.asyncio
    async def test_single_group_with_filters(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        group: Group,
        other_email: str,
        task: Task,
    ):
        uow.groups.get.return_value = group
        uow.tasks.list.return_value = [task]

        result = await service.list_for_user(
            other_email,
            group_id=group.id,
            assignee=" Bob@Example.com",
            status=TaskStatus.TODO,
        )

        assert result == [task]
        uow.tasks.list.assert_awaited_once_with(
            [group.id], assignee="bob@example.com", status=TaskStatus.TODO
        )

    @pytest.mark.asyncio
    async def test_without_group_spans_active_groups(
        self, service: TaskService, uow: FakeUnitOfWork, group_id: UUID, user_email: str
    ):
        uow.groups.get_active_group_ids.return_value = [group_id]
        uow.tasks.list.return_value = []

        await service.list_for_user(user_email)

        uow.groups.get_active_group_ids.assert_awaited_once_with(user_email)
        uow.tasks.list.assert_awaited_once_with([group_id], assignee=None, status=None)


class TestGet:
    @pytest.mark.asyncio
    async def test_member_reads_task(
        self, service: TaskService, uow: FakeUnitOfWork, task: Task, other_email: str
    ):
        uow.tasks.get.return_value = task
        uow.groups.get_member.return_value = GroupMember(
            group_id=task.group_id, email=other_email, status=MembershipStatus.ACTIVE
        )

        assert await service.get(task.id, other_email) is task

    @pytest.mark.asyncio
    async def test_pending_member_rejected(
        self, service: TaskService, uow: FakeUnitOfWork, task: Task, other_email: str
    ):
        uow.tasks.get.return_value = task
        uow.groups.get_member.return_value = GroupMember(
            group_id=task.group_id, email=other_email
        )

        with pytest.raises(NotAGroupMemberError):
            await service.get(task.id, other_email)

    @pytest.mark.asyncio
    async def test_missing_task(
        self, service: TaskService, uow: FakeUnitOfWork, task: Task, user_email: str
    ):
        uow.tasks.get.return_value = None

        with pytest.raises(TaskNotFoundError):
            await service.get(task.id, user_email)


# --- update ---


class TestUpdate:
    @pytest.fixture(autouse=True)
    def _member(self, uow: FakeUnitOfWork, task: Task, other_email: str) -> None:
        uow.tasks.get.return_value = task
        uow.tasks.update.side_effect = lambda t: t
        uow.groups.get_member.return_value = GroupMember(
            group_id=task.group_id, email=other_email, status=MembershipStatus.ACTIVE
        )

    @pytest.mark.asyncio
    async def test_applies_only_given_fields(
        self,
        service: TaskService,
        gateway: AsyncMock,
        task: Task,
        other_email: str,
    ):
        updated = await service.update(
            task.id, other_email, {"status": "in-progress", "description": None}
        )

        assert updated.status == TaskStatus.IN_PROGRESS
        assert updated.description == "Sprint summary"
        assert updated.title == "Write notes"
        gateway.task_updated.assert_awaited_once_with(
            updated, {"status": TaskStatus.IN_PROGRESS}
        )

    @pytest.mark.asyncio
    async def test_replaces_assignees(
        self, service: TaskService, task: Task, other_email: str
    ):
        updated = await service.update(
            task.id, other_email, {"assigned_to": ["Carol@example.com"]}
        )

        assert updated.assigned_to == ["carol@example.com"]

    @pytest.mark.asyncio
    async def test_refreshes_updated_at(
        self, service: TaskService, task: Task, other_email: str
    ):
        task.updated_at = datetime(2000, 1, 1)
        task.created_at = datetime(2000, 1, 1)

        updated = await service.update(task.id, other_email, {"priority": "high"})

        assert updated.priority == TaskPriority.HIGH
        assert updated.updated_at > datetime(2000, 1, 1)

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(
        self, service: TaskService, uow: FakeUnitOfWork, task: Task, other_email: str
    ):
        with pytest.raises(ValidationError):
            await service.update(task.id, other_email, {"group_id": "x"})

        uow.tasks.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_member_rejected(
        self, service: TaskService, uow: FakeUnitOfWork, task: Task
    ):
        uow.groups.get_member.return_value = None

        with pytest.raises(NotAGroupMemberError):
            await service.update(task.id, "stranger@example.com", {"title": "x"})


# --- assign / complete ---


class TestAssign:
    @pytest.mark.asyncio
    async def test_union_merges_assignees(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        gateway: AsyncMock,
        group: Group,
        task: Task,
        user_email: str,
    ):
        uow.tasks.get.return_value = task
        uow.groups.get.return_value = group
        uow.tasks.update.side_effect = lambda t: t

        updated = await service.assign(
            task.id, user_email, ["bob@example.com", "Carol@example.com"]
        )

        assert updated.assigned_to == ["bob@example.com", "carol@example.com"]
        gateway.task_assigned.assert_awaited_once_with(
            updated, ["bob@example.com", "carol@example.com"]
        )

    @pytest.mark.asyncio
    async def test_plain_member_rejected(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        group: Group,
        task: Task,
        other_email: str,
    ):
        uow.tasks.get.return_value = task
        uow.groups.get.return_value = group

        with pytest.raises(InsufficientPermissionsError):
            await service.assign(task.id, other_email, ["carol@example.com"])


class TestComplete:
    @pytest.mark.asyncio
    async def test_admin_completes(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        gateway: AsyncMock,
        group: Group,
        task: Task,
        user_email: str,
    ):
        uow.tasks.get.return_value = task
        uow.groups.get.return_value = group
        uow.tasks.update.side_effect = lambda t: t

        updated = await service.complete(task.id, user_email)

        assert updated.status == TaskStatus.COMPLETED
        gateway.task_completed.assert_awaited_once_with(updated)

    @pytest.mark.asyncio
    async def test_plain_member_rejected(
        self,
        service: TaskService,
        uow: FakeUnitOfWork,
        group: Group,
        task: Task,
        other_email: str,
    ):
        uow.tasks.get.return_value = task
        uow.groups.get.return_value = group

        with pytest.raises(InsufficientPermissionsError):
            await service.complete(task.id, other_email)
