"""Unit tests for MessageService."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from core.exceptions import GroupNotFoundError, NotAGroupMemberError, ValidationError
from domain.entities.group import Group, GroupMember, GroupRole, MembershipStatus
from domain.entities.message import Message
from domain.services.message_service import MAX_MESSAGE_LENGTH, MessageService
from tests.fakes import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> MessageService:
    return MessageService(lambda: uow)


@pytest.fixture
def group(group_id: UUID, user_email: str, other_email: str) -> Group:
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
            GroupMember(group_id=group_id, email=other_email),
        ],
    )


class TestAppendIfMember:
    @pytest.mark.asyncio
    async def test_active_member_appends(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        uow.groups.get.return_value = group
        uow.groups.get_member.return_value = group.get_member(user_email)
        uow.messages.create.side_effect = lambda m: m

        message = await service.append_if_member(group.id, user_email, "  hi  ")

        assert message.content == "hi"
        assert message.sender == user_email
        assert message.group_id == group.id
        assert uow.committed

    @pytest.mark.asyncio
    async def test_membership_row_is_locked(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        uow.groups.get.return_value = group
        uow.groups.get_member.return_value = group.get_member(user_email)
        uow.messages.create.side_effect = lambda m: m

        await service.append_if_member(group.id, user_email, "hi")

        uow.groups.get_member.assert_awaited_once_with(group.id, user_email, for_update=True)

    @pytest.mark.asyncio
    async def test_pending_member_rejected_and_nothing_stored(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, other_email: str
    ):
        uow.groups.get.return_value = group
        uow.groups.get_member.return_value = group.get_member(other_email)

        with pytest.raises(NotAGroupMemberError):
            await service.append_if_member(group.id, other_email, "hello")

        uow.messages.create.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_stranger_rejected(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group
    ):
        uow.groups.get.return_value = group
        uow.groups.get_member.return_value = None

        with pytest.raises(NotAGroupMemberError):
            await service.append_if_member(group.id, "stranger@example.com", "hello")

    @pytest.mark.asyncio
    async def test_missing_group(
        self, service: MessageService, uow: FakeUnitOfWork, group_id: UUID, user_email: str
    ):
        uow.groups.get.return_value = None

        with pytest.raises(GroupNotFoundError):
            await service.append_if_member(group_id, user_email, "hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "x" * (MAX_MESSAGE_LENGTH + 1)])
    async def test_invalid_content(
        self,
        service: MessageService,
        uow: FakeUnitOfWork,
        group_id: UUID,
        user_email: str,
        content: str,
    ):
        with pytest.raises(ValidationError):
            await service.append_if_member(group_id, user_email, content)

        uow.groups.get.assert_not_called()


class TestGetHistory:
    @pytest.mark.asyncio
    async def test_returns_oldest_first(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        older = Message(group_id=group.id, sender=user_email, content="1",
                        created_at=datetime(2026, 1, 1, 10, 0))
        newer = Message(group_id=group.id, sender=user_email, content="2",
                        created_at=datetime(2026, 1, 1, 10, 5))
        uow.groups.get.return_value = group
        uow.messages.get_for_group.return_value = [newer, older]

        result = await service.get_history(group.id, user_email, limit=2)

        assert [m.content for m in result] == ["1", "2"]
        uow.messages.get_for_group.assert_awaited_once_with(group.id, before=None, limit=2)

    @pytest.mark.asyncio
    async def test_aware_cursor_is_converted_to_naive_utc(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        uow.groups.get.return_value = group
        uow.messages.get_for_group.return_value = []
        before = datetime(2026, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        await service.get_history(group.id, user_email, before=before)

        uow.messages.get_for_group.assert_awaited_once_with(
            group.id, before=datetime(2026, 1, 1, 10, 0), limit=50
        )

    @pytest.mark.asyncio
    async def test_limit_is_clamped_to_page_size_max(
        self, uow: FakeUnitOfWork, group: Group, user_email: str
    ):
        service = MessageService(lambda: uow, max_page_size=20)
        uow.groups.get.return_value = group
        uow.messages.get_for_group.return_value = []

        await service.get_history(group.id, user_email, limit=500)
        await service.get_history(group.id, user_email, limit=0)

        assert [c.kwargs["limit"] for c in uow.messages.get_for_group.await_args_list] == [
            20,
            1,
        ]

    @pytest.mark.asyncio
    async def test_pending_member_cannot_read(
        self, service: MessageService, uow: FakeUnitOfWork, group: Group, other_email: str
    ):
        uow.groups.get.return_value = group

        with pytest.raises(NotAGroupMemberError):
            await service.get_history(group.id, other_email)
