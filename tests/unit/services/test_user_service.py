"""Unit tests for UserService."""

import pytest

from core.exceptions import UserNotFoundError, ValidationError
from domain.entities.group import Group, MembershipStatus
from domain.entities.user import User
from domain.services.user_service import UserService
from tests.fakes import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> UserService:
    return UserService(lambda: uow)


@pytest.fixture
def user(user_email: str) -> User:
    return User(email=user_email, name="Ada", password_hash="hashed")


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile(
        self, service: UserService, uow: FakeUnitOfWork, user: User, user_email: str
    ):
        uow.users.get_by_email.return_value = user

        assert await service.get_profile(user_email) is user

    @pytest.mark.asyncio
    async def test_get_profile_missing(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.get_by_email.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.get_profile("ghost@example.com")

    @pytest.mark.asyncio
    async def test_update_only_given_fields(
        self, service: UserService, uow: FakeUnitOfWork, user: User, user_email: str
    ):
        uow.users.get_by_email.return_value = user
        uow.users.update.side_effect = lambda u: u

        updated = await service.update_profile(user_email, avatar_url="https://img/a.png")

        assert updated.name == "Ada"
        assert updated.avatar_url == "https://img/a.png"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_empty_avatar_clears_it(
        self, service: UserService, uow: FakeUnitOfWork, user: User, user_email: str
    ):
        user.avatar_url = "https://img/a.png"
        uow.users.get_by_email.return_value = user
        uow.users.update.side_effect = lambda u: u

        updated = await service.update_profile(user_email, avatar_url="")

        assert updated.avatar_url is None

    @pytest.mark.asyncio
    async def test_blank_name_rejected(
        self, service: UserService, uow: FakeUnitOfWork, user: User, user_email: str
    ):
        uow.users.get_by_email.return_value = user

        with pytest.raises(ValidationError):
            await service.update_profile(user_email, name="   ")

        uow.users.update.assert_not_called()


class TestInvitations:
    @pytest.mark.asyncio
    async def test_lists_pending_groups(
        self, service: UserService, uow: FakeUnitOfWork, user_email: str
    ):
        pending = Group(name="Dev", created_by="bob@example.com")
        uow.groups.get_for_member.return_value = [pending]

        result = await service.get_invitations(user_email)

        assert result == [pending]
        uow.groups.get_for_member.assert_awaited_once_with(
            user_email, MembershipStatus.PENDING
        )
