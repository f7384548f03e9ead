"""Unit tests for AuthService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import InvalidCredentialsError, UserAlreadyExistsError, ValidationError
from domain.entities.user import PresenceStatus, User
from domain.services.auth_service import AuthService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from tests.fakes import FakeUnitOfWork


@pytest.fixture
def provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


@pytest.fixture
def hasher() -> MagicMock:
    hasher = MagicMock()
    hasher.hash = AsyncMock(return_value="hashed")
    hasher.verify = AsyncMock(return_value=True)
    return hasher


@pytest.fixture
def gateway() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(
    uow: FakeUnitOfWork, provider: JWTAuthProvider, hasher: MagicMock, gateway: AsyncMock
) -> AuthService:
    return AuthService(lambda: uow, provider, hasher, gateway=gateway)


@pytest.fixture
def stored_user() -> User:
    return User(email="ada@example.com", name="Ada", password_hash="hashed")


class TestSignup:
    @pytest.mark.asyncio
    async def test_creates_user_and_issues_token(
        self,
        service: AuthService,
        uow: FakeUnitOfWork,
        provider: JWTAuthProvider,
        hasher: MagicMock,
    ):
        uow.users.get_by_email.return_value = None
        uow.users.create.side_effect = lambda u: u

        token, user = await service.signup(" Ada@Example.com ", "secret123", " Ada ")

        assert user.email == "ada@example.com"
        assert user.name == "Ada"
        assert user.password_hash == "hashed"
        hasher.hash.assert_awaited_once_with("secret123")
        assert uow.committed
        claims = await provider.validate_token(token)
        assert claims.email == "ada@example.com"
        assert claims.display_name == "Ada"

    @pytest.mark.asyncio
    async def test_duplicate_email(
        self, service: AuthService, uow: FakeUnitOfWork, stored_user: User
    ):
        uow.users.get_by_email.return_value = stored_user

        with pytest.raises(UserAlreadyExistsError):
            await service.signup("ADA@example.com", "secret123", "Ada")

        uow.users.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_short_password(self, service: AuthService, uow: FakeUnitOfWork):
        with pytest.raises(ValidationError):
            await service.signup("ada@example.com", "123", "Ada")

    @pytest.mark.asyncio
    async def test_blank_name(self, service: AuthService):
        with pytest.raises(ValidationError):
            await service.signup("ada@example.com", "secret123", "  ")


class TestLogin:
    @pytest.mark.asyncio
    async def test_marks_online_and_broadcasts(
        self,
        service: AuthService,
        uow: FakeUnitOfWork,
        gateway: AsyncMock,
        stored_user: User,
    ):
        uow.users.get_by_email.return_value = stored_user
        uow.users.update.side_effect = lambda u: u

        token, user = await service.login("ada@example.com", "secret123")

        assert token
        assert user.status == PresenceStatus.ONLINE
        gateway.presence_changed.assert_awaited_once_with(
            "ada@example.com", PresenceStatus.ONLINE
        )

    @pytest.mark.asyncio
    async def test_unknown_email(
        self, service: AuthService, uow: FakeUnitOfWork, gateway: AsyncMock
    ):
        uow.users.get_by_email.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", "secret123")

        gateway.presence_changed.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_password(
        self,
        service: AuthService,
        uow: FakeUnitOfWork,
        hasher: MagicMock,
        stored_user: User,
    ):
        uow.users.get_by_email.return_value = stored_user
        hasher.verify.return_value = False

        with pytest.raises(InvalidCredentialsError):
            await service.login("ada@example.com", "wrong-password")

        uow.users.update.assert_not_called()


class TestLogout:
    @pytest.mark.asyncio
    async def test_marks_offline_and_drops_connection(
        self, service: AuthService, uow: FakeUnitOfWork, gateway: AsyncMock
    ):
        await service.logout("ada@example.com")

        uow.users.set_presence.assert_awaited_once_with(
            "ada@example.com", PresenceStatus.OFFLINE
        )
        assert uow.committed
        gateway.presence_changed.assert_awaited_once_with(
            "ada@example.com", PresenceStatus.OFFLINE
        )
        gateway.force_disconnect.assert_awaited_once_with("ada@example.com")
