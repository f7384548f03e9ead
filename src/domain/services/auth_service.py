"""Authentication service: signup, login and logout."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Optional

import structlog

from core.exceptions import InvalidCredentialsError, UserAlreadyExistsError, ValidationError
from domain.entities.user import PresenceStatus, User, normalize_identity
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.auth.provider import IAuthProvider, IPasswordHasher, TokenUser

if TYPE_CHECKING:
    from domain.services.realtime_gateway import RealtimeGateway

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6


class AuthService:
    """Issues session tokens against stored credentials."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        auth_provider: IAuthProvider,
        password_hasher: IPasswordHasher,
        gateway: Optional["RealtimeGateway"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._auth = auth_provider
        self._hasher = password_hasher
        self._gateway = gateway

    async def signup(self, email: str, password: str, name: str) -> tuple[str, User]:
        """Create an account and return a session token for it."""
        email = normalize_identity(email)
        name = name.strip()
        if not email or not name:
            raise ValidationError("Email, password and name are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        async with self._uow_factory() as uow:
            if await uow.users.get_by_email(email):
                raise UserAlreadyExistsError(email)

            password_hash = await self._hasher.hash(password)
            user = await uow.users.create(
                User(email=email, name=name, password_hash=password_hash)
            )
            await uow.commit()

        logger.info("user_signed_up", email=email)
        return self._issue(user), user

    async def login(self, email: str, password: str) -> tuple[str, User]:
        """Verify credentials, mark the user online and return a session token."""
        email = normalize_identity(email)

        async with self._uow_factory() as uow:
            user = await uow.users.get_by_email(email)
            if not user or not await self._hasher.verify(password, user.password_hash):
                raise InvalidCredentialsError()

            user.set_presence(PresenceStatus.ONLINE)
            user = await uow.users.update(user)
            await uow.commit()

        if self._gateway:
            await self._gateway.presence_changed(email, PresenceStatus.ONLINE)
        return self._issue(user), user

    async def logout(self, email: str) -> None:
        """Mark the user offline and close their realtime connection."""
        async with self._uow_factory() as uow:
            await uow.users.set_presence(email, PresenceStatus.OFFLINE)
            await uow.commit()

        if self._gateway:
            await self._gateway.presence_changed(email, PresenceStatus.OFFLINE)
            await self._gateway.force_disconnect(email)

    def _issue(self, user: User) -> str:
        return self._auth.create_token(TokenUser(email=user.email, display_name=user.name))
