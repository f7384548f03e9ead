"""User profile service layer."""

from collections.abc import Callable

from core.exceptions import UserNotFoundError, ValidationError
from domain.entities.group import Group, MembershipStatus
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork


class UserService:
    """Service layer for the caller's own profile and invitations."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_profile(self, email: str) -> User:
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_email(email)
            if not user:
                raise UserNotFoundError(email)
            return user

    async def update_profile(
        self,
        email: str,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> User:
        """Update display name and/or avatar. Omitted fields are left unchanged."""
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_email(email)
            if not user:
                raise UserNotFoundError(email)

            if name is not None:
                name = name.strip()
                if not name:
                    raise ValidationError("Name cannot be empty")
                user.name = name
            if avatar_url is not None:
                user.avatar_url = avatar_url or None

            updated = await uow.users.update(user)
            await uow.commit()
            return updated

    async def get_invitations(self, email: str) -> list[Group]:
        """Groups where the user's membership is still pending."""
        async with self._uow_factory() as uow:
            return await uow.groups.get_for_member(email, MembershipStatus.PENDING)
