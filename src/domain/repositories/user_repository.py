"""User repository protocol."""

from typing import Protocol

from domain.entities.user import PresenceStatus, User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email."""
        ...

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def update(self, user: User) -> User:
        """Update profile fields and presence of an existing user."""
        ...

    async def set_presence(self, email: str, status: PresenceStatus) -> bool:
        """Set presence status and last-seen. Returns False if the user is unknown."""
        ...
