"""SQLAlchemy implementation of User repository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.user import PresenceStatus, User, normalize_identity
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email."""
        model = await self._get_model(email)
        return self._to_entity(model) if model else None

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = self._to_model(user)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        """Update profile fields and presence of an existing user."""
        model = await self._get_model(user.email)

        if not model:
            raise ValueError(f"User {user.email} not found")

        model.name = user.name
        model.avatar_url = user.avatar_url
        model.status = user.status.value
        model.last_seen = user.last_seen
        model.updated_at = datetime.utcnow()

        await self._session.flush()
        return self._to_entity(model)

    async def set_presence(self, email: str, status: PresenceStatus) -> bool:
        """Set presence status and last-seen. Returns False if the user is unknown."""
        model = await self._get_model(email)
        if not model:
            return False

        model.status = status.value
        model.last_seen = datetime.utcnow()
        await self._session.flush()
        return True

    async def _get_model(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == normalize_identity(email))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            email=model.email,
            name=model.name,
            password_hash=model.password_hash,
            avatar_url=model.avatar_url,
            status=PresenceStatus(model.status),
            last_seen=model.last_seen,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            email=entity.email,
            name=entity.name,
            password_hash=entity.password_hash,
            avatar_url=entity.avatar_url,
            status=entity.status.value,
            last_seen=entity.last_seen,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
