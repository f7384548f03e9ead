"""SQLAlchemy implementation of Message repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.message import Message
from infrastructure.database.models import MessageModel


class SQLAlchemyMessageRepository:
    """SQLAlchemy implementation of IMessageRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        """Append a message."""
        model = MessageModel(
            id=message.id,
            group_id=message.group_id,
            sender=message.sender,
            content=message.content,
            created_at=message.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return message

    async def get_for_group(
        self, group_id: UUID, before: datetime | None = None, limit: int = 50
    ) -> list[Message]:
        """Get the newest messages of a group, newest first."""
        stmt = select(MessageModel).where(MessageModel.group_id == group_id)
        if before is not None:
            stmt = stmt.where(MessageModel.created_at < before)
        stmt = stmt.order_by(MessageModel.created_at.desc(), MessageModel.id.desc()).limit(limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: MessageModel) -> Message:
        return Message(
            id=model.id,
            group_id=model.group_id,
            sender=model.sender,
            content=model.content,
            created_at=model.created_at,
        )
