"""Message repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.message import Message


class IMessageRepository(Protocol):
    """Repository interface for append-only chat messages."""

    async def create(self, message: Message) -> Message:
        """Append a message."""
        ...

    async def get_for_group(
        self, group_id: UUID, before: datetime | None = None, limit: int = 50
    ) -> list[Message]:
        """Get the newest messages of a group, newest first.

        Only messages strictly older than ``before`` are returned when it is set.
        """
        ...
