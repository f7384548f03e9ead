"""Chat message service layer."""

from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID

from core.exceptions import GroupNotFoundError, NotAGroupMemberError, ValidationError
from domain.entities.message import Message
from domain.repositories.unit_of_work import IUnitOfWork

MAX_MESSAGE_LENGTH = 2000


class MessageService:
    """Service layer for appending and reading chat messages."""

    def __init__(
        self, uow_factory: Callable[[], IUnitOfWork], max_page_size: int = 100
    ) -> None:
        self._uow_factory = uow_factory
        self._max_page_size = max_page_size

    async def append_if_member(self, group_id: UUID, sender: str, content: str) -> Message:
        """Persist a message if, and only if, the sender is an active member.

        The membership row stays locked until the message is committed, so a
        concurrent leave/remove cannot interleave between check and append.
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("Message content is required")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message content must be at most {MAX_MESSAGE_LENGTH} characters",
                details={"max_length": MAX_MESSAGE_LENGTH},
            )

        async with self._uow_factory() as uow:
            group = await uow.groups.get(group_id)
            if not group:
                raise GroupNotFoundError(str(group_id))

            member = await uow.groups.get_member(group_id, sender, for_update=True)
            if member is None or not member.is_active:
                raise NotAGroupMemberError(str(group_id))

            message = await uow.messages.create(
                Message(group_id=group_id, sender=sender, content=text)
            )
            await uow.commit()
            return message

    async def get_history(
        self,
        group_id: UUID,
        user_email: str,
        before: datetime | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """Get a window of group history, returned oldest first.

        The window is the ``limit`` newest messages strictly older than ``before``;
        ``limit`` is clamped to 1..max_page_size.
        """
        limit = max(1, min(limit, self._max_page_size))
        if before is not None and before.tzinfo is not None:
            before = before.astimezone(timezone.utc).replace(tzinfo=None)

        async with self._uow_factory() as uow:
            group = await uow.groups.get(group_id)
            if not group:
                raise GroupNotFoundError(str(group_id))
            if not group.is_active_member(user_email):
                raise NotAGroupMemberError(str(group_id))

            newest_first = await uow.messages.get_for_group(group_id, before=before, limit=limit)
            return list(reversed(newest_first))
