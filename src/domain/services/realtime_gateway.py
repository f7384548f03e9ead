"""Realtime gateway: connection lifecycle, channel membership and fan-out.

Inbound client events are turned into lists of effects by small handlers;
``dispatch`` resolves identities through the presence registry and applies
the effects to a transport. REST-side services call the ``*_created`` /
``*_updated`` style methods after their transaction commits.
"""

import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from typing import Any, Protocol
from uuid import UUID

import structlog

from core.exceptions import AppException, NotAGroupMemberError
from domain.entities.group import Group
from domain.entities.message import Message
from domain.entities.realtime import (
    ConnectionContext,
    Disconnect,
    Effect,
    Emit,
    InboundEvent,
    JoinChannel,
    LeaveChannel,
    RealtimeEvents,
    SendMessage,
    Subscribe,
    Target,
    ToChannel,
    ToConnection,
    ToEveryone,
    ToIdentity,
    Typing,
    Unsubscribe,
    channel_for_group,
    error_effect,
)
from domain.entities.task import Task
from domain.entities.user import PresenceStatus, normalize_identity
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.message_service import MessageService
from domain.services.presence_registry import PresenceRegistry
from infrastructure.auth.provider import IAuthProvider

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "Error processing event"


class IRealtimeTransport(Protocol):
    """Delivery backend the gateway applies effects to."""

    async def emit(
        self,
        event: str,
        payload: dict[str, Any],
        *,
        to: str | None = None,
        skip: str | None = None,
    ) -> None:
        """Emit to a handle or channel; ``to=None`` means every connection."""
        ...

    async def subscribe(self, handle: str, channel: str) -> None:
        ...

    async def unsubscribe(self, handle: str, channel: str) -> None:
        ...

    async def disconnect(self, handle: str) -> None:
        ...


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def message_payload(message: Message) -> dict[str, Any]:
    return {
        "groupId": str(message.group_id),
        "message": {
            "id": str(message.id),
            "sender": message.sender,
            "content": message.content,
            "timestamp": message.created_at.isoformat(),
        },
    }


def task_payload(task: Task) -> dict[str, Any]:
    return {
        "id": str(task.id),
        "groupId": str(task.group_id),
        "title": task.title,
        "description": task.description,
        "dueDate": task.due_date.isoformat(),
        "priority": task.priority.value,
        "assignedTo": list(task.assigned_to),
        "status": task.status.value,
    }


class RealtimeGateway:
    """Owns live connections and routes chat, task and presence events."""

    def __init__(
        self,
        registry: PresenceRegistry,
        transport: IRealtimeTransport,
        auth_provider: IAuthProvider,
        uow_factory: Callable[[], IUnitOfWork],
        message_service: MessageService,
        strict_channel_membership: bool = True,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._auth = auth_provider
        self._uow_factory = uow_factory
        self._messages = message_service
        self._strict = strict_channel_membership
        self._connections: dict[str, ConnectionContext] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def registry(self) -> PresenceRegistry:
        return self._registry

    def get_connection(self, handle: str) -> ConnectionContext | None:
        return self._connections.get(handle)

    # --- Connection lifecycle ---

    async def connect(self, handle: str, token: str) -> ConnectionContext:
        """Authenticate a new connection and subscribe it to its active groups.

        Raises:
            TokenExpiredError / InvalidTokenError: The presented token was rejected.
        """
        user = await self._auth.validate_token(token)
        identity = normalize_identity(user.email)
        ctx = ConnectionContext(handle=handle, identity=identity, display_name=user.display_name)

        replaced = self._registry.register(identity, handle)
        if replaced is not None:
            # Single slot per identity: the older connection is closed
            logger.info("presence_replaced", identity=identity, old=replaced, new=handle)
            self._discard(replaced)
            await self.dispatch([Disconnect(ToConnection(replaced))])
        self._connections[handle] = ctx
        self._locks[handle] = asyncio.Lock()

        try:
            async with self._uow_factory() as uow:
                await uow.users.set_presence(identity, PresenceStatus.ONLINE)
                group_ids = await uow.groups.get_active_group_ids(identity)
                await uow.commit()
        except Exception:
            self._discard(handle)
            raise

        await self.dispatch(
            [Subscribe(ToConnection(handle), channel_for_group(gid)) for gid in group_ids]
        )
        logger.info(
            "realtime_connected",
            identity=identity,
            handle=handle,
            channels=len(group_ids),
        )
        return ctx

    async def disconnect(self, handle: str) -> None:
        """Discard connection state; mark offline if this was the identity's live handle."""
        ctx = self._connections.get(handle)
        if ctx is None:
            return

        owned = self._discard(handle)
        if owned:
            async with self._uow_factory() as uow:
                await uow.users.set_presence(ctx.identity, PresenceStatus.OFFLINE)
                await uow.commit()
        logger.info("realtime_disconnected", identity=ctx.identity, handle=handle)

    def _discard(self, handle: str) -> bool:
        ctx = self._connections.pop(handle, None)
        self._locks.pop(handle, None)
        if ctx is None:
            return False
        return self._registry.unregister(ctx.identity, handle)

    async def shutdown(self) -> None:
        """Drop all connection state and mark every still-registered identity offline."""
        identities = self._registry.online_identities()
        self._connections.clear()
        self._locks.clear()
        self._registry.clear()
        if not identities:
            return

        try:
            async with self._uow_factory() as uow:
                for identity in identities:
                    await uow.users.set_presence(identity, PresenceStatus.OFFLINE)
                await uow.commit()
        except Exception:
            logger.exception("realtime_shutdown_presence_failed", identities=len(identities))

    # --- Inbound events ---

    async def handle_event(self, handle: str, event: InboundEvent) -> list[Effect]:
        """Run one inbound event through its handler and apply the resulting effects.

        Events from the same connection are processed one at a time in arrival
        order. Failures become a private ``error`` event; the connection stays open.
        """
        ctx = self._connections.get(handle)
        lock = self._locks.get(handle)
        if ctx is None or lock is None:
            return []

        async with lock:
            try:
                effects = await self._handle(ctx, event)
            except AppException as e:
                logger.info(
                    "realtime_event_rejected",
                    identity=ctx.identity,
                    event=type(event).__name__,
                    error_code=e.error_code,
                )
                effects = [error_effect(handle, e.message)]
            except Exception:
                logger.exception(
                    "realtime_event_failed",
                    identity=ctx.identity,
                    event=type(event).__name__,
                )
                effects = [error_effect(handle, GENERIC_ERROR_MESSAGE)]

            await self.dispatch(effects)
            return effects

    async def _handle(self, ctx: ConnectionContext, event: InboundEvent) -> list[Effect]:
        if isinstance(event, JoinChannel):
            return await self._on_join(ctx, event)
        if isinstance(event, LeaveChannel):
            return [Unsubscribe(ToConnection(ctx.handle), channel_for_group(event.group_id))]
        if isinstance(event, SendMessage):
            return await self._on_send_message(ctx, event)
        if isinstance(event, Typing):
            return await self._on_typing(ctx, event)
        raise TypeError(f"Unsupported realtime event: {event!r}")

    async def _on_join(self, ctx: ConnectionContext, event: JoinChannel) -> list[Effect]:
        if self._strict:
            await self._require_active_member(event.group_id, ctx.identity)
        return [Subscribe(ToConnection(ctx.handle), channel_for_group(event.group_id))]

    async def _on_send_message(
        self, ctx: ConnectionContext, event: SendMessage
    ) -> list[Effect]:
        message = await self._messages.append_if_member(
            event.group_id, ctx.identity, event.content
        )
        return [
            Emit(
                RealtimeEvents.NEW_MESSAGE,
                message_payload(message),
                ToChannel(channel_for_group(event.group_id)),
            )
        ]

    async def _on_typing(self, ctx: ConnectionContext, event: Typing) -> list[Effect]:
        if self._strict:
            await self._require_active_member(event.group_id, ctx.identity)
        return [
            Emit(
                RealtimeEvents.USER_TYPING,
                {
                    "groupId": str(event.group_id),
                    "user": ctx.identity,
                    "isTyping": event.is_typing,
                },
                ToChannel(channel_for_group(event.group_id), exclude=ctx.handle),
            )
        ]

    async def _require_active_member(self, group_id: UUID, identity: str) -> None:
        async with self._uow_factory() as uow:
            member = await uow.groups.get_member(group_id, identity)
        if member is None or not member.is_active:
            raise NotAGroupMemberError(str(group_id))

    # --- REST-triggered fan-out ---

    async def group_created(self, group: Group) -> None:
        await self.dispatch(
            [Subscribe(ToIdentity(group.created_by), channel_for_group(group.id))]
        )

    async def invitation_accepted(self, group_id: UUID, email: str) -> None:
        await self.dispatch([Subscribe(ToIdentity(email), channel_for_group(group_id))])

    async def member_left(self, group_id: UUID, email: str) -> None:
        await self.dispatch(
            self._departure_effects(RealtimeEvents.MEMBER_LEFT, group_id, email)
        )

    async def member_removed(self, group_id: UUID, email: str) -> None:
        await self.dispatch(
            self._departure_effects(RealtimeEvents.MEMBER_REMOVED, group_id, email)
        )

    def _departure_effects(self, event: str, group_id: UUID, email: str) -> list[Effect]:
        channel = channel_for_group(group_id)
        # Unsubscribe first so the departing identity does not receive the notice
        return [
            Unsubscribe(ToIdentity(email), channel),
            Emit(event, {"groupId": str(group_id), "email": email}, ToChannel(channel)),
        ]

    async def invitations_sent(
        self, group: Group, invitees: Iterable[str], invited_by: str
    ) -> None:
        payload = {
            "groupId": str(group.id),
            "groupName": group.name,
            "invitedBy": invited_by,
        }
        await self.dispatch(
            [Emit(RealtimeEvents.GROUP_INVITATION, payload, ToIdentity(e)) for e in invitees]
        )

    async def task_created(self, task: Task) -> None:
        payload = {"groupId": str(task.group_id), "task": task_payload(task)}
        await self.dispatch(
            [Emit(RealtimeEvents.NEW_TASK, payload, ToIdentity(e)) for e in task.assigned_to]
        )

    async def task_assigned(self, task: Task, assignees: Iterable[str]) -> None:
        payload = {
            "taskId": str(task.id),
            "title": task.title,
            "groupId": str(task.group_id),
        }
        await self.dispatch(
            [Emit(RealtimeEvents.TASK_ASSIGNED, payload, ToIdentity(e)) for e in assignees]
        )

    async def task_updated(self, task: Task, changes: dict[str, Any]) -> None:
        updates = {_to_camel(k): _jsonable(v) for k, v in changes.items()}
        updates["updatedAt"] = task.updated_at.isoformat()
        payload = {"taskId": str(task.id), "groupId": str(task.group_id), "updates": updates}
        await self.dispatch(
            [
                Emit(
                    RealtimeEvents.TASK_UPDATED,
                    payload,
                    ToChannel(channel_for_group(task.group_id)),
                )
            ]
        )

    async def task_completed(self, task: Task) -> None:
        payload = {
            "taskId": str(task.id),
            "groupId": str(task.group_id),
            "title": task.title,
        }
        await self.dispatch(
            [
                Emit(
                    RealtimeEvents.TASK_COMPLETED,
                    payload,
                    ToChannel(channel_for_group(task.group_id)),
                )
            ]
        )

    async def presence_changed(self, email: str, status: PresenceStatus) -> None:
        await self.dispatch(
            [
                Emit(
                    RealtimeEvents.USER_STATUS,
                    {"email": email, "status": status.value},
                    ToEveryone(),
                )
            ]
        )

    async def force_disconnect(self, email: str) -> None:
        """Close the identity's live connection, if any."""
        handle = self._registry.lookup(email)
        if handle is None:
            return
        await self.dispatch([Disconnect(ToConnection(handle))])
        self._discard(handle)

    # --- Dispatch ---

    def _resolve(self, target: Target) -> str | None:
        if isinstance(target, ToConnection):
            return target.handle
        if isinstance(target, ToIdentity):
            return self._registry.lookup(target.identity)
        return None

    async def dispatch(self, effects: Iterable[Effect]) -> None:
        """Apply effects in order. Delivery is best effort: failures are logged."""
        for effect in effects:
            try:
                await self._apply(effect)
            except Exception:
                logger.exception("realtime_dispatch_failed", effect=type(effect).__name__)

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, Emit):
            target = effect.target
            if isinstance(target, ToEveryone):
                await self._transport.emit(effect.event, effect.payload)
            elif isinstance(target, ToChannel):
                await self._transport.emit(
                    effect.event, effect.payload, to=target.channel, skip=target.exclude
                )
            else:
                handle = self._resolve(target)
                if handle is not None:
                    await self._transport.emit(effect.event, effect.payload, to=handle)
        elif isinstance(effect, Subscribe):
            handle = self._resolve(effect.target)
            if handle is not None:
                await self._transport.subscribe(handle, effect.channel)
        elif isinstance(effect, Unsubscribe):
            handle = self._resolve(effect.target)
            if handle is not None:
                await self._transport.unsubscribe(handle, effect.channel)
        elif isinstance(effect, Disconnect):
            handle = self._resolve(effect.target)
            if handle is not None:
                await self._transport.disconnect(handle)
