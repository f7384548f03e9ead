"""Socket.IO event handlers.

Client convention:
- Path: /socket.io
- Auth: ``auth: { token }`` on connect, or ``?token=`` in the query string
- Payloads use camelCase keys (``groupId``, ``isTyping``)
"""

from typing import Any
from urllib.parse import parse_qs
from uuid import UUID

import socketio
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import AuthenticationError, TokenExpiredError
from domain.entities.realtime import (
    InboundEvent,
    JoinChannel,
    LeaveChannel,
    RealtimeEvents,
    SendMessage,
    Typing,
    error_effect,
)
from domain.services.realtime_gateway import RealtimeGateway

logger = structlog.get_logger()

INVALID_PAYLOAD_MESSAGE = "Invalid payload"


class GroupRefPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_id: UUID = Field(alias="groupId")


class SendMessagePayload(GroupRefPayload):
    content: str = Field(max_length=10000)


class TypingPayload(GroupRefPayload):
    is_typing: bool = Field(alias="isTyping")


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract the session token from the connect ``auth`` payload or query string."""
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


def _group_ref(data: Any) -> GroupRefPayload:
    # joinGroup/leaveGroup clients send either a bare id or {groupId}
    if isinstance(data, str):
        data = {"groupId": data}
    return GroupRefPayload.model_validate(data)


def parse_event(event: str, data: Any) -> InboundEvent:
    """Turn a raw Socket.IO event into an inbound event variant.

    Raises:
        pydantic.ValidationError: The payload does not match the event's shape.
    """
    if event == RealtimeEvents.JOIN_GROUP:
        return JoinChannel(_group_ref(data).group_id)
    if event == RealtimeEvents.LEAVE_GROUP:
        return LeaveChannel(_group_ref(data).group_id)
    if event == RealtimeEvents.SEND_MESSAGE:
        msg = SendMessagePayload.model_validate(data)
        return SendMessage(msg.group_id, msg.content)
    if event == RealtimeEvents.TYPING:
        typing = TypingPayload.model_validate(data)
        return Typing(typing.group_id, typing.is_typing)
    raise ValueError(f"Unknown event: {event}")


def register_socketio_handlers(sio: socketio.AsyncServer, gateway: RealtimeGateway) -> None:
    """Wire the default namespace of ``sio`` to the gateway."""

    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None) -> None:
        token = _extract_token(environ, auth)
        if not token:
            raise socketio.exceptions.ConnectionRefusedError("unauthorized")

        try:
            await gateway.connect(sid, token)
        except TokenExpiredError as exc:
            raise socketio.exceptions.ConnectionRefusedError("jwt_expired") from exc
        except AuthenticationError as exc:
            raise socketio.exceptions.ConnectionRefusedError("unauthorized") from exc
        except Exception as exc:
            logger.exception("realtime_connect_failed", handle=sid)
            raise socketio.exceptions.ConnectionRefusedError("server_error") from exc

    async def disconnect(sid: str, reason: Any = None) -> None:
        await gateway.disconnect(sid)

    def make_handler(event: str) -> Any:
        async def handler(sid: str, data: Any = None) -> None:
            try:
                inbound = parse_event(event, data)
            except ValidationError:
                logger.info("realtime_invalid_payload", handle=sid, event=event)
                await gateway.dispatch([error_effect(sid, INVALID_PAYLOAD_MESSAGE)])
                return
            await gateway.handle_event(sid, inbound)

        return handler

    sio.on("connect", connect)
    sio.on("disconnect", disconnect)
    for event in (
        RealtimeEvents.JOIN_GROUP,
        RealtimeEvents.LEAVE_GROUP,
        RealtimeEvents.SEND_MESSAGE,
        RealtimeEvents.TYPING,
    ):
        sio.on(event, make_handler(event))
