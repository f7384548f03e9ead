"""Realtime event vocabulary: inbound events, delivery targets and effects.

Inbound client events are parsed into small tagged variants and handed to
the gateway, which answers with a list of effects. Effects only describe
what should happen (emit, subscribe, unsubscribe, disconnect) and to whom;
a transport applies them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


class RealtimeEvents:
    """Socket event name constants."""

    # Client -> server
    JOIN_GROUP = "joinGroup"
    LEAVE_GROUP = "leaveGroup"
    SEND_MESSAGE = "sendMessage"
    TYPING = "typing"

    # Server -> client
    NEW_MESSAGE = "newMessage"
    USER_TYPING = "userTyping"
    USER_STATUS = "userStatus"
    MEMBER_LEFT = "memberLeft"
    MEMBER_REMOVED = "memberRemoved"
    GROUP_INVITATION = "groupInvitation"
    NEW_TASK = "newTask"
    TASK_ASSIGNED = "taskAssigned"
    TASK_UPDATED = "taskUpdated"
    TASK_COMPLETED = "taskCompleted"
    ERROR = "error"


def channel_for_group(group_id: UUID) -> str:
    """Channel key for a group: the group identifier itself."""
    return str(group_id)


# --- Inbound events ---


@dataclass(frozen=True, slots=True)
class JoinChannel:
    group_id: UUID


@dataclass(frozen=True, slots=True)
class LeaveChannel:
    group_id: UUID


@dataclass(frozen=True, slots=True)
class SendMessage:
    group_id: UUID
    content: str


@dataclass(frozen=True, slots=True)
class Typing:
    group_id: UUID
    is_typing: bool


InboundEvent = JoinChannel | LeaveChannel | SendMessage | Typing


# --- Targets ---


@dataclass(frozen=True, slots=True)
class ToConnection:
    """A single live connection."""

    handle: str


@dataclass(frozen=True, slots=True)
class ToIdentity:
    """Whatever connection the identity currently holds, if any."""

    identity: str


@dataclass(frozen=True, slots=True)
class ToChannel:
    """Every subscriber of a channel, optionally minus one connection."""

    channel: str
    exclude: str | None = None


@dataclass(frozen=True, slots=True)
class ToEveryone:
    """Every connected client."""


Target = ToConnection | ToIdentity | ToChannel | ToEveryone
ConnectionTarget = ToConnection | ToIdentity


# --- Effects ---


@dataclass(frozen=True, slots=True)
class Emit:
    event: str
    payload: dict[str, Any]
    target: Target


@dataclass(frozen=True, slots=True)
class Subscribe:
    target: ConnectionTarget
    channel: str


@dataclass(frozen=True, slots=True)
class Unsubscribe:
    target: ConnectionTarget
    channel: str


@dataclass(frozen=True, slots=True)
class Disconnect:
    target: ConnectionTarget


Effect = Emit | Subscribe | Unsubscribe | Disconnect


@dataclass
class ConnectionContext:
    """Per-connection state held by the gateway while a socket is open."""

    handle: str
    identity: str
    display_name: str | None = None
    connected_at: datetime = field(default_factory=datetime.utcnow)


def error_effect(handle: str, message: str) -> Emit:
    """Private error event for the originating connection."""
    return Emit(RealtimeEvents.ERROR, {"message": message}, ToConnection(handle))
