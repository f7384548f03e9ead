"""Socket.IO transport for the realtime gateway."""

from typing import Any

import socketio


class SocketIOTransport:
    """Applies gateway effects to a python-socketio ``AsyncServer``.

    Connection handles are Socket.IO session ids and channels are rooms.
    """

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self._sio = sio

    async def emit(
        self,
        event: str,
        payload: dict[str, Any],
        *,
        to: str | None = None,
        skip: str | None = None,
    ) -> None:
        await self._sio.emit(event, payload, to=to, skip_sid=skip)

    async def subscribe(self, handle: str, channel: str) -> None:
        await self._sio.enter_room(handle, channel)

    async def unsubscribe(self, handle: str, channel: str) -> None:
        await self._sio.leave_room(handle, channel)

    async def disconnect(self, handle: str) -> None:
        await self._sio.disconnect(handle)
