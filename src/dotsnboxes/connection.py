"""The single websocket a client holds for one game room."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from .config import Settings
from .protocol import ConnectionState, Message, connection_changed, encode, parse_message

LOGGER = logging.getLogger(__name__)

Dispatch = Callable[[Message], None]


class RoomConnection:
    """Owns one websocket to ``/room/{room_id}`` and feeds it into ``dispatch``.

    The lifecycle is ``open()`` once, then ``close()`` once; the object cannot
    be reopened. A dropped connection is final: nothing reconnects, the state
    machine just sees ``DISCONNECTED``.

    Frames are dispatched one at a time in arrival order. As soon as
    ``close()`` starts, ``DISCONNECTED`` is dispatched and every later frame is
    dropped.
    """

    def __init__(
        self,
        room_id: str,
        dispatch: Dispatch,
        settings: Optional[Settings] = None,
        connect: Callable[..., Any] = ws_connect,
    ) -> None:
        self.room_id = room_id
        self.settings = settings or Settings.from_env()
        self.url = self.settings.room_ws_url(room_id)
        self._dispatch = dispatch
        self._connect = connect
        self._websocket: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._opened = False
        self._closing = False
        self._finished = False

    @property
    def is_open(self) -> bool:
        return self._websocket is not None and not (self._closing or self._finished)

    async def open(self) -> bool:
        """Connect to the room. Returns ``False`` if the connection failed."""

        if self._opened:
            raise RuntimeError(f"Connection to room {self.room_id!r} was already opened")
        self._opened = True

        try:
            websocket = await self._connect(self.url, open_timeout=self.settings.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            LOGGER.warning("Could not join room %s at %s: %s", self.room_id, self.url, exc)
            self._finish()
            return False

        if self._closing:
            # torn down while the handshake was in flight
            await websocket.close()
            return False

        self._websocket = websocket
        LOGGER.info("Joined room %s", self.room_id)
        self._dispatch(connection_changed(ConnectionState.CONNECTED))
        self._reader = asyncio.create_task(self._read_loop(websocket))
        return True

    async def _read_loop(self, websocket: Any) -> None:
        try:
            async for raw in websocket:
                if self._closing:
                    break
                message = parse_message(raw)
                if message is not None:
                    self._dispatch(message)
        except ConnectionClosed as exc:
            LOGGER.info("Room %s connection dropped: %s", self.room_id, exc)
        finally:
            if not self._closing:
                LOGGER.info("Server closed room %s", self.room_id)
            self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._dispatch(connection_changed(ConnectionState.DISCONNECTED))

    async def send(self, command: Dict[str, Any]) -> bool:
        """Write ``command`` as one JSON frame; ``False`` if nothing was sent."""

        if not self.is_open:
            return False
        try:
            await self._websocket.send(encode(command))
        except ConnectionClosed as exc:
            LOGGER.warning("Could not send %s to room %s: %s", command.get("type"), self.room_id, exc)
            return False
        return True

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._finish()
        if self._websocket is not None:
            await self._websocket.close()
            LOGGER.info("Left room %s", self.room_id)
        reader = self._reader
        if reader is not None and reader is not asyncio.current_task():
            await reader

    async def wait_closed(self) -> None:
        """Block until the server or a local ``close()`` ends the connection."""

        if self._reader is not None:
            await asyncio.shield(self._reader)

    async def __aenter__(self) -> "RoomConnection":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
