"""Game client: holds the room state and turns user intent into commands."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from websockets.asyncio.client import connect as ws_connect

from .config import Settings
from .connection import RoomConnection
from .geometry import Edge
from .protocol import ConnectionState, GamePhase, Message, place_command, rematch_command
from .state import GameState, apply

LOGGER = logging.getLogger(__name__)

Listener = Callable[[GameState], None]


class GameClient:
    """One player's view of one room.

    ``state`` is replaced, never mutated, each time a message changes it, and
    every subscribed listener is called with the new value. Commands are fire
    and forget: the effect of a placed edge only shows up once the server
    sends the next ``STATE``.
    """

    def __init__(
        self,
        room_id: str,
        settings: Optional[Settings] = None,
        connect: Callable[..., Any] = ws_connect,
    ) -> None:
        self.room_id = room_id
        self.state = GameState()
        self._listeners: List[Listener] = []
        self.connection = RoomConnection(room_id, self.dispatch, settings=settings, connect=connect)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, message: Message) -> None:
        new_state = apply(self.state, message)
        if new_state is self.state:
            return
        self.state = new_state
        for listener in list(self._listeners):
            # listener errors are logged; the reader keeps running
            try:
                listener(new_state)
            except Exception:
                LOGGER.exception("State listener %r failed", listener)

    # ---- commands ----

    async def place_edge(self, edge: Edge) -> bool:
        """Ask the server to draw ``edge``. Dropped unless connected."""

        if self.state.connection != ConnectionState.CONNECTED:
            LOGGER.debug("Not connected, ignoring edge %s", edge)
            return False
        return await self.connection.send(place_command(edge))

    async def rematch(self) -> bool:
        if self.state.phase != GamePhase.GAME_OVER:
            LOGGER.debug("Game is not over, ignoring rematch request")
            return False
        return await self.connection.send(rematch_command())

    # ---- lifecycle ----

    async def join(self) -> bool:
        return await self.connection.open()

    async def leave(self) -> None:
        await self.connection.close()

    async def __aenter__(self) -> "GameClient":
        await self.join()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.leave()
