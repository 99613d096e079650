"""Shared fixtures: an in-memory websocket and a scripted live game server."""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

import pytest
import uvicorn
from fastapi import FastAPI, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosedError

from dotsnboxes.config import Settings


# ---------- In-memory websocket ----------


_DROP = object()


class FakeWebSocket:
    """Stands in for a websockets client connection.

    Tests push inbound frames with ``feed``; ``hang_up`` ends the stream the
    way a server close does and ``drop`` the way a broken network does.
    """

    def __init__(self) -> None:
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent: List[str] = []
        self.close_calls = 0

    def feed(self, frame: str) -> None:
        self.inbox.put_nowait(frame)

    def hang_up(self) -> None:
        self.inbox.put_nowait(None)

    def drop(self) -> None:
        self.inbox.put_nowait(_DROP)

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> str:
        frame = await self.inbox.get()
        if frame is None:
            raise StopAsyncIteration
        if frame is _DROP:
            raise ConnectionClosedError(None, None)
        return frame

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        self.hang_up()


@pytest.fixture
def websocket() -> FakeWebSocket:
    return FakeWebSocket()


@pytest.fixture
def settings() -> Settings:
    return Settings(host="game.test", port=9000)


# ---------- Live server ----------


class RoomBody(BaseModel):
    n: int
    m: int


@dataclass
class ServerLog:
    rooms: Dict[str, RoomBody] = field(default_factory=dict)
    received: List[Dict[str, Any]] = field(default_factory=list)


def _line_key(line: Dict[str, Any]) -> str:
    start, end = line["from"], line["to"]
    return f"from-{start['x']}-{start['y']}-to-{end['x']}-{end['y']}"


def build_app(log: ServerLog) -> FastAPI:
    """A scripted stand-in for the game server: no rules, fixed replies."""

    app = FastAPI()

    @app.post("/room/{room_id}", status_code=201)
    def create(room_id: str, body: RoomBody) -> Response:
        if room_id in log.rooms:
            return Response(status_code=208)
        log.rooms[room_id] = body
        return Response(status_code=201)

    @app.websocket("/room/{room_id}")
    async def play(websocket: WebSocket, room_id: str) -> None:
        await websocket.accept()
        room = log.rooms.get(room_id, RoomBody(n=4, m=4))
        await websocket.send_json(
            {
                "type": "GAMECONFIG",
                "payload": {"n": room.n, "m": room.m, "player": 1, "turn": 1, "state": 1},
            }
        )
        if room_id == "closing":
            await websocket.close()
            return
        try:
            while True:
                message = await websocket.receive_json()
                log.received.append(message)
                if message.get("type") == "PLACE":
                    await websocket.send_json(
                        {
                            "type": "STATE",
                            "payload": {
                                "grid": {_line_key(message["payload"]): 1},
                                "turn": 2,
                                "state": 2,
                            },
                        }
                    )
                else:
                    await websocket.send_json(
                        {"type": "ERROR", "payload": {"error": "Game is not over"}}
                    )
        except WebSocketDisconnect:
            pass

    return app


@dataclass
class LiveServer:
    settings: Settings
    log: ServerLog


@pytest.fixture(scope="module")
def live_server():
    log = ServerLog()
    config = uvicorn.Config(build_app(log), host="127.0.0.1", port=0, log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.time() + 10
    while not server.started:
        if time.time() > deadline:
            raise RuntimeError("Test server did not start")
        time.sleep(0.01)
    port = server.servers[0].sockets[0].getsockname()[1]

    yield LiveServer(settings=Settings(host="127.0.0.1", port=port), log=log)

    server.should_exit = True
    thread.join(timeout=5)


@pytest.fixture
def eventually():
    async def wait(predicate, timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("Condition not met in time")
            await asyncio.sleep(0.01)

    return wait
