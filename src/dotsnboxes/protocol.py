"""Wire messages exchanged with the dots and boxes server.

Every frame is a JSON object ``{"type": ..., "payload": ...}``. Inbound kinds
are parsed into the pydantic models below; kinds the client does not know are
kept as :class:`UnknownMessage` so the reducer can ignore them.
"""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .geometry import Edge, order

LOGGER = logging.getLogger(__name__)


class ConnectionState(IntEnum):
    CONNECTING = 0
    CONNECTED = 1
    DISCONNECTED = 2


class GamePhase(IntEnum):
    WAITING = 0
    PLAYER_ONE_TURN = 1
    PLAYER_TWO_TURN = 2
    PAUSED = 3
    GAME_OVER = 4


STATE = "STATE"
GAMECONFIG = "GAMECONFIG"
ERROR = "ERROR"
PLACE = "PLACE"
REMATCH = "REMATCH"
CONNECTION_STATE_CHANGED = "CONNECTION_STATE_CHANGED"


# ---------- Payloads ----------


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GameConfigPayload(_Payload):
    """Board dimensions and seat assignment, sent first on every join."""

    n: Optional[int] = Field(default=None, ge=0)
    m: Optional[int] = Field(default=None, ge=0)
    player: Optional[int] = Field(default=None, ge=0)
    turn: Optional[int] = None
    state: Optional[GamePhase] = None


class StatePayload(_Payload):
    """Authoritative snapshot or delta of the game board."""

    grid: Optional[Dict[str, int]] = None
    boxes: Optional[Dict[str, int]] = None
    # JSON object keys are strings; pydantic coerces them back to player ids
    scores: Optional[Dict[int, int]] = None
    turn: Optional[int] = None
    state: Optional[GamePhase] = None


class ErrorPayload(_Payload):
    error: str = ""


# ---------- Inbound messages ----------


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True)


class GameConfigMessage(_Message):
    type: Literal["GAMECONFIG"] = GAMECONFIG
    payload: GameConfigPayload = Field(default_factory=GameConfigPayload)


class StateMessage(_Message):
    type: Literal["STATE"] = STATE
    payload: StatePayload = Field(default_factory=StatePayload)


class ErrorMessage(_Message):
    type: Literal["ERROR"] = ERROR
    payload: ErrorPayload = Field(default_factory=ErrorPayload)


class ConnectionStateChanged(_Message):
    """Synthesized locally by the connection; never sent over the wire."""

    type: Literal["CONNECTION_STATE_CHANGED"] = CONNECTION_STATE_CHANGED
    payload: ConnectionState


class UnknownMessage(_Message):
    type: str
    payload: Any = None


Message = Union[
    GameConfigMessage,
    StateMessage,
    ErrorMessage,
    ConnectionStateChanged,
    UnknownMessage,
]

INBOUND_MODELS = {
    GAMECONFIG: GameConfigMessage,
    STATE: StateMessage,
    ERROR: ErrorMessage,
}


def parse_message(raw: str | bytes) -> Optional[Message]:
    """Decode one inbound frame.

    Returns ``None`` for frames that cannot be understood at all: invalid
    JSON, a non-object, or a known kind with a malformed payload. Unknown
    kinds are returned as :class:`UnknownMessage`.
    """

    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        LOGGER.warning("Dropping undecodable frame: %s", exc)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        LOGGER.warning("Dropping frame without a message type: %r", data)
        return None

    model = INBOUND_MODELS.get(data["type"])
    if model is None:
        return UnknownMessage(type=data["type"], payload=data.get("payload"))
    if data.get("payload") is None:
        data = {key: value for key, value in data.items() if key != "payload"}
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        LOGGER.warning("Dropping malformed %s frame: %s", data["type"], exc)
        return None


def connection_changed(state: ConnectionState) -> ConnectionStateChanged:
    return ConnectionStateChanged(payload=state)


# ---------- Outbound commands ----------


def place_command(edge: Edge) -> Dict[str, Any]:
    return {"type": PLACE, "payload": order(edge).to_wire()}


def rematch_command() -> Dict[str, Any]:
    return {"type": REMATCH}


def encode(command: Dict[str, Any]) -> str:
    return json.dumps(command, separators=(",", ":"))
