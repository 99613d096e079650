"""Local mirror of the server's game state and the reducer that updates it."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .geometry import Edge, box_key, edge_key
from .protocol import (
    ConnectionState,
    ConnectionStateChanged,
    ErrorMessage,
    GameConfigMessage,
    GamePhase,
    Message,
    StateMessage,
)

PLAYER_NONE = 0
PLAYER_ONE = 1
PLAYER_TWO = 2


class GameState(BaseModel):
    """Everything the client knows about one room.

    Instances are never mutated; the reducer builds a new one per message.
    """

    model_config = ConfigDict(frozen=True)

    board_width: int = 0
    board_height: int = 0
    connection: ConnectionState = ConnectionState.CONNECTING
    local_player_id: int = PLAYER_NONE
    turn: int = PLAYER_NONE
    phase: GamePhase = GamePhase.WAITING
    edges: Dict[str, int] = Field(default_factory=dict)
    boxes: Dict[str, int] = Field(default_factory=dict)
    scores: Dict[int, int] = Field(default_factory=dict)
    last_error: Optional[str] = None


# wire name -> GameState field
_CONFIG_FIELDS = {
    "n": "board_width",
    "m": "board_height",
    "player": "local_player_id",
    "turn": "turn",
    "state": "phase",
}
_STATE_FIELDS = {
    "grid": "edges",
    "boxes": "boxes",
    "scores": "scores",
    "turn": "turn",
    "state": "phase",
}


def _merge(state: GameState, payload: BaseModel, fields: Mapping[str, str]) -> GameState:
    # Only fields the server actually sent replace their counterpart.
    update = {
        fields[name]: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if name in fields and value is not None
    }
    if not update:
        return state
    return state.model_copy(update=update)


def apply(state: GameState, message: Message) -> GameState:
    """Return the state that results from applying ``message`` to ``state``.

    Unknown message kinds leave the state untouched (the same object is
    returned).
    """

    if isinstance(message, StateMessage):
        return _merge(state, message.payload, _STATE_FIELDS)
    if isinstance(message, GameConfigMessage):
        return _merge(state, message.payload, _CONFIG_FIELDS)
    if isinstance(message, ErrorMessage):
        return state.model_copy(update={"last_error": message.payload.error})
    if isinstance(message, ConnectionStateChanged):
        return state.model_copy(update={"connection": message.payload})
    return state


# ---------- Derived views ----------


class Outcome(str, Enum):
    TIE = "tie"
    WIN = "win"
    LOSS = "loss"


def opponent_of(player: int) -> int:
    return PLAYER_TWO if player == PLAYER_ONE else PLAYER_ONE


def outcome(scores: Mapping[int, int], player: int) -> Outcome:
    """Compare final box counts from ``player``'s point of view.

    Only meaningful once the phase is ``GAME_OVER``.
    """

    mine = scores.get(player, 0)
    theirs = scores.get(opponent_of(player), 0)
    if mine == theirs:
        return Outcome.TIE
    if mine > theirs:
        return Outcome.WIN
    return Outcome.LOSS


_OUTCOME_TEXT = {
    Outcome.TIE: "Tie!",
    Outcome.WIN: "You win!",
    Outcome.LOSS: "You lose!",
}


def headline(state: GameState) -> str:
    if state.connection == ConnectionState.CONNECTING:
        return "Connecting..."
    if state.phase == GamePhase.WAITING:
        return "Waiting..."
    if state.phase in (GamePhase.PLAYER_ONE_TURN, GamePhase.PLAYER_TWO_TURN):
        return "Your turn" if state.turn == state.local_player_id else "Their turn"
    if state.phase == GamePhase.GAME_OVER:
        return _OUTCOME_TEXT[outcome(state.scores, state.local_player_id)]
    return ""


def edge_owner(state: GameState, edge: Edge) -> int:
    return state.edges.get(edge_key(edge), PLAYER_NONE)


def box_owner(state: GameState, x: int, y: int) -> int:
    return state.boxes.get(box_key(x, y), PLAYER_NONE)
