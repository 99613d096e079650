"""Tests for decoding inbound frames and encoding outbound commands."""

import json

from dotsnboxes.geometry import Edge
from dotsnboxes.protocol import (
    ErrorMessage,
    GameConfigMessage,
    GamePhase,
    StateMessage,
    UnknownMessage,
    encode,
    parse_message,
    place_command,
    rematch_command,
)
from dotsnboxes.state import GameState, apply


def test_parse_gameconfig():
    frame = json.dumps({"type": "GAMECONFIG", "payload": {"n": 4, "m": 3, "player": 2}})
    message = parse_message(frame)
    assert isinstance(message, GameConfigMessage)
    assert message.payload.n == 4
    assert message.payload.m == 3
    assert message.payload.player == 2
    assert message.payload.state is None


def test_parse_state_coerces_phase_and_score_keys():
    frame = json.dumps(
        {
            "type": "STATE",
            "payload": {"grid": {"from-0-0-to-1-0": 1}, "scores": {"1": 2, "2": 0}, "state": 4},
        }
    )
    message = parse_message(frame)
    assert isinstance(message, StateMessage)
    assert message.payload.state is GamePhase.GAME_OVER
    assert message.payload.scores == {1: 2, 2: 0}
    assert message.payload.grid == {"from-0-0-to-1-0": 1}


def test_parse_error():
    message = parse_message(b'{"type": "ERROR", "payload": {"error": "Not your turn"}}')
    assert isinstance(message, ErrorMessage)
    assert message.payload.error == "Not your turn"


def test_parse_unknown_kind_is_kept():
    message = parse_message('{"type": "BOGUS", "payload": [1, 2]}')
    assert isinstance(message, UnknownMessage)
    assert message.type == "BOGUS"


def test_parse_null_payload():
    message = parse_message('{"type": "STATE", "payload": null}')
    assert isinstance(message, StateMessage)
    assert message.payload.model_dump(exclude_unset=True) == {}


def test_malformed_frames_are_dropped():
    assert parse_message("not json") is None
    assert parse_message("[1, 2, 3]") is None
    assert parse_message('{"payload": {}}') is None
    assert parse_message('{"type": "STATE", "payload": {"turn": "second"}}') is None


def test_place_command_is_canonical():
    command = place_command(Edge.between(1, 0, 0, 0))
    assert command == {
        "type": "PLACE",
        "payload": {"from": {"x": 0, "y": 0}, "to": {"x": 1, "y": 0}},
    }


def test_rematch_command_has_no_payload():
    assert rematch_command() == {"type": "REMATCH"}
    assert encode(rematch_command()) == '{"type":"REMATCH"}'


def test_wire_connection_change_is_not_trusted():
    message = parse_message('{"type": "CONNECTION_STATE_CHANGED", "payload": 1}')
    assert isinstance(message, UnknownMessage)
    state = GameState()
    assert apply(state, message) is state
