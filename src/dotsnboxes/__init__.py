"""Dots and boxes client exposing edge addressing, the state reducer and the room connection."""

from .client import GameClient
from .connection import RoomConnection
from .geometry import Edge, Point, edge_key, order
from .protocol import ConnectionState, GamePhase, parse_message
from .state import GameState, Outcome, apply, headline, outcome

__all__ = [
    "ConnectionState",
    "Edge",
    "GameClient",
    "GamePhase",
    "GameState",
    "Outcome",
    "Point",
    "RoomConnection",
    "apply",
    "edge_key",
    "headline",
    "order",
    "outcome",
    "parse_message",
]
