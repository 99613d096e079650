"""Entry point for a headless client via ``python -m dotsnboxes``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .client import GameClient
from .config import Settings
from .geometry import Edge, all_edges, board_rows, edge_key
from .rooms import RoomProvisioningError, create_room
from .state import GameState, box_owner, edge_owner, headline

LOGGER = logging.getLogger("dotsnboxes")

USAGE = "commands: place X1 Y1 X2 Y2 | rematch | edges | board | quit"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Dots and boxes terminal client")
    p.add_argument("room", help="room name to join")
    p.add_argument("--create", action="store_true", help="create the room before joining")
    p.add_argument("-n", type=int, default=4, help="board width in boxes (with --create)")
    p.add_argument("-m", type=int, default=4, help="board height in boxes (with --create)")
    return p.parse_args(argv)


def parse_place(words: List[str]) -> Optional[Edge]:
    try:
        x1, y1, x2, y2 = (int(w) for w in words)
    except ValueError:
        return None
    return Edge.between(x1, y1, x2, y2)


def report(state: GameState) -> None:
    scores = ", ".join(f"P{player}={count}" for player, count in sorted(state.scores.items()))
    LOGGER.info("%s %s", headline(state) or state.phase.name, f"[{scores}]" if scores else "")
    if state.last_error:
        LOGGER.warning("Server error: %s", state.last_error)


def render_board(state: GameState) -> str:
    """Draw the board as text: drawn edges as lines, claimed boxes by owner."""

    lines = []
    for row in board_rows(state.board_width, state.board_height):
        cells = []
        for kind, value in row:
            if kind == "dot":
                cells.append("+")
            elif kind == "box":
                owner = box_owner(state, value.x, value.y)
                cells.append(f" {owner} " if owner else "   ")
            elif value.start.y == value.end.y:
                cells.append("---" if edge_owner(state, value) else "   ")
            else:
                cells.append("|" if edge_owner(state, value) else " ")
        lines.append("".join(cells))
    return "\n".join(lines)


def open_edges(state: GameState) -> List[str]:
    return [
        edge_key(edge)
        for edge in all_edges(state.board_width, state.board_height)
        if not edge_owner(state, edge)
    ]


async def read_commands(client: GameClient) -> None:
    loop = asyncio.get_running_loop()
    print(USAGE)
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        words = line.strip().lower().split()
        if not words:
            continue
        cmd = words[0]
        if cmd == "place":
            edge = parse_place(words[1:])
            if edge is None:
                print("!! usage: place X1 Y1 X2 Y2")
                continue
            if not await client.place_edge(edge):
                print("!! not connected")
        elif cmd == "rematch":
            if not await client.rematch():
                print("!! the game is not over")
        elif cmd == "edges":
            print(" ".join(open_edges(client.state)) or "(none)")
        elif cmd == "board":
            print(render_board(client.state))
        elif cmd in ("quit", "exit"):
            break
        else:
            print(USAGE)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.create:
        try:
            await create_room(args.room, args.n, args.m, settings=settings)
        except (RoomProvisioningError, ValidationError, ValueError) as exc:
            LOGGER.error("%s", exc)
            return 1

    client = GameClient(args.room, settings=settings)
    client.subscribe(report)
    async with client:
        if not client.connection.is_open:
            return 1
        commands = asyncio.create_task(read_commands(client))
        closed = asyncio.create_task(client.connection.wait_closed())
        await asyncio.wait({commands, closed}, return_when=asyncio.FIRST_COMPLETED)
        commands.cancel()
        closed.cancel()
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Join a room and play from the terminal."""

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s: %(message)s")
    args = parse_args(argv)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
