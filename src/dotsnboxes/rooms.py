"""Room provisioning: the HTTP call that creates a room before anyone joins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from .config import Settings

LOGGER = logging.getLogger(__name__)

MIN_BOARD_SIZE = 1
MAX_BOARD_SIZE = 10

HTTP_CREATED = 201
HTTP_ALREADY_REPORTED = 208


class RoomProvisioningError(RuntimeError):
    """The server refused to create the room, or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RoomRequest(BaseModel):
    """Board dimensions for a new room, in boxes."""

    n: int = Field(default=4, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)
    m: int = Field(default=4, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)


@dataclass(frozen=True)
class RoomCreation:
    room_id: str
    created: bool


async def create_room(
    room_id: str,
    n: int = 4,
    m: int = 4,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RoomCreation:
    """Create ``room_id`` on the server with an ``n`` by ``m`` board.

    A room that already exists is not an error: ``created`` is ``False`` and
    the caller can still join it.
    """

    if not room_id.strip():
        raise ValueError("Room name must not be empty")
    request = RoomRequest(n=n, m=m)
    settings = settings or Settings.from_env()
    url = settings.room_http_url(room_id)

    owns_client = client is None
    http = client or httpx.AsyncClient()
    try:
        response = await http.post(url, json=request.model_dump())
    except httpx.HTTPError as exc:
        raise RoomProvisioningError(f"Could not reach {url}: {exc}") from exc
    finally:
        if owns_client:
            await http.aclose()

    if response.status_code == HTTP_CREATED:
        LOGGER.info("Created room %s (%dx%d)", room_id, request.n, request.m)
        return RoomCreation(room_id=room_id, created=True)
    if response.status_code == HTTP_ALREADY_REPORTED:
        LOGGER.info("Room %s already exists", room_id)
        return RoomCreation(room_id=room_id, created=False)
    raise RoomProvisioningError(
        f"Server refused to create room {room_id!r} (HTTP {response.status_code})",
        status_code=response.status_code,
    )
