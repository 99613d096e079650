"""Environment-driven client settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    secure: bool = False
    log_level: str = "INFO"
    # None waits for the handshake indefinitely
    open_timeout: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        timeout = env.get("DOTSNBOXES_OPEN_TIMEOUT")
        return cls(
            host=env.get("DOTSNBOXES_HOST", DEFAULT_HOST),
            port=int(env.get("DOTSNBOXES_PORT", str(DEFAULT_PORT))),
            secure=_flag(env.get("DOTSNBOXES_SECURE", "0")),
            log_level=env.get("DOTSNBOXES_LOG_LEVEL", "INFO").upper(),
            open_timeout=float(timeout) if timeout else None,
        )

    def _base(self, scheme: str) -> str:
        return f"{scheme}{'s' if self.secure else ''}://{self.host}:{self.port}"

    def room_ws_url(self, room_id: str) -> str:
        return f"{self._base('ws')}/room/{quote(room_id, safe='')}"

    def room_http_url(self, room_id: str) -> str:
        return f"{self._base('http')}/room/{quote(room_id, safe='')}"
