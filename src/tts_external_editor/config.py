"""Endpoint configuration.

Defaults match Tabletop Simulator: the game listens on 39999 and sends its
notifications to an editor listening on 39998.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

DEFAULT_HOST = "127.0.0.1"
DEFAULT_SEND_PORT = 39999
DEFAULT_LISTEN_PORT = 39998

ENV_HOST = "TTS_EDITOR_HOST"
ENV_SEND_PORT = "TTS_EDITOR_SEND_PORT"
ENV_LISTEN_HOST = "TTS_EDITOR_LISTEN_HOST"
ENV_LISTEN_PORT = "TTS_EDITOR_LISTEN_PORT"


def _port_from_env(env_var: str, default: int) -> int:
    value = os.getenv(env_var)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{env_var} must be an integer port, got {value!r}") from None


@dataclass(frozen=True)
class EditorConfig:
    """Where the editor sends requests and where it listens for notifications."""

    # Tabletop Simulator's receive side
    host: str = DEFAULT_HOST
    send_port: int = DEFAULT_SEND_PORT

    # Our receive side
    listen_host: str = DEFAULT_HOST
    listen_port: int = DEFAULT_LISTEN_PORT

    @classmethod
    def from_env(cls) -> EditorConfig:
        """Build a config from TTS_EDITOR_* environment variables."""
        return cls(
            host=os.getenv(ENV_HOST, DEFAULT_HOST),
            send_port=_port_from_env(ENV_SEND_PORT, DEFAULT_SEND_PORT),
            listen_host=os.getenv(ENV_LISTEN_HOST, DEFAULT_HOST),
            listen_port=_port_from_env(ENV_LISTEN_PORT, DEFAULT_LISTEN_PORT),
        )

    def with_overrides(self, **overrides: Any) -> EditorConfig:
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
