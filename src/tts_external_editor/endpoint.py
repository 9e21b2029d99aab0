"""Shared plumbing for both protocol roles.

An endpoint listens for the messages of one discriminant space, publishes
them on its own bus, and sends messages of the other space over the
connection-per-message transport.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, Self, TypeVar

from .bus import MessageBus, MessageCallback
from .dispatch import Dispatcher
from .errors import MalformedMessageError, UnknownMessageError
from .messages import Message
from .transport import MessageServer, send_payload

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Message)


class Endpoint:
    """Base class for :class:`ExternalEditorApi` and the fake host."""

    def __init__(self, inbound: Mapping[int, type[Message]], listen_host: str, listen_port: int):
        self.bus = MessageBus(inbound.values())
        self._dispatcher = Dispatcher(inbound, self.bus)
        self._server = MessageServer(self._on_payload)
        self._listen_host = listen_host
        self._listen_port = listen_port

    @property
    def port(self) -> int | None:
        """The port being listened on, once listening."""
        return self._server.port

    async def listen(self) -> int | None:
        """Listen for incoming connections.

        Returns:
            The port being listened on, if the platform reports it

        Raises:
            TransportError: If the port cannot be bound
        """
        return await self._server.listen(self._listen_host, self._listen_port)

    async def close(self) -> None:
        """Stop listening for incoming connections.

        Does not cancel outgoing sends or pending replies; those stay pending
        until a matching message arrives.
        """
        await self._server.close()

    async def __aenter__(self) -> Self:
        await self.listen()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # =========================================================================
    # Receiving
    # =========================================================================

    def subscribe(self, message_type: type[M], callback: MessageCallback) -> Callable[[], None]:
        """Call ``callback`` for every received message of ``message_type``."""
        return self.bus.subscribe(message_type, callback)

    def subscribe_all(self, callback: MessageCallback) -> Callable[[], None]:
        """Call ``callback`` for every received message."""
        return self.bus.subscribe_all(callback)

    def once(
        self, message_type: type[M], where: Callable[[M], bool] | None = None
    ) -> asyncio.Future[M]:
        """Future resolved with the next received message of ``message_type``."""
        return self.bus.once(message_type, where)

    def stream(self, message_type: type[M] | None = None) -> AsyncIterator[M]:
        """Iterate over received messages."""
        return self.bus.stream(message_type)

    async def _on_payload(self, payload: bytes) -> None:
        try:
            await self._dispatcher.dispatch(payload)
        except UnknownMessageError as e:
            logger.warning(f"Ignoring message: {e}")
        except MalformedMessageError as e:
            logger.warning(f"Dropping malformed message: {e}")

    # =========================================================================
    # Sending
    # =========================================================================

    async def _deliver(self, message: Message, host: str, port: int) -> None:
        logger.debug(f"Sending {message.event_name} to {host}:{port}")
        await send_payload(host, port, message.to_json())
