"""TCP transport: one message per connection.

Wire format:
- A sender opens a new connection, writes one UTF-8 JSON object and closes.
- A receiver reads until the sender closes, then parses the whole payload.

There is no length prefix and no terminator: the end of the connection is
the end of the message. Partial reads are never parsed, and a connection is
never reused for a second message.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from .errors import TransportError

logger = logging.getLogger(__name__)

PayloadHandler = Callable[[bytes], Awaitable[None]]


class MessageServer:
    """Receive side of the transport.

    Accepts connections and hands each connection's complete payload to
    ``on_payload``. A failing handler only loses that one message.
    """

    def __init__(self, on_payload: PayloadHandler):
        self._on_payload = on_payload
        self._server: asyncio.Server | None = None
        self._port: int | None = None

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def port(self) -> int | None:
        """The bound port, once listening."""
        return self._port

    async def listen(self, host: str, port: int) -> int | None:
        """Bind and start accepting connections.

        Args:
            host: Interface to bind
            port: Port to bind, 0 for an OS-assigned port

        Returns:
            The bound port, or None if the platform does not report it

        Raises:
            TransportError: If the port cannot be bound, or already listening
        """
        if self._server is not None:
            raise TransportError(f"Already listening on port {self._port}", host, port)
        try:
            self._server = await asyncio.start_server(self._handle_connection, host, port)
        except OSError as e:
            raise TransportError(f"Failed to listen on {host}:{port}: {e}", host, port) from e

        sockets = self._server.sockets
        self._port = sockets[0].getsockname()[1] if sockets else None
        logger.info(f"Listening on {host}:{self._port}")
        return self._port

    async def close(self) -> None:
        """Stop accepting connections.

        Connections already accepted are allowed to finish in the background;
        a peer that never closes its side does not hold this up.
        """
        if self._server is None:
            return
        # wait_closed() also waits for accepted connections on 3.12+
        self._server.close()
        self._server = None
        logger.info(f"Stopped listening on port {self._port}")

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        try:
            # read() with no limit returns only once the peer closes
            payload = await reader.read()
        except OSError as e:
            logger.warning(f"Connection from {peer} failed before completion: {e}")
            return
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

        if not payload:
            logger.debug(f"Empty connection from {peer}")
            return

        logger.debug(f"Received {len(payload)} bytes from {peer}")
        try:
            await self._on_payload(payload)
        except Exception:
            logger.exception(f"Error handling payload from {peer}")


async def send_payload(host: str, port: int, payload: bytes) -> None:
    """Send one payload over a new, short-lived connection.

    The connection is closed once the write completes, successfully or not.

    Raises:
        TransportError: If the connection or the write fails
    """
    try:
        _, writer = await asyncio.open_connection(host, port)
    except OSError as e:
        raise TransportError(f"Failed to connect to {host}:{port}: {e}", host, port) from e

    try:
        writer.write(payload)
        await writer.drain()
        if writer.can_write_eof():
            writer.write_eof()
    except OSError as e:
        raise TransportError(f"Failed to write to {host}:{port}: {e}", host, port) from e
    finally:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()

    logger.debug(f"Sent {len(payload)} bytes to {host}:{port}")
