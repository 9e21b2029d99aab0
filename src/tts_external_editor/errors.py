"""Exceptions raised by the External Editor API.

Three kinds of failure exist:
- Transport errors: a connection could not be opened, written or bound.
- Malformed messages: an inbound payload is not a valid envelope.
- Misconfiguration: a send was attempted with no destination port.
"""

from __future__ import annotations


class ExternalEditorError(Exception):
    """Base class for all errors raised by this package."""

    pass


class TransportError(ExternalEditorError):
    """A connect, write or bind operation failed.

    The underlying ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, message: str, host: str | None = None, port: int | None = None):
        super().__init__(message)
        self.host = host
        self.port = port


class MalformedMessageError(ExternalEditorError):
    """An inbound payload could not be decoded into a message."""

    def __init__(self, message: str, payload: bytes = b""):
        super().__init__(message)
        self.payload = payload


class UnknownMessageError(MalformedMessageError):
    """An inbound payload carries a messageID outside the receiving role's table."""

    def __init__(self, message_id: int, payload: bytes = b""):
        super().__init__(f"Unknown messageID: {message_id}", payload)
        self.message_id = message_id


class SendPortNotConfiguredError(ExternalEditorError):
    """A send was attempted before a destination port was assigned."""

    pass
