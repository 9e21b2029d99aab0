"""Decode inbound payloads and publish them on a message bus."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from pydantic import ValidationError

from .bus import MessageBus
from .errors import MalformedMessageError, UnknownMessageError
from .messages import Message

logger = logging.getLogger(__name__)


class Dispatcher:
    """Turns the bytes of one connection into a typed message.

    The discriminant table decides which space the payload is read in, so a
    client and a fake host decode the same ``messageID`` differently.
    """

    def __init__(self, messages: Mapping[int, type[Message]], bus: MessageBus):
        self._messages = dict(messages)
        self._bus = bus

    @property
    def bus(self) -> MessageBus:
        return self._bus

    def decode(self, payload: bytes) -> Message:
        """Decode one complete payload.

        Raises:
            UnknownMessageError: If the messageID is not in this table
            MalformedMessageError: If the payload is not a valid envelope
        """
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedMessageError(f"Invalid JSON payload: {e}", payload) from e

        if not isinstance(data, dict):
            raise MalformedMessageError("Payload is not a JSON object", payload)

        message_id = data.get("messageID")
        if not isinstance(message_id, int) or isinstance(message_id, bool):
            raise MalformedMessageError(f"Missing or invalid messageID: {message_id!r}", payload)

        message_type = self._messages.get(message_id)
        if message_type is None:
            raise UnknownMessageError(message_id, payload)

        try:
            return message_type.model_validate(data)
        except ValidationError as e:
            raise MalformedMessageError(
                f"Invalid {message_type.event_name} message: {e}", payload
            ) from e

    async def dispatch(self, payload: bytes) -> Message:
        """Decode a payload and publish it. Returns the decoded message."""
        message = self.decode(payload)
        logger.debug(f"Dispatching {message.event_name} (messageID={message.message_id})")
        await self._bus.publish(message)
        return message
