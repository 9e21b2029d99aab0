"""Message Bus - typed pub/sub for decoded messages.

Each endpoint owns one bus, closed over the message classes of the space it
receives. Two registries are kept apart:
- Subscribers: long-lived callbacks, every one is notified (fan-out)
- Waiters: one-shot futures, the oldest matching one is fulfilled

A long-lived subscriber therefore never consumes a reply that a one-shot
caller is waiting for.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .messages import Message

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Message)

# Subscribers may be plain functions or coroutine functions
MessageCallback = Callable[[Any], Awaitable[None] | None]


@dataclass
class _Waiter(Generic[M]):
    future: asyncio.Future[M]
    where: Callable[[M], bool] | None = None

    def accepts(self, message: M) -> bool:
        return self.where is None or self.where(message)


class MessageBus:
    """Event bus for one role's inbound message space.

    Usage:
        bus = MessageBus(HOST_MESSAGES.values())
        unsubscribe = bus.subscribe(PrintDebugMessage, on_print)
        reply = bus.once(LoadingANewGame)
        await bus.publish(message)
    """

    def __init__(self, message_types: Iterable[type[Message]]):
        self._types: frozenset[type[Message]] = frozenset(message_types)
        self._subscriptions: dict[type[Message], list[MessageCallback]] = {}
        self._wildcard: list[MessageCallback] = []
        self._waiters: dict[type[Message], deque[_Waiter[Any]]] = {}

    @property
    def message_types(self) -> frozenset[type[Message]]:
        return self._types

    def _check(self, message_type: type[Message]) -> None:
        if message_type not in self._types:
            raise ValueError(f"{message_type.__name__} is not received by this endpoint")

    def subscribe(self, message_type: type[M], callback: MessageCallback) -> Callable[[], None]:
        """Subscribe to every message of one type.

        Args:
            message_type: The message class to receive
            callback: Function or coroutine function called with the message

        Returns:
            Unsubscribe function
        """
        self._check(message_type)
        callbacks = self._subscriptions.setdefault(message_type, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscribe_all(self, callback: MessageCallback) -> Callable[[], None]:
        """Subscribe to every message published on this bus."""
        self._wildcard.append(callback)

        def unsubscribe() -> None:
            if callback in self._wildcard:
                self._wildcard.remove(callback)

        return unsubscribe

    def once(
        self,
        message_type: type[M],
        where: Callable[[M], bool] | None = None,
    ) -> asyncio.Future[M]:
        """Arm a one-shot waiter for the next message of one type.

        The waiter is registered before this returns, so a message published
        right after the call is never missed. Waiters of the same type are
        fulfilled oldest first.

        Args:
            message_type: The message class to wait for
            where: Optional predicate; messages it rejects are left for others

        Returns:
            Future resolved with the message. Cancel it to stop waiting.
        """
        self._check(message_type)
        future: asyncio.Future[M] = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(message_type, deque()).append(_Waiter(future, where))
        return future

    def pending_waiters(self, message_type: type[Message]) -> int:
        """Number of waiters still pending for a message type."""
        return sum(1 for waiter in self._waiters.get(message_type, ()) if not waiter.future.done())

    async def publish(self, message: Message) -> None:
        """Publish a message to the oldest matching waiter and to all subscribers.

        Messages nobody listens to are dropped.
        """
        message_type = type(message)
        self._check(message_type)

        self._resolve_waiter(message_type, message)

        # Copies so callbacks can unsubscribe while being notified
        specific_subs = list(self._subscriptions.get(message_type, []))
        wildcard_subs = list(self._wildcard)

        if not specific_subs and not wildcard_subs:
            logger.debug(f"No subscribers for {message_type.event_name}")

        for callback in specific_subs + wildcard_subs:
            try:
                result = callback(message)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Error in subscriber for {message_type.event_name}")

    def _resolve_waiter(self, message_type: type[Message], message: Message) -> None:
        waiters = self._waiters.get(message_type)
        if not waiters:
            return
        for waiter in list(waiters):
            if waiter.future.done():
                waiters.remove(waiter)
                continue
            if waiter.accepts(message):
                waiters.remove(waiter)
                waiter.future.set_result(message)
                return

    async def stream(self, message_type: type[M] | None = None) -> AsyncIterator[M]:
        """Yield published messages as they arrive.

        Usage:
            async for message in bus.stream():
                print(message.to_json())
        """
        queue: asyncio.Queue[Any] = asyncio.Queue()

        if message_type is None:
            unsubscribe = self.subscribe_all(queue.put_nowait)
        else:
            unsubscribe = self.subscribe(message_type, queue.put_nowait)

        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()
