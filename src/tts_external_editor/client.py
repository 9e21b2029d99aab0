"""Editor-side client for Tabletop Simulator's External Editor API.

Usage:
    async with ExternalEditorApi() as api:
        game = await api.get_lua_scripts()
        api.subscribe(PrintDebugMessage, lambda m: print(m.message))
        value = await api.execute_lua_code_and_return("return 1 + 1")

See https://api.tabletopsimulator.com/externaleditorapi/
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .config import EditorConfig
from .endpoint import Endpoint
from .messages import (
    GLOBAL_GUID,
    HOST_MESSAGES,
    ClientMessage,
    ExecuteLuaCode,
    GetLuaScripts,
    LoadingANewGame,
    Message,
    OutgoingScriptState,
    ReturnMessage,
    SaveAndPlay,
    SendCustomMessage,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Message)


class ExternalEditorApi(Endpoint):
    """Sends editor requests to the game and receives its notifications.

    Every host message is published on :attr:`bus`; use :meth:`subscribe`,
    :meth:`once` or :meth:`stream` to receive them. Requests with a defined
    reply await it as part of the call.

    Reply waits have no timeout. Wrap them in ``asyncio.wait_for`` if needed.
    """

    def __init__(self, config: EditorConfig | None = None, **overrides: Any):
        """Initialize the client.

        Args:
            config: Ports and hosts, defaults to :meth:`EditorConfig.from_env`
            **overrides: Individual config fields to replace (e.g. ``listen_port=0``)
        """
        self.config = (config or EditorConfig.from_env()).with_overrides(**overrides)
        super().__init__(HOST_MESSAGES, self.config.listen_host, self.config.listen_port)

    async def send(self, message: ClientMessage) -> None:
        """Send one message to the game.

        Raises:
            TransportError: If the game cannot be reached
        """
        await self._deliver(message, self.config.host, self.config.send_port)

    async def request(
        self,
        message: ClientMessage,
        reply_type: type[M],
        where: Callable[[M], bool] | None = None,
    ) -> M:
        """Send a message and await the next reply of ``reply_type``.

        The waiter is armed before sending, so a fast reply is never lost.
        """
        reply = self.once(reply_type, where)
        try:
            await self.send(message)
        except BaseException:
            reply.cancel()
            raise
        logger.debug(f"Awaiting {reply_type.event_name} reply to {message.event_name}")
        return await reply

    async def get_lua_scripts(self) -> LoadingANewGame:
        """Request every script and UI of the currently loaded game.

        See https://api.tabletopsimulator.com/externaleditorapi/#get-lua-scripts
        """
        return await self.request(GetLuaScripts(), LoadingANewGame)

    async def save_and_play(
        self, script_states: Iterable[OutgoingScriptState | dict[str, Any]]
    ) -> LoadingANewGame:
        """Update scripts and UI, then save and reload the game.

        Objects mentioned have both their script and UI replaced. An unset
        script or UI is deleted from that object.

        See https://api.tabletopsimulator.com/externaleditorapi/#save-play

        Returns:
            The game state after the reload
        """
        message = SaveAndPlay(script_states=list(script_states))
        return await self.request(message, LoadingANewGame)

    async def custom_message(self, custom_message: Any) -> None:
        """Send a value to the game's ``onExternalMessage``.

        See https://api.tabletopsimulator.com/externaleditorapi/#custom-message
        """
        await self.send(SendCustomMessage(custom_message=custom_message))

    async def execute_lua_code(
        self, script: str, guid: str = GLOBAL_GUID, return_id: int = 0
    ) -> None:
        """Execute Lua globally, or on the object ``guid``.

        See https://api.tabletopsimulator.com/externaleditorapi/#execute-lua-code
        """
        await self.send(ExecuteLuaCode(script=script, guid=guid, return_id=return_id))

    async def execute_lua_code_and_return(
        self,
        script: str,
        guid: str = GLOBAL_GUID,
        return_id: int = 0,
        match_return_id: bool = False,
    ) -> Any:
        """Execute Lua and await its return value.

        By default the next return message is accepted whatever its returnID.
        With several executions in flight this can pair a value with the wrong
        call; pass ``match_return_id=True`` to only accept a return message
        carrying ``return_id``.

        Returns:
            The decoded ``returnValue``
        """
        where = (lambda m: m.return_id == return_id) if match_return_id else None
        message = ExecuteLuaCode(script=script, guid=guid, return_id=return_id)
        reply = await self.request(message, ReturnMessage, where)
        return reply.return_value

