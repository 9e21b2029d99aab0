"""A fake Tabletop Simulator for testing code that uses ExternalEditorApi.

The fake receives the editor's requests on its bus and exposes one method per
host notification. It listens on an OS-assigned port by default; point the
client at it and tell it where the client listens:

    game = FakeTabletopSimulator()
    api = ExternalEditorApi(send_port=await game.listen(), listen_port=0)
    game.send_port = await api.listen()

    game.subscribe(GetLuaScripts, lambda _: game.load_new_game(states))
    snapshot = await api.get_lua_scripts()
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterable
from typing import Any

from .config import DEFAULT_HOST
from .endpoint import Endpoint
from .errors import SendPortNotConfiguredError
from .messages import (
    CLIENT_MESSAGES,
    GLOBAL_GUID,
    CustomMessage,
    ErrorMessage,
    GameSaved,
    HostMessage,
    IncomingScriptState,
    LoadingANewGame,
    ObjectCreated,
    PrintDebugMessage,
    PushingNewObject,
    ReturnMessage,
)

FAKE_SAVE_PATH = (
    "C:\\Users\\FakeUser\\Documents\\My Games\\Tabletop Simulator\\Saves\\TS_Save_1.json"
)

ScriptStates = Iterable[IncomingScriptState | dict[str, Any]]


class FakeTabletopSimulator(Endpoint):
    """The host side of the protocol, for tests.

    Outbound methods are plain methods returning an awaitable. They check the
    configuration when called, so a missing :attr:`send_port` raises
    immediately at the call site and no socket is ever opened.
    """

    def __init__(self, host: str = DEFAULT_HOST, listen_port: int = 0):
        super().__init__(CLIENT_MESSAGES, host, listen_port)
        self.host = host
        self.send_port: int | None = None

    def send(self, message: HostMessage) -> Awaitable[None]:
        """Send one message to the editor.

        Raises:
            SendPortNotConfiguredError: If send_port has not been assigned
        """
        send_port = self.send_port
        if not send_port:
            raise SendPortNotConfiguredError("Must assign .send_port before sending messages")
        return self._deliver(message, self.host, send_port)

    def push_new_object(self, script_states: ScriptStates) -> Awaitable[None]:
        return self.send(PushingNewObject(script_states=list(script_states)))

    def load_new_game(
        self, script_states: ScriptStates, save_path: str = FAKE_SAVE_PATH
    ) -> Awaitable[None]:
        return self.send(LoadingANewGame(script_states=list(script_states), save_path=save_path))

    def print_debug_message(self, text: str) -> Awaitable[None]:
        return self.send(PrintDebugMessage(message=text))

    def error_message(
        self, error: str, error_message_prefix: str, guid: str = GLOBAL_GUID
    ) -> Awaitable[None]:
        return self.send(
            ErrorMessage(error=error, error_message_prefix=error_message_prefix, guid=guid)
        )

    def custom_message(self, custom_message: Any) -> Awaitable[None]:
        return self.send(CustomMessage(custom_message=custom_message))

    def return_message(self, return_value: Any, return_id: int = 0) -> Awaitable[None]:
        return self.send(ReturnMessage(return_value=return_value, return_id=return_id))

    def game_saved(self, save_path: str = FAKE_SAVE_PATH) -> Awaitable[None]:
        return self.send(GameSaved(save_path=save_path))

    def object_created(self, guid: str) -> Awaitable[None]:
        return self.send(ObjectCreated(guid=guid))
