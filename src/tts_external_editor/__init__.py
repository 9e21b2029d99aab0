"""Tabletop Simulator External Editor API.

Bidirectional JSON messaging between an editor and Tabletop Simulator:
- The editor sends requests (get scripts, save and play, execute Lua, ...)
- The game sends notifications (new game loaded, print, errors, ...)

Each message travels over its own short-lived TCP connection, and each side
listens on its own port.
"""

from .bus import MessageBus
from .client import ExternalEditorApi
from .config import EditorConfig
from .dispatch import Dispatcher
from .errors import (
    ExternalEditorError,
    MalformedMessageError,
    SendPortNotConfiguredError,
    TransportError,
    UnknownMessageError,
)
from .messages import (
    CLIENT_MESSAGES,
    GLOBAL_GUID,
    HOST_MESSAGES,
    ClientMessage,
    CustomMessage,
    ErrorMessage,
    ExecuteLuaCode,
    GameSaved,
    GetLuaScripts,
    HostMessage,
    IncomingScriptState,
    LoadingANewGame,
    Message,
    ObjectCreated,
    OutgoingScriptState,
    PrintDebugMessage,
    PushingNewObject,
    ReturnMessage,
    SaveAndPlay,
    SendCustomMessage,
)
from .testing import FakeTabletopSimulator
from .transport import MessageServer, send_payload

__all__ = [
    # Client
    "ExternalEditorApi",
    "EditorConfig",
    # Fake host
    "FakeTabletopSimulator",
    # Plumbing
    "MessageBus",
    "Dispatcher",
    "MessageServer",
    "send_payload",
    # Errors
    "ExternalEditorError",
    "TransportError",
    "MalformedMessageError",
    "UnknownMessageError",
    "SendPortNotConfiguredError",
    # Messages
    "GLOBAL_GUID",
    "Message",
    "OutgoingScriptState",
    "IncomingScriptState",
    "ClientMessage",
    "HostMessage",
    "CLIENT_MESSAGES",
    "HOST_MESSAGES",
    "GetLuaScripts",
    "SaveAndPlay",
    "SendCustomMessage",
    "ExecuteLuaCode",
    "PushingNewObject",
    "LoadingANewGame",
    "PrintDebugMessage",
    "ErrorMessage",
    "CustomMessage",
    "ReturnMessage",
    "GameSaved",
    "ObjectCreated",
]
