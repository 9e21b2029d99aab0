"""Message definitions for the External Editor API.

Every message is a JSON object tagged by an integer ``messageID``. There are
two separate discriminant spaces:
- Client messages: sent by the editor to Tabletop Simulator
- Host messages: sent by Tabletop Simulator to the editor

The same ``messageID`` means different things in each space (1 is "save and
play" from the editor but "loading a new game" from the host), so a payload
can only be decoded by the role that knows which space it is reading.

Wire names are camelCase; Python attributes are snake_case and both are
accepted on construction:

    >>> ExecuteLuaCode(script="return 1").to_json()
    b'{"messageID":3,"returnID":0,"guid":"-1","script":"return 1"}'

See https://api.tabletopsimulator.com/externaleditorapi/
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

GLOBAL_GUID = "-1"
"""GUID used for the global script and for errors not tied to an object."""


# =============================================================================
# Scriptable object descriptors
# =============================================================================


class _WireModel(BaseModel):
    """Keyword construction rejects unknown names.

    Decoding with ``model_validate`` still keeps unknown fields, so only a
    misspelled keyword in code fails.
    """

    def __init__(self, **data: Any) -> None:
        fields = type(self).model_fields
        known = set(fields) | {f.alias for f in fields.values() if f.alias}
        unknown = sorted(set(data) - known)
        if unknown:
            names = ", ".join(unknown)
            raise TypeError(f"{type(self).__name__} got unexpected field(s): {names}")
        super().__init__(**data)


class OutgoingScriptState(_WireModel):
    """A scriptable object sent to the host.

    An unset ``script`` or ``ui`` is omitted from the JSON, which tells the
    host to delete that script or UI. It does not mean "leave unchanged".
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    guid: str
    script: str | None = None
    ui: str | None = None

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in ("script", "ui"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class IncomingScriptState(OutgoingScriptState):
    """A scriptable object reported by the host.

    Always carries a name and a script, which may be empty.
    """

    name: str
    script: str = ""


# =============================================================================
# Envelope
# =============================================================================


class Message(_WireModel):
    """Base envelope. Subclasses pin ``message_id`` to a single value."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    event_name: ClassVar[str]

    message_id: int = Field(alias="messageID")

    def to_json(self) -> bytes:
        """Serialize to the UTF-8 JSON sent on the wire."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def to_wire(self) -> dict[str, Any]:
        """The JSON-compatible dict sent on the wire."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Client -> host
# =============================================================================


class GetLuaScripts(Message):
    """Ask the host to send every script as a :class:`LoadingANewGame`."""

    event_name: ClassVar[str] = "getLuaScripts"

    message_id: Literal[0] = Field(default=0, alias="messageID")


class SaveAndPlay(Message):
    """Ask the host to save and reload with the provided scripts.

    Objects not mentioned are left untouched. Objects mentioned have both their
    script and UI replaced; an unset field deletes it.
    """

    event_name: ClassVar[str] = "saveAndPlay"

    message_id: Literal[1] = Field(default=1, alias="messageID")
    script_states: list[OutgoingScriptState] = Field(default_factory=list, alias="scriptStates")


class SendCustomMessage(Message):
    """Forward an arbitrary JSON value to the host's ``onExternalMessage``."""

    event_name: ClassVar[str] = "customMessage"

    message_id: Literal[2] = Field(default=2, alias="messageID")
    custom_message: Any = Field(default=None, alias="customMessage")


class ExecuteLuaCode(Message):
    """Execute Lua on the host, globally or on the object ``guid``.

    The target object must already have a script attached in the game.
    """

    event_name: ClassVar[str] = "executeLuaCode"

    message_id: Literal[3] = Field(default=3, alias="messageID")
    return_id: int = Field(default=0, alias="returnID")
    guid: str = GLOBAL_GUID
    script: str


# =============================================================================
# Host -> client
# =============================================================================


class PushingNewObject(Message):
    """An object was opened from the host's "Scripting Editor" context menu."""

    event_name: ClassVar[str] = "pushingNewObject"

    message_id: Literal[0] = Field(default=0, alias="messageID")
    script_states: list[IncomingScriptState] = Field(default_factory=list, alias="scriptStates")


class LoadingANewGame(Message):
    """A game was loaded; carries every script and UI in it."""

    event_name: ClassVar[str] = "loadingANewGame"

    message_id: Literal[1] = Field(default=1, alias="messageID")
    script_states: list[IncomingScriptState] = Field(default_factory=list, alias="scriptStates")
    save_path: str = Field(default="", alias="savePath")


class PrintDebugMessage(Message):
    """Output of a Lua ``print(...)``."""

    event_name: ClassVar[str] = "printDebugMessage"

    message_id: Literal[2] = Field(default=2, alias="messageID")
    message: str


class ErrorMessage(Message):
    """A Lua error raised on the host."""

    event_name: ClassVar[str] = "errorMessage"

    message_id: Literal[3] = Field(default=3, alias="messageID")
    error: str
    guid: str = GLOBAL_GUID
    error_message_prefix: str = Field(default="", alias="errorMessagePrefix")


class CustomMessage(Message):
    """A value sent from Lua with ``sendExternalMessage``."""

    event_name: ClassVar[str] = "customMessage"

    message_id: Literal[4] = Field(default=4, alias="messageID")
    custom_message: Any = Field(default=None, alias="customMessage")


class ReturnMessage(Message):
    """The value returned by an :class:`ExecuteLuaCode` script."""

    event_name: ClassVar[str] = "returnMessage"

    message_id: Literal[5] = Field(default=5, alias="messageID")
    return_value: Any = Field(default=None, alias="returnValue")
    return_id: int = Field(default=0, alias="returnID")


class GameSaved(Message):
    """The game was saved."""

    event_name: ClassVar[str] = "gameSaved"

    message_id: Literal[6] = Field(default=6, alias="messageID")
    save_path: str = Field(default="", alias="savePath")


class ObjectCreated(Message):
    """An object was created."""

    event_name: ClassVar[str] = "objectCreated"

    message_id: Literal[7] = Field(default=7, alias="messageID")
    guid: str


# =============================================================================
# Discriminant tables
# =============================================================================

ClientMessage = Annotated[
    GetLuaScripts | SaveAndPlay | SendCustomMessage | ExecuteLuaCode,
    Field(discriminator="message_id"),
]
HostMessage = Annotated[
    PushingNewObject
    | LoadingANewGame
    | PrintDebugMessage
    | ErrorMessage
    | CustomMessage
    | ReturnMessage
    | GameSaved
    | ObjectCreated,
    Field(discriminator="message_id"),
]

CLIENT_MESSAGES: dict[int, type[Message]] = {
    0: GetLuaScripts,
    1: SaveAndPlay,
    2: SendCustomMessage,
    3: ExecuteLuaCode,
}

HOST_MESSAGES: dict[int, type[Message]] = {
    0: PushingNewObject,
    1: LoadingANewGame,
    2: PrintDebugMessage,
    3: ErrorMessage,
    4: CustomMessage,
    5: ReturnMessage,
    6: GameSaved,
    7: ObjectCreated,
}
