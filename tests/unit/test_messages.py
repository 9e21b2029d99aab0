"""Unit tests for message envelopes."""

from __future__ import annotations

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from tts_external_editor.messages import (
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
    ObjectCreated,
    OutgoingScriptState,
    PrintDebugMessage,
    PushingNewObject,
    ReturnMessage,
    SaveAndPlay,
    SendCustomMessage,
)

# =============================================================================
# Descriptors
# =============================================================================


class TestOutgoingScriptState:
    """Tests for descriptors sent to the game."""

    def test_unset_fields_are_omitted(self) -> None:
        """Unset script and UI are left out, which deletes them in the game."""
        state = OutgoingScriptState(guid="a0b2d5")

        assert state.model_dump() == {"guid": "a0b2d5"}

    def test_set_fields_are_kept(self) -> None:
        state = OutgoingScriptState(guid="-1", script="...", ui="<Panel/>")

        assert state.model_dump() == {"guid": "-1", "script": "...", "ui": "<Panel/>"}

    def test_empty_script_is_not_unset(self) -> None:
        """An empty string is a value, not an omission."""
        state = OutgoingScriptState(guid="a0b2d5", script="")

        assert state.model_dump() == {"guid": "a0b2d5", "script": ""}

    def test_guid_required(self) -> None:
        with pytest.raises(ValidationError):
            OutgoingScriptState()


class TestIncomingScriptState:
    """Tests for descriptors reported by the game."""

    def test_script_always_present(self) -> None:
        state = IncomingScriptState(name="Chess Pawn", guid="db3f06")

        assert state.model_dump() == {"guid": "db3f06", "script": "", "name": "Chess Pawn"}

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            IncomingScriptState(guid="db3f06", script="")

    def test_ui_omitted_when_unset(self) -> None:
        state = IncomingScriptState(name="Global", guid="-1", script="...", ui="...")

        assert state.model_dump()["ui"] == "..."
        assert "ui" not in IncomingScriptState(name="Global", guid="-1").model_dump()


# =============================================================================
# Envelopes
# =============================================================================


class TestWireFormat:
    """Tests for envelope serialization."""

    def test_get_lua_scripts(self) -> None:
        assert json.loads(GetLuaScripts().to_json()) == {"messageID": 0}

    def test_execute_lua_code_defaults(self) -> None:
        """Execute code targets the global script with returnID 0 by default."""
        message = ExecuteLuaCode(script='print("Hello, World")')

        assert json.loads(message.to_json()) == {
            "messageID": 3,
            "returnID": 0,
            "guid": "-1",
            "script": 'print("Hello, World")',
        }

    def test_save_and_play_uses_camel_case(self) -> None:
        message = SaveAndPlay(
            script_states=[
                OutgoingScriptState(guid="-1", script="...", ui="..."),
                OutgoingScriptState(guid="a0b2d5"),
            ]
        )

        assert json.loads(message.to_json()) == {
            "messageID": 1,
            "scriptStates": [
                {"guid": "-1", "script": "...", "ui": "..."},
                {"guid": "a0b2d5"},
            ],
        }

    def test_error_message_wire_names(self) -> None:
        message = ErrorMessage(error="boom", error_message_prefix="Error in Global Script: ")

        assert message.to_wire() == {
            "messageID": 3,
            "error": "boom",
            "guid": GLOBAL_GUID,
            "errorMessagePrefix": "Error in Global Script: ",
        }

    def test_null_return_value_is_kept(self) -> None:
        """Arbitrary JSON values, including null, are sent as-is."""
        data = json.loads(ReturnMessage(return_value=None).to_json())

        assert data == {"messageID": 5, "returnValue": None, "returnID": 0}

    def test_custom_message_nested_value(self) -> None:
        value = {"foo": "Hello", "bar": ["World", 1, None]}

        assert json.loads(CustomMessage(custom_message=value).to_json())["customMessage"] == value


class TestConstruction:
    """Tests for envelope construction and validation."""

    def test_wire_names_accepted(self) -> None:
        message = LoadingANewGame.model_validate(
            {
                "messageID": 1,
                "savePath": "C:\\save.json",
                "scriptStates": [{"name": "Global", "guid": "-1", "script": ""}],
            }
        )

        assert message.save_path == "C:\\save.json"
        assert message.script_states[0].name == "Global"

    def test_discriminant_is_fixed(self) -> None:
        """A class only accepts its own messageID."""
        with pytest.raises(ValidationError):
            GetLuaScripts.model_validate({"messageID": 1})

    def test_messages_are_frozen(self) -> None:
        message = ExecuteLuaCode(script="return 1")

        with pytest.raises(ValidationError):
            message.script = "return 2"

    def test_extra_fields_preserved(self) -> None:
        """Undocumented fields from the game survive decoding."""
        message = ReturnMessage.model_validate(
            {"messageID": 5, "returnValue": 1, "returnID": 0, "extra": True}
        )

        assert message.to_wire()["extra"] is True

    def test_misspelled_keyword_rejected(self) -> None:
        """Only decoding keeps unknown fields; a typo in code fails."""
        with pytest.raises(TypeError, match="return_Id"):
            ExecuteLuaCode(script="x", return_Id=5)

    def test_misspelled_descriptor_keyword_rejected(self) -> None:
        with pytest.raises(TypeError, match="scirpt"):
            OutgoingScriptState(guid="a0b2d5", scirpt="...")


class TestDiscriminantTables:
    """Tests for the two discriminant spaces."""

    def test_tables_cover_all_ids(self) -> None:
        assert sorted(CLIENT_MESSAGES) == [0, 1, 2, 3]
        assert sorted(HOST_MESSAGES) == list(range(8))

    @pytest.mark.parametrize("table", [CLIENT_MESSAGES, HOST_MESSAGES])
    def test_default_ids_match_table(self, table) -> None:
        for message_id, message_type in table.items():
            assert message_type.model_fields["message_id"].default == message_id

    def test_same_id_different_meaning(self) -> None:
        """messageID 1 is save-and-play from the editor, a new game from the host."""
        assert CLIENT_MESSAGES[1] is SaveAndPlay
        assert HOST_MESSAGES[1] is LoadingANewGame

    def test_event_names_unique_per_space(self) -> None:
        for table in (CLIENT_MESSAGES, HOST_MESSAGES):
            names = [m.event_name for m in table.values()]
            assert len(names) == len(set(names))


CLIENT_SAMPLES = [
    GetLuaScripts(),
    SaveAndPlay(script_states=[OutgoingScriptState(guid="-1", script="..."), {"guid": "a0b2d5"}]),
    SendCustomMessage(custom_message={"foo": "Hello", "bar": ["World", None]}),
    ExecuteLuaCode(script="return 1", guid="a0b2d5", return_id=4),
]

HOST_SAMPLES = [
    PushingNewObject(script_states=[IncomingScriptState(name="Chess Pawn", guid="db3f06")]),
    LoadingANewGame(
        script_states=[IncomingScriptState(name="Global", guid="-1", script="...", ui="...")],
        save_path="C:\\save.json",
    ),
    PrintDebugMessage(message="Hit player! White"),
    ErrorMessage(error="unexpected symbol", error_message_prefix="Error in Global Script: "),
    CustomMessage(custom_message=[1, 2, 3]),
    ReturnMessage(return_value={"sum": 2}, return_id=4),
    GameSaved(save_path="C:\\save.json"),
    ObjectCreated(guid="abcdef"),
]


class TestUnions:
    """Tests for the discriminated unions of each space."""

    @pytest.mark.parametrize("message", CLIENT_SAMPLES, ids=lambda m: m.event_name)
    def test_client_union_selects_class(self, message) -> None:
        decoded = TypeAdapter(ClientMessage).validate_json(message.to_json())

        assert type(decoded) is type(message)
        assert decoded == message

    @pytest.mark.parametrize("message", HOST_SAMPLES, ids=lambda m: m.event_name)
    def test_host_union_selects_class(self, message) -> None:
        decoded = TypeAdapter(HostMessage).validate_json(message.to_json())

        assert type(decoded) is type(message)
        assert decoded == message

    def test_samples_cover_every_discriminant(self) -> None:
        assert [m.message_id for m in CLIENT_SAMPLES] == sorted(CLIENT_MESSAGES)
        assert [m.message_id for m in HOST_SAMPLES] == sorted(HOST_MESSAGES)

    def test_same_payload_differs_by_space(self) -> None:
        payload = b'{"messageID": 1, "scriptStates": []}'

        assert type(TypeAdapter(ClientMessage).validate_json(payload)) is SaveAndPlay
        assert type(TypeAdapter(HostMessage).validate_json(payload)) is LoadingANewGame

    def test_id_outside_space_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(ClientMessage).validate_json(b'{"messageID": 7, "guid": "abcdef"}')
