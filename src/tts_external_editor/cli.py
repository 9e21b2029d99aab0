"""tts-editor command line.

Usage:
    tts-editor listen                          # Print every message from the game
    tts-editor get-scripts                     # Print all scripts of the loaded game
    tts-editor exec 'print("hi")'              # Execute Lua globally
    tts-editor exec 'return 1 + 1' --wait      # Execute Lua and print the result
    tts-editor exec 'self.flip()' --guid a0b2d5
    tts-editor custom '{"foo": "bar"}'         # Send to onExternalMessage

Ports default to Tabletop Simulator's (send 39999, listen 39998) and can be
set with TTS_EDITOR_SEND_PORT / TTS_EDITOR_LISTEN_PORT or the options below.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

import click

from .client import ExternalEditorApi
from .config import EditorConfig
from .errors import ExternalEditorError
from .messages import GLOBAL_GUID


def _run(coro: Any) -> Any:
    """Run a coroutine, turning protocol errors and Ctrl-C into a clean exit."""
    try:
        return asyncio.run(coro)
    except ExternalEditorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False))


@click.group()
@click.option("--host", default=None, help="Host Tabletop Simulator listens on")
@click.option("--send-port", type=int, default=None, help="Port Tabletop Simulator listens on")
@click.option("--listen-port", type=int, default=None, help="Port to receive messages on")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    host: str | None,
    send_port: int | None,
    listen_port: int | None,
    verbose: bool,
) -> None:
    """Talk to Tabletop Simulator's External Editor API."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        config = EditorConfig.from_env()
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    ctx.obj = config.with_overrides(host=host, send_port=send_port, listen_port=listen_port)


@main.command()
@click.pass_obj
def listen(config: EditorConfig) -> None:
    """Print every message received from the game as a JSON line."""

    async def _listen() -> None:
        async with ExternalEditorApi(config) as api:
            click.echo(f"Listening on port {api.port}", err=True)
            async for message in api.stream():
                _echo_json({"event": message.event_name, **message.to_wire()})

    _run(_listen())


@main.command("get-scripts")
@click.pass_obj
def get_scripts(config: EditorConfig) -> None:
    """Print every script and UI of the loaded game."""

    async def _get() -> dict[str, Any]:
        async with ExternalEditorApi(config) as api:
            game = await api.get_lua_scripts()
            return game.to_wire()

    _echo_json(_run(_get()))


@main.command("exec")
@click.argument("script")
@click.option("--guid", default=GLOBAL_GUID, show_default=True, help="Object to run the script on")
@click.option("--return-id", type=int, default=0, show_default=True, help="Correlation token")
@click.option("--wait", is_flag=True, help="Wait for and print the return value")
@click.pass_obj
def exec_(config: EditorConfig, script: str, guid: str, return_id: int, wait: bool) -> None:
    """Execute a Lua SCRIPT in the game."""

    async def _exec() -> Any:
        if not wait:
            await ExternalEditorApi(config).execute_lua_code(script, guid, return_id)
            return None
        async with ExternalEditorApi(config) as api:
            return await api.execute_lua_code_and_return(script, guid, return_id)

    result = _run(_exec())
    if wait:
        _echo_json(result)


@main.command()
@click.argument("payload")
@click.pass_obj
def custom(config: EditorConfig, payload: str) -> None:
    """Send a JSON PAYLOAD to the game's onExternalMessage."""
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="PAYLOAD") from e

    _run(ExternalEditorApi(config).custom_message(value))


if __name__ == "__main__":
    main()
