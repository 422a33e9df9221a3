"""MCP server entry point for a WLED LED controller.

Exposes the newline-delimited JSON pipe as tools, resources, and prompts
via the Model Context Protocol using the official Python MCP SDK with
stdio transport.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import CodecError
from .models.state import LedState
from .pipe import LinePipe
from .transport.mock_connection import MockTransport
from .transport.network_connection import NetworkTransport
from .transport.serial_connection import DEFAULT_BAUDRATE, SerialTransport

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "wled-pipe",
    instructions="MCP server for WLED LED controllers over serial or TCP",
)

DEFAULT_RESPONSE_TIMEOUT_MS = 500
POLL_INTERVAL = 0.01  # seconds between empty polls

# Global connection state
_pipe: LinePipe | None = None
_last_state: dict[str, Any] = {}


def _get_pipe() -> LinePipe:
    """Get the active pipe, raising if not connected."""
    if _pipe is None or not _pipe.is_connected():
        raise RuntimeError(
            "Not connected to a controller. Use a 'connect_*' tool first."
        )
    return _pipe


def _replace_pipe(pipe: LinePipe) -> None:
    global _pipe
    if _pipe is not None:
        _pipe.close()
    _pipe = pipe
    _last_state.clear()


def _collect_lines(pipe: LinePipe, timeout_ms: int, max_lines: int) -> list[str]:
    """Poll until ``max_lines`` lines arrive or ``timeout_ms`` elapses."""
    deadline = time.monotonic() + timeout_ms / 1000
    lines: list[str] = []
    while len(lines) < max_lines:
        line = pipe.try_read_line()
        if line is not None:
            lines.append(line)
            continue
        if time.monotonic() >= deadline:
            break
        time.sleep(POLL_INTERVAL)
    return lines


def _decode(line: str) -> Any:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return None


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect_serial(port: str, baudrate: int = DEFAULT_BAUDRATE) -> dict[str, Any]:
    """Open a serial connection to the controller.

    Args:
        port: Serial device, e.g. ``/dev/ttyUSB0`` or ``COM3``.
        baudrate: Line speed (WLED default 115200).
    """
    _replace_pipe(LinePipe(SerialTransport(port, baudrate)))
    return {"connected": True, "transport": "serial", "port": port, "baudrate": baudrate}


@mcp.tool()
def connect_network(host: str, port: int) -> dict[str, Any]:
    """Open a TCP connection to the controller.

    Args:
        host: Hostname or IP address.
        port: TCP port accepting raw JSON lines.
    """
    _replace_pipe(LinePipe(NetworkTransport(host, port)))
    return {"connected": True, "transport": "network", "host": host, "port": port}


@mcp.tool()
def connect_mock() -> dict[str, Any]:
    """Use a simulated controller that records commands instead of sending them."""
    _replace_pipe(LinePipe(MockTransport()))
    return {"connected": True, "transport": "mock"}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the controller."""
    global _pipe
    if _pipe is None:
        return {"disconnected": True}
    _pipe.close()
    _pipe = None
    return {"disconnected": True}


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Report the connection state and transport kind."""
    if _pipe is None:
        return {"connected": False}
    return {
        "connected": _pipe.is_connected(),
        "transport": type(_pipe.transport).__name__,
    }


# ─── COMMAND TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def send_json(payload: dict[str, Any]) -> dict[str, Any]:
    """Send a JSON state object to the controller.

    Args:
        payload: Any WLED JSON state object, e.g. ``{"on": true, "bri": 128}``.
    """
    pipe = _get_pipe()
    pipe.send_value(payload)
    return {"sent": payload}


@mcp.tool()
def send_raw(text: str) -> dict[str, Any]:
    """Send a raw line of text. A trailing newline is added if missing."""
    pipe = _get_pipe()
    pipe.send_text(text)
    return {"sent": text}


@mcp.tool()
def set_state(
    on: bool | None = None,
    brightness: int | None = None,
    preset: int | None = None,
    transition: int | None = None,
) -> dict[str, Any]:
    """Change power, brightness, preset or transition time.

    Args:
        on: Turn the lights on or off.
        brightness: Master brightness (0-255).
        preset: Preset ID to apply (1-250).
        transition: Crossfade duration in units of 100 ms (0-65535).
    """
    if brightness is not None and not 0 <= brightness <= 255:
        return {"error": "Brightness must be 0-255"}
    if preset is not None and not 1 <= preset <= 250:
        return {"error": "Preset must be 1-250"}
    if transition is not None and not 0 <= transition <= 65535:
        return {"error": "Transition must be 0-65535"}

    state = LedState(on=on, bri=brightness, ps=preset, transition=transition)
    if not state.to_dict():
        return {"error": "Nothing to set"}

    pipe = _get_pipe()
    pipe.send_value(state)
    return {"sent": state.to_dict()}


@mcp.tool()
def read_responses(
    timeout_ms: int = DEFAULT_RESPONSE_TIMEOUT_MS,
    max_lines: int = 20,
) -> dict[str, Any]:
    """Collect lines received from the controller.

    Args:
        timeout_ms: How long to wait for lines.
        max_lines: Stop after this many lines.
    """
    pipe = _get_pipe()
    lines = _collect_lines(pipe, timeout_ms, max_lines)
    responses = []
    for line in lines:
        value = _decode(line)
        if isinstance(value, dict):
            _last_state.update(value)
        responses.append({"raw": line, "json": value})
    return {"responses": responses, "count": len(responses)}


@mcp.tool()
def query_state(timeout_ms: int = DEFAULT_RESPONSE_TIMEOUT_MS) -> dict[str, Any]:
    """Ask the controller for its full state and wait for the reply.

    Sends ``{"v":true}``; the controller answers with its state object.
    """
    pipe = _get_pipe()
    pipe.send_value({"v": True})

    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        state = None
        try:
            value = pipe.try_read_value()
        except CodecError as e:
            logger.debug("Skipping undecodable line: %s", e)
        else:
            if value is None:
                if time.monotonic() >= deadline:
                    return {"error": "No response from controller"}
                time.sleep(POLL_INTERVAL)
                continue
            if isinstance(value, dict):
                state = value.get("state", value)

        if isinstance(state, dict):
            _last_state.update(state)
            return {"state": state, "summary": LedState.from_dict(state).to_dict()}
        # Other replies do not extend the wait
        if time.monotonic() >= deadline:
            return {"error": "No response from controller"}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("wled://pipe/status")
def resource_pipe_status() -> str:
    """Connection state and transport kind."""
    return json.dumps(get_status())


@mcp.resource("wled://pipe/state")
def resource_last_state() -> str:
    """Last controller state seen in a response."""
    return json.dumps({"state": _last_state})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def light_scene(description: str) -> str:
    """Guide the AI to set up lighting for a described scene.

    Args:
        description: Mood, event, or color scheme.
    """
    return f"""Set up the lights for: {description}.
Consider:
- Whether the lights should be on and at what brightness
- A stored preset that already matches the mood
- A transition time so the change is not abrupt

Use query_state to see the current state first, then set_state or
send_json to apply changes."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
