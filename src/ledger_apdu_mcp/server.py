"""MCP server entry point for talking to a Ledger device.

Exposes the APDU codec and the device queries as tools and resources via
the Model Context Protocol using the official Python MCP SDK with stdio
transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .app import AppParams, BaseApp
from .protocol.chunks import DEFAULT_CHUNK_SIZE, payload_type
from .protocol.chunks import plan_chunks as _plan_chunks
from .protocol.errors import ERROR_DESCRIPTIONS, ResponseError, error_code_to_string
from .protocol.paths import deserialize_path as _deserialize_path
from .protocol.paths import serialize_path as _serialize_path
from .transport.hid_transport import HIDTransport

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ledger-apdu",
    instructions="MCP server for Ledger hardware devices over the APDU protocol",
)

# Global connection state
_transport: HIDTransport | None = None


def _app_params() -> AppParams:
    """Build app parameters from ``LEDGER_APP_CLA`` and ``LEDGER_CHUNK_SIZE``."""
    cla = int(os.environ.get("LEDGER_APP_CLA", "0xE0"), 0)
    chunk_size = int(os.environ.get("LEDGER_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)), 0)
    return AppParams(cla=cla, chunk_size=chunk_size)


def _get_app() -> BaseApp:
    """Get an app bound to the active transport, raising if not connected."""
    if _transport is None or not _transport.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return BaseApp(_transport, _app_params())


def _error(e: ResponseError) -> dict[str, Any]:
    return {"error": e.error_message, "return_code": e.return_code}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect() -> dict[str, Any]:
    """Open a USB HID connection to the first Ledger device found.

    Auto-discovers the device by USB vendor ID (0x2C97).
    """
    global _transport
    if _transport is not None and _transport.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "product": _transport.descriptor.product,
        }

    _transport = HIDTransport()
    info = _transport.open()
    return {
        "connected": True,
        "product": info.product,
        "manufacturer": info.manufacturer,
        "product_id": info.product_id,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the USB connection to the device."""
    global _transport
    if _transport is None:
        return {"disconnected": True}
    _transport.close()
    _transport = None
    return {"disconnected": True}


# ─── DEVICE QUERY TOOLS ───────────────────────────────────────────────

@mcp.tool()
def get_version() -> dict[str, Any]:
    """Read the version of the app currently open on the device."""
    try:
        return _get_app().get_version().to_dict()
    except ResponseError as e:
        return _error(e)


@mcp.tool()
def get_app_info() -> dict[str, Any]:
    """Read the name, version and status flags of the open app."""
    try:
        return _get_app().app_info().to_dict()
    except ResponseError as e:
        return _error(e)


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Read secure element and MCU details.

    Only available while the dashboard is shown; otherwise the result
    carries the dashboard-only return code and message.
    """
    try:
        return _get_app().device_info().to_dict()
    except ResponseError as e:
        return _error(e)


# ─── CODEC TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def serialize_path(path: str, required_lengths: list[int] | None = None) -> dict[str, Any]:
    """Serialize a derivation path such as m/44'/461'/0/0/5 to hex.

    Args:
        path: Path string starting with "m/".
        required_lengths: Optional allowed segment counts.
    """
    try:
        return {"path": path, "hex": _serialize_path(path, required_lengths).hex()}
    except ResponseError as e:
        return _error(e)


@mcp.tool()
def deserialize_path(hex_data: str) -> dict[str, Any]:
    """Decode hex-encoded little-endian path words back to a path string.

    Args:
        hex_data: Hex string, a multiple of 8 digits.
    """
    try:
        data = bytes.fromhex(hex_data)
    except ValueError as e:
        return {"error": f"Invalid hex: {e}"}
    try:
        return {"hex": hex_data, "path": _deserialize_path(data)}
    except ResponseError as e:
        return _error(e)


@mcp.tool()
def plan_chunks(path: str, message_hex: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> dict[str, Any]:
    """Show how a path and message would be split for a chunked command.

    Args:
        path: Derivation path string.
        message_hex: Hex-encoded message.
        chunk_size: Maximum bytes per message chunk.
    """
    try:
        message = bytes.fromhex(message_hex)
        chunks = _plan_chunks(path, message, chunk_size)
    except ResponseError as e:
        return _error(e)
    except ValueError as e:
        return {"error": str(e)}

    total = len(chunks)
    return {
        "chunks": [
            {
                "index": idx,
                "payload_type": payload_type(idx, total).name,
                "hex": chunk.hex(),
            }
            for idx, chunk in enumerate(chunks, start=1)
        ],
    }


@mcp.tool()
def describe_error(return_code: int) -> dict[str, Any]:
    """Look up the description of a status word (e.g. 27264 for 0x6A80)."""
    return {
        "return_code": return_code,
        "hex": f"0x{return_code:04X}",
        "error_message": error_code_to_string(return_code),
    }


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("ledger://errors/table")
def resource_error_table() -> str:
    """The built-in status word description table."""
    return json.dumps({f"0x{code:04X}": text for code, text in ERROR_DESCRIPTIONS.items()})


@mcp.resource("ledger://device/status")
def resource_device_status() -> str:
    """Current connection status."""
    connected = _transport is not None and _transport.connected
    return json.dumps({"connected": connected})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
