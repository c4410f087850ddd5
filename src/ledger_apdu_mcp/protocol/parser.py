"""Decoders for version, app-info and device-info replies.

Each decoder takes the :class:`ResponsePayload` produced by
:func:`~.response.unwrap_response` and walks it with bounds-checked reads,
so a truncated payload raises :class:`~.errors.BufferUnderrun` instead of
yielding garbage.
"""

from __future__ import annotations

from ..models.device import ResponseAppInfo, ResponseDeviceInfo, ResponseVersion
from .byte_stream import ResponsePayload
from .errors import LedgerError, ResponseError

APP_INFO_FORMAT_ID = 1
TARGET_ID_SIZE = 4

# GET_VERSION payload length -> width of the major/minor/patch fields.
# Firmware generations widened the fields from 1 to 2 to 4 bytes; each
# layout may be followed by a 4-byte target id.
VERSION_LAYOUTS: dict[int, int] = {
    5: 1,
    9: 1,
    8: 2,
    12: 2,
    14: 4,
    18: 4,
}


def parse_version(payload: ResponsePayload) -> ResponseVersion:
    """Decode a GET_VERSION payload.

    Layout::

        [test_mode:1][major:w][minor:w][patch:w][device_locked:1][target_id:4]?

    with ``w`` of 1, 2 or 4 bytes (big-endian), chosen by payload length.

    Raises:
        ResponseError: ``TechnicalProblem`` for an unrecognized length.
    """
    width = VERSION_LAYOUTS.get(payload.length())
    if width is None:
        raise ResponseError(LedgerError.TechnicalProblem, "Invalid response length")

    test_mode = payload.read_uint8() != 0
    major = int.from_bytes(payload.read_bytes(width), "big")
    minor = int.from_bytes(payload.read_bytes(width), "big")
    patch = int.from_bytes(payload.read_bytes(width), "big")
    device_locked = payload.read_uint8() == 1

    target_id = ""
    if payload.length() >= TARGET_ID_SIZE:
        target_id = f"{payload.read_uint32_be():08x}"

    return ResponseVersion(
        test_mode=test_mode,
        major=major,
        minor=minor,
        patch=patch,
        device_locked=device_locked,
        target_id=target_id,
    )


def _read_prefixed(payload: ResponsePayload) -> bytes:
    """Read a field prefixed by a single length byte."""
    return payload.read_bytes(payload.read_uint8())


def parse_app_info(payload: ResponsePayload) -> ResponseAppInfo:
    """Decode an app-info payload.

    Layout::

        [format_id=1][len][app_name][len][app_version][flag_len][flags]

    Raises:
        ResponseError: ``TechnicalProblem`` if the format id is not 1.
    """
    if payload.read_uint8() != APP_INFO_FORMAT_ID:
        raise ResponseError(LedgerError.TechnicalProblem, "Format ID not recognized")

    app_name = _read_prefixed(payload).decode("ascii", errors="replace")
    app_version = _read_prefixed(payload).decode("ascii", errors="replace")
    flag_len = payload.read_uint8()
    flags_value = payload.read_uint8()

    return ResponseAppInfo(
        app_name=app_name,
        app_version=app_version,
        flag_len=flag_len,
        flags_value=flags_value,
    )


def parse_device_info(payload: ResponsePayload) -> ResponseDeviceInfo:
    """Decode a device-info payload.

    Layout::

        [target_id:4][len][se_version][len][flags][len][mcu_version]
    """
    target_id = payload.read_bytes(TARGET_ID_SIZE).hex()
    se_version = _read_prefixed(payload).decode("ascii", errors="replace")
    flag = _read_prefixed(payload).hex()
    # Some firmware NUL-terminates the MCU version inside its length
    mcu_bytes = _read_prefixed(payload).split(b"\x00")[0]
    mcu_version = mcu_bytes.decode("ascii", errors="replace")

    return ResponseDeviceInfo(
        target_id=target_id,
        se_version=se_version,
        flag=flag,
        mcu_version=mcu_version,
    )
