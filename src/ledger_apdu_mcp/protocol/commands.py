"""APDU command header, instruction constants and command builders.

Command APDU layout::

    +-----+-----+----+----+----+------------------+
    | CLA | INS | P1 | P2 | Lc |       Data       |
    | 1 B | 1 B | 1B | 1B | 1B |  0-255 bytes     |
    +-----+-----+----+----+----+------------------+
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

MAX_APDU_DATA = 0xFF

# Requests understood outside of any particular app
DASHBOARD_CLA = 0xB0
APP_INFO_INS = 0x01
DEVICE_INFO_CLA = 0xE0
DEVICE_INFO_INS = 0x01


class Ins(IntEnum):
    """Instruction bytes every app is expected to implement."""

    GET_VERSION = 0x00


class P1(IntEnum):
    """Common P1 values for address-style commands."""

    ONLY_RETRIEVE = 0x00
    SHOW_ADDRESS_IN_DEVICE = 0x01


@dataclass(frozen=True)
class ApduHeader:
    """The fixed 4-byte header of a command APDU."""

    cla: int
    ins: int
    p1: int = 0
    p2: int = 0

    def __post_init__(self) -> None:
        for name in ("cla", "ins", "p1", "p2"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"APDU {name} must be 0-255, got {value}")

    def serialize(self, data: bytes = b"") -> bytes:
        """Build the full command APDU for this header and ``data``."""
        if len(data) > MAX_APDU_DATA:
            raise ValueError(
                f"APDU data must be at most {MAX_APDU_DATA} bytes, got {len(data)}"
            )
        return bytes([self.cla, self.ins, self.p1, self.p2, len(data)]) + data

    def __repr__(self) -> str:
        return (
            f"ApduHeader(cla=0x{self.cla:02X}, ins=0x{self.ins:02X}, "
            f"p1=0x{self.p1:02X}, p2=0x{self.p2:02X})"
        )


def build_get_version(cla: int, ins: int = Ins.GET_VERSION) -> ApduHeader:
    """Build the GET_VERSION request for the app using class ``cla``."""
    return ApduHeader(cla, ins, 0, 0)


def build_app_info() -> ApduHeader:
    """Build the dashboard-level app-info request (0xB0 0x01)."""
    return ApduHeader(DASHBOARD_CLA, APP_INFO_INS, 0, 0)


def build_device_info() -> ApduHeader:
    """Build the device-info request (0xE0 0x01), valid only in the dashboard."""
    return ApduHeader(DEVICE_INFO_CLA, DEVICE_INFO_INS, 0, 0)
