"""APDU framing over 64-byte USB HID reports.

Report layout::

    +---------+-----+----------+----------------+----------------+---------+
    | Channel | Tag | Sequence | APDU length    |   APDU bytes   | Padding |
    | 2 bytes | 1 B | 2 bytes  | 2 bytes (seq 0)|  rest of report| to 64 B |
    +---------+-----+----------+----------------+----------------+---------+

- Channel: big-endian, 0x0101 by default
- Tag: 0x05 for APDU traffic
- Sequence: big-endian, starting at 0 for each message
- APDU length: big-endian total message length, first report only
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_CHANNEL = 0x0101
TAG_APDU = 0x05
HID_PACKET_SIZE = 64
HEADER_SIZE = 5  # channel(2) + tag(1) + sequence(2)
LENGTH_SIZE = 2


def _header(channel: int, sequence: int) -> bytes:
    return (
        channel.to_bytes(2, "big")
        + bytes([TAG_APDU])
        + sequence.to_bytes(2, "big")
    )


def wrap_apdu(
    apdu: bytes,
    channel: int = DEFAULT_CHANNEL,
    packet_size: int = HID_PACKET_SIZE,
) -> list[bytes]:
    """Split a command APDU into zero-padded HID reports.

    Args:
        apdu: Complete command APDU (header, Lc and data).
        channel: HID channel identifier.
        packet_size: Report size in bytes.

    Returns:
        One or more reports of exactly ``packet_size`` bytes.
    """
    if packet_size <= HEADER_SIZE + LENGTH_SIZE:
        raise ValueError(f"Packet size too small: {packet_size}")
    if len(apdu) > 0xFFFF:
        raise ValueError(f"APDU too long to frame: {len(apdu)} bytes")

    data = len(apdu).to_bytes(LENGTH_SIZE, "big") + apdu
    body_size = packet_size - HEADER_SIZE

    reports: list[bytes] = []
    sequence = 0
    offset = 0
    while offset < len(data):
        chunk = data[offset : offset + body_size]
        report = _header(channel, sequence) + chunk
        reports.append(report + b"\x00" * (packet_size - len(report)))
        offset += body_size
        sequence += 1

    return reports


def unwrap_response_reports(
    reports: Iterable[bytes],
    channel: int = DEFAULT_CHANNEL,
) -> bytes | None:
    """Reassemble a response from HID reports.

    Returns:
        The complete response (payload plus status word), or ``None`` if
        the reports are incomplete.

    Raises:
        ValueError: If a report has the wrong channel, tag or sequence.
    """
    buffer = b""
    expected_length: int | None = None
    sequence = 0

    for report in reports:
        if len(report) < HEADER_SIZE:
            raise ValueError(f"HID report too short: {len(report)} bytes")
        if int.from_bytes(report[0:2], "big") != channel:
            raise ValueError("Invalid channel")
        if report[2] != TAG_APDU:
            raise ValueError(f"Invalid tag 0x{report[2]:02X}")
        if int.from_bytes(report[3:5], "big") != sequence:
            raise ValueError("Invalid sequence")

        body = report[HEADER_SIZE:]
        if expected_length is None:
            if len(body) < LENGTH_SIZE:
                raise ValueError("First HID report is missing the length")
            expected_length = int.from_bytes(body[:LENGTH_SIZE], "big")
            body = body[LENGTH_SIZE:]

        buffer += body
        sequence += 1
        if len(buffer) >= expected_length:
            return buffer[:expected_length]

    return None
