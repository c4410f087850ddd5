"""BIP32-style derivation path encoding.

String form::

    m/44'/461'/0/0/5

Binary form: one 4-byte little-endian word per segment, with bit 31 set
for hardened segments (written with a trailing ``'``)::

    2C 00 00 80  CD 01 00 80  00 00 00 00  00 00 00 00  05 00 00 00
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from .errors import (
    EmptyPath,
    InvalidBufferLength,
    InvalidPathLength,
    InvalidPathPrefix,
    InvalidPathSegment,
    SegmentOutOfRange,
)

HARDENED = 0x80000000
PATH_PREFIX = "m/"
WORD_SIZE = 4


def serialize_path(
    path: str,
    required_lengths: Collection[int] | None = None,
) -> bytes:
    """Serialize a derivation path string into little-endian words.

    Args:
        path: Path such as ``"m/44'/461'/5'/0/3"``.
        required_lengths: If non-empty, the number of segments must be one
            of these values.

    Raises:
        InvalidPathPrefix: If ``path`` is not a string starting with ``m/``.
        InvalidPathLength: If the segment count is not allowed.
        InvalidPathSegment: If a segment is not a decimal number.
        SegmentOutOfRange: If a segment value is ``>= 0x80000000``.
    """
    if not isinstance(path, str):
        raise InvalidPathPrefix(
            "Path should be a string (e.g \"m/44'/461'/5'/0/3\")"
        )
    if not path.startswith(PATH_PREFIX):
        raise InvalidPathPrefix(
            "Path should start with \"m/\" (e.g \"m/44'/461'/5'/0/3\")"
        )

    segments = path.split("/")[1:]

    if required_lengths and len(segments) not in required_lengths:
        raise InvalidPathLength(
            f"Invalid path length {len(segments)}, expected one of "
            f"{sorted(required_lengths)} (e.g \"m/44'/5757'/5'/0/3\")"
        )

    words = bytearray()
    for segment in segments:
        value = 0
        child = segment
        if child.endswith("'"):
            value = HARDENED
            child = child[:-1]

        # isdigit() accepts non-ASCII digits, so check the ASCII range too
        if not (child.isascii() and child.isdigit()):
            raise InvalidPathSegment(
                f"Invalid path : {child!r} is not a number. "
                f"(e.g \"m/44'/461'/5'/0/3\")"
            )

        number = int(child)
        if number >= HARDENED:
            raise SegmentOutOfRange(
                "Incorrect child value (bigger or equal to 0x80000000)"
            )

        words += (value | number).to_bytes(WORD_SIZE, "little")

    return bytes(words)


def numbers_to_path(items: Iterable[int]) -> str:
    """Render 32-bit path words as a path string.

    Raises:
        EmptyPath: If ``items`` is empty.
        InvalidPathSegment: If an item is not a 32-bit unsigned integer.
    """
    parts: list[str] = []
    for value in items:
        if not isinstance(value, int) or not 0 <= value <= 0xFFFFFFFF:
            raise InvalidPathSegment(
                f"Each item must be a 32-bit unsigned integer, got {value!r}"
            )
        child = value & ~HARDENED
        parts.append(f"{child}'" if value & HARDENED else str(child))

    if not parts:
        raise EmptyPath("The items array cannot be empty.")

    return PATH_PREFIX + "/".join(parts)


def deserialize_path(data: bytes) -> str:
    """Decode little-endian path words back into a path string.

    Raises:
        InvalidBufferLength: If ``len(data)`` is not a multiple of 4.
        EmptyPath: If ``data`` is empty.
    """
    if len(data) % WORD_SIZE != 0:
        raise InvalidBufferLength(
            f"The buffer length must be a multiple of {WORD_SIZE}, "
            f"got {len(data)}"
        )
    items = [
        int.from_bytes(data[i : i + WORD_SIZE], "little")
        for i in range(0, len(data), WORD_SIZE)
    ]
    return numbers_to_path(items)
