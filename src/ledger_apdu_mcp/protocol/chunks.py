"""Chunk planning for multi-round commands (e.g. signing).

A chunked command is sent as a sequence of APDUs whose P1 marks the
position of each chunk::

    chunk 1          chunk 2 .. n-1     chunk n
    INIT (path)  ->  ADD (message)  ->  LAST (message)

The device accumulates state across the sequence, so chunks must be sent
one at a time and in order.
"""

from __future__ import annotations

from collections.abc import Collection
from enum import IntEnum

from .commands import MAX_APDU_DATA
from .errors import LedgerError
from .paths import serialize_path

DEFAULT_CHUNK_SIZE = 250

# Status words a chunk exchange may legitimately return
CHUNK_STATUS_LIST = (
    LedgerError.NoErrors,
    LedgerError.DataIsInvalid,
    LedgerError.BadKeyHandle,
)


class PayloadType(IntEnum):
    """P1 value marking a chunk's position in the sequence."""

    INIT = 0x00
    ADD = 0x01
    LAST = 0x02


def payload_type(chunk_idx: int, chunk_num: int) -> PayloadType:
    """Tag for the 1-based chunk ``chunk_idx`` out of ``chunk_num``.

    The final chunk is always LAST, even when it is also the first.
    """
    if not 1 <= chunk_idx <= chunk_num:
        raise ValueError(
            f"Chunk index must be 1-{chunk_num}, got {chunk_idx}"
        )
    if chunk_idx == chunk_num:
        return PayloadType.LAST
    if chunk_idx == 1:
        return PayloadType.INIT
    return PayloadType.ADD


def plan_chunks(
    path: str,
    message: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    required_lengths: Collection[int] | None = None,
) -> list[bytes]:
    """Split a path and message into the chunks of a multi-round command.

    The first chunk is the serialized path; the message follows in slices
    of at most ``chunk_size`` bytes, without padding.

    Args:
        path: Derivation path string, e.g. ``"m/44'/461'/0/0/5"``.
        message: Message bytes (may be empty).
        chunk_size: Maximum size of each message chunk, at most 255.
        required_lengths: Allowed path segment counts, if restricted.

    Raises:
        ValueError: If ``chunk_size`` is out of range, or the serialized
            path does not fit in one APDU.
        PathError: If ``path`` fails validation.
    """
    if not 1 <= chunk_size <= MAX_APDU_DATA:
        raise ValueError(f"Chunk size must be 1-{MAX_APDU_DATA}, got {chunk_size}")

    path_chunk = serialize_path(path, required_lengths)
    if len(path_chunk) > MAX_APDU_DATA:
        raise ValueError(
            f"Serialized path is {len(path_chunk)} bytes, "
            f"at most {MAX_APDU_DATA} fit in one APDU"
        )
    chunks = [path_chunk]
    message = bytes(message)
    for offset in range(0, len(message), chunk_size):
        chunks.append(message[offset : offset + chunk_size])
    return chunks
