"""Bounds-checked, growable byte buffer with independent read/write offsets.

All multi-byte ``append_*`` writes are little-endian, matching the path and
command payload encodings. The ``read_uint*_be`` helpers are big-endian,
matching the metadata replies the device sends back.

Reads never return partial data: anything that would run past the end of the
buffer raises :class:`~.errors.BufferUnderrun` and leaves the offsets alone.
"""

from __future__ import annotations

from .errors import BufferUnderrun, InvalidOffset


class ByteStream:
    """An owned byte buffer with a read cursor and a write cursor.

    Usage::

        stream = ByteStream()
        stream.append_uint8(0x01)
        stream.append_uint32(0x8000002C)
        data = stream.get_complete_buffer()

        reader = ByteStream(data)
        fmt = reader.read_uint8()
    """

    def __init__(self, data: bytes | bytearray | None = None) -> None:
        self._buffer = bytearray(data) if data else bytearray()
        self._read_offset = 0
        self._write_offset = len(self._buffer)

    # ─── OFFSETS ──────────────────────────────────────────────────────

    @property
    def read_offset(self) -> int:
        return self._read_offset

    @property
    def write_offset(self) -> int:
        return self._write_offset

    def set_read_offset(self, offset: int) -> None:
        if not 0 <= offset <= len(self._buffer):
            raise InvalidOffset("Invalid read offset")
        self._read_offset = offset

    def set_write_offset(self, offset: int) -> None:
        if not 0 <= offset <= len(self._buffer):
            raise InvalidOffset("Invalid write offset")
        self._write_offset = offset

    def reset_offset(self) -> None:
        """Reset both cursors to zero, keeping the contents."""
        self._read_offset = 0
        self._write_offset = 0

    def clear(self) -> None:
        """Discard the contents and reset both cursors."""
        self._buffer = bytearray()
        self._read_offset = 0
        self._write_offset = 0

    def length(self) -> int:
        """Number of bytes not yet read."""
        return len(self._buffer) - self._read_offset

    def capacity(self) -> int:
        """Total buffer length regardless of either cursor."""
        return len(self._buffer)

    def __len__(self) -> int:
        return self.length()

    # ─── READS ────────────────────────────────────────────────────────

    def _check_span(self, length: int, offset: int) -> None:
        if length < 0 or offset < 0:
            raise InvalidOffset(
                f"Invalid span: length={length}, offset={offset}"
            )
        if offset + length > len(self._buffer):
            raise BufferUnderrun()

    def read_bytes(self, length: int) -> bytes:
        """Read ``length`` bytes at the read offset and advance past them.

        Raises:
            BufferUnderrun: If fewer than ``length`` bytes remain.
        """
        self._check_span(length, self._read_offset)
        start = self._read_offset
        self._read_offset += length
        return bytes(self._buffer[start : start + length])

    def read_bytes_at(self, length: int, offset: int) -> bytes:
        """Read ``length`` bytes at ``offset`` without moving the read offset."""
        self._check_span(length, offset)
        return bytes(self._buffer[offset : offset + length])

    def skip_bytes(self, length: int) -> None:
        if length < 0:
            raise InvalidOffset(f"Cannot skip a negative length ({length})")
        if self._read_offset + length > len(self._buffer):
            raise BufferUnderrun("Attempt to skip beyond buffer length")
        self._read_offset += length

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_uint16_be(self) -> int:
        return int.from_bytes(self.read_bytes(2), "big")

    def read_uint32_be(self) -> int:
        return int.from_bytes(self.read_bytes(4), "big")

    def get_complete_buffer(self) -> bytes:
        """Return a copy of the whole buffer."""
        return bytes(self._buffer)

    def get_available_buffer(self) -> bytes:
        """Return a copy of the unread bytes."""
        return bytes(self._buffer[self._read_offset :])

    # ─── WRITES ───────────────────────────────────────────────────────

    def _append_uint(self, value: int, width: int) -> None:
        if not 0 <= value < 1 << (8 * width):
            raise ValueError(
                f"Value {value} does not fit in {width} unsigned byte(s)"
            )
        self.append_bytes(value.to_bytes(width, "little"))

    def append_uint8(self, value: int) -> None:
        self._append_uint(value, 1)

    def append_uint16(self, value: int) -> None:
        self._append_uint(value, 2)

    def append_uint32(self, value: int) -> None:
        self._append_uint(value, 4)

    def append_uint64(self, value: int) -> None:
        self._append_uint(value, 8)

    def append_bytes(self, data: bytes) -> None:
        """Write ``data`` at the write offset and advance it."""
        self.write_bytes_at(data, self._write_offset)

    def write_bytes_at(self, data: bytes, offset: int) -> None:
        """Overwrite bytes starting at ``offset``.

        The buffer grows (zero-filled) if the write extends past its end.
        The write offset is left at ``offset + len(data)``.
        """
        if offset < 0:
            raise InvalidOffset(f"Invalid write offset ({offset})")
        end = offset + len(data)
        if end > len(self._buffer):
            self._buffer.extend(bytes(end - len(self._buffer)))
        self._buffer[offset:end] = data
        self._write_offset = end

    def insert_bytes_at(self, data: bytes, offset: int) -> None:
        """Splice ``data`` in at ``offset``, shifting later bytes right.

        An ``offset`` past the end zero-fills the gap first. The write
        offset is not moved.
        """
        if offset < 0:
            raise InvalidOffset(f"Invalid insert offset ({offset})")
        if offset > len(self._buffer):
            self._buffer.extend(bytes(offset - len(self._buffer)))
        self._buffer[offset:offset] = data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self.capacity()}, "
            f"read_offset={self._read_offset}, "
            f"write_offset={self._write_offset})"
        )


class ResponsePayload(ByteStream):
    """Read-only view over a device reply with its status word removed."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("ResponsePayload is read-only")

    append_bytes = _read_only
    write_bytes_at = _read_only
    insert_bytes_at = _read_only
    set_write_offset = _read_only
    clear = _read_only
