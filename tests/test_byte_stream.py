"""Tests for the bounds-checked byte stream."""

import pytest

from ledger_apdu_mcp.protocol.byte_stream import ByteStream, ResponsePayload
from ledger_apdu_mcp.protocol.errors import BufferUnderrun, InvalidOffset, LedgerError


def test_new_stream_offsets():
    """Initial data is readable from 0 and appends go after it."""
    stream = ByteStream(b"\x01\x02")
    assert stream.read_offset == 0
    assert stream.write_offset == 2
    assert stream.length() == 2
    assert stream.capacity() == 2


def test_append_little_endian():
    stream = ByteStream()
    stream.append_uint8(0x01)
    stream.append_uint16(0x0203)
    stream.append_uint32(0x04050607)
    stream.append_uint64(0x08090A0B0C0D0E0F)
    assert stream.get_complete_buffer() == bytes.fromhex(
        "01" "0302" "07060504" "0f0e0d0c0b0a0908"
    )
    assert stream.write_offset == 15


def test_append_value_out_of_range():
    stream = ByteStream()
    with pytest.raises(ValueError):
        stream.append_uint8(256)
    with pytest.raises(ValueError):
        stream.append_uint16(-1)


def test_read_bytes_advances():
    stream = ByteStream(b"\x01\x02\x03\x04")
    assert stream.read_bytes(2) == b"\x01\x02"
    assert stream.read_offset == 2
    assert stream.length() == 2
    assert stream.capacity() == 4


def test_read_past_end_keeps_offset():
    """A failed read returns nothing and leaves the read offset alone."""
    stream = ByteStream(b"\x01\x02\x03")
    stream.read_bytes(1)
    with pytest.raises(BufferUnderrun) as exc_info:
        stream.read_bytes(3)
    assert exc_info.value.return_code == LedgerError.UnknownError
    assert stream.read_offset == 1
    assert stream.read_bytes(2) == b"\x02\x03"


def test_read_bytes_at_does_not_move():
    stream = ByteStream(b"\x0a\x0b\x0c\x0d")
    assert stream.read_bytes_at(2, 1) == b"\x0b\x0c"
    assert stream.read_offset == 0
    with pytest.raises(BufferUnderrun):
        stream.read_bytes_at(2, 3)


def test_negative_lengths_and_offsets():
    stream = ByteStream(b"\x00\x00")
    with pytest.raises(InvalidOffset):
        stream.read_bytes(-1)
    with pytest.raises(InvalidOffset):
        stream.read_bytes_at(1, -1)
    with pytest.raises(InvalidOffset):
        stream.skip_bytes(-1)


def test_skip_bytes():
    stream = ByteStream(b"\x01\x02\x03")
    stream.skip_bytes(2)
    assert stream.read_uint8() == 0x03
    with pytest.raises(BufferUnderrun):
        stream.skip_bytes(1)
    assert stream.read_offset == 3


def test_big_endian_reads():
    stream = ByteStream(bytes.fromhex("0102" "31100004"))
    assert stream.read_uint16_be() == 0x0102
    assert stream.read_uint32_be() == 0x31100004


def test_insert_in_middle_shifts_tail():
    stream = ByteStream(b"\x01\x04")
    stream.insert_bytes_at(b"\x02\x03", 1)
    assert stream.get_complete_buffer() == b"\x01\x02\x03\x04"
    assert stream.write_offset == 2


def test_insert_beyond_end_zero_pads():
    """Inserting past the end fills the gap with zeros first."""
    stream = ByteStream(b"\x01")
    stream.insert_bytes_at(b"\xFF", 3)
    assert stream.get_complete_buffer() == b"\x01\x00\x00\xFF"


def test_write_bytes_at_overwrites_and_grows():
    stream = ByteStream(b"\x01\x02\x03")
    stream.write_bytes_at(b"\xAA\xBB\xCC", 2)
    assert stream.get_complete_buffer() == b"\x01\x02\xAA\xBB\xCC"
    assert stream.write_offset == 5

    stream.write_bytes_at(b"\xEE", 7)
    assert stream.get_complete_buffer() == b"\x01\x02\xAA\xBB\xCC\x00\x00\xEE"
    assert stream.write_offset == 8


def test_append_after_write_bytes_at():
    """Appends continue from where the last positioned write ended."""
    stream = ByteStream(bytes(4))
    stream.write_bytes_at(b"\x11", 1)
    stream.append_uint8(0x22)
    assert stream.get_complete_buffer() == b"\x00\x11\x22\x00"


def test_reset_and_clear():
    stream = ByteStream(b"\x01\x02")
    stream.read_bytes(2)
    stream.reset_offset()
    assert stream.read_offset == 0
    assert stream.write_offset == 0
    assert stream.capacity() == 2

    stream.clear()
    assert stream.capacity() == 0
    assert stream.length() == 0


def test_available_buffer():
    stream = ByteStream(b"\x01\x02\x03")
    stream.read_bytes(1)
    assert stream.get_available_buffer() == b"\x02\x03"
    assert stream.get_complete_buffer() == b"\x01\x02\x03"


def test_set_offsets_bounds():
    stream = ByteStream(b"\x01\x02")
    stream.set_read_offset(2)
    assert stream.length() == 0
    with pytest.raises(InvalidOffset):
        stream.set_read_offset(3)
    with pytest.raises(InvalidOffset):
        stream.set_write_offset(-1)


def test_stream_owns_its_buffer():
    """Mutating the source after construction does not affect the stream."""
    source = bytearray(b"\x01\x02")
    stream = ByteStream(source)
    source[0] = 0xFF
    assert stream.read_uint8() == 0x01


def test_response_payload_is_read_only():
    payload = ResponsePayload(b"\x01\x02")
    assert payload.read_bytes(1) == b"\x01"
    with pytest.raises(TypeError):
        payload.append_uint8(1)
    with pytest.raises(TypeError):
        payload.write_bytes_at(b"\x00", 0)
    with pytest.raises(TypeError):
        payload.insert_bytes_at(b"\x00", 0)


def test_response_payload_cannot_be_cleared():
    payload = ResponsePayload(b"\x01\x02")
    with pytest.raises(TypeError):
        payload.clear()
    assert payload.get_complete_buffer() == b"\x01\x02"
