"""Tests for chunk planning."""

import pytest

from ledger_apdu_mcp.protocol.chunks import (
    CHUNK_STATUS_LIST,
    PayloadType,
    payload_type,
    plan_chunks,
)
from ledger_apdu_mcp.protocol.errors import InvalidPathLength, LedgerError
from ledger_apdu_mcp.protocol.paths import serialize_path

PATH = "m/44'/0'/0'"


def test_empty_message_yields_path_only():
    chunks = plan_chunks(PATH, b"", 10)
    assert chunks == [serialize_path(PATH)]


def test_message_equal_to_chunk_size():
    chunks = plan_chunks(PATH, bytes(10), 10)
    assert len(chunks) == 2
    assert chunks[1] == bytes(10)


def test_message_split_without_padding():
    message = bytes(range(25))
    chunks = plan_chunks(PATH, message, 10)
    assert [len(c) for c in chunks] == [12, 10, 10, 5]
    assert b"".join(chunks[1:]) == message


def test_short_message():
    chunks = plan_chunks(PATH, b"test message", 255)
    assert len(chunks) == 2
    assert len(chunks[0]) == 12
    assert chunks[1] == b"test message"


def test_path_errors_propagate():
    with pytest.raises(InvalidPathLength):
        plan_chunks("m/44'/0'", b"abc", 10, required_lengths=[3, 5])


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        plan_chunks(PATH, b"abc", 0)
    with pytest.raises(ValueError):
        plan_chunks(PATH, b"abc", 256)


def test_chunk_size_fills_one_apdu():
    chunks = plan_chunks(PATH, bytes(300), 255)
    assert [len(c) for c in chunks] == [12, 255, 45]


def test_path_too_long_for_one_apdu():
    """64 segments serialize to 256 bytes, one more than an APDU carries."""
    path = "m/" + "/".join(["0"] * 64)
    with pytest.raises(ValueError, match="Serialized path"):
        plan_chunks(path, b"abc", 10)


def test_payload_type_positions():
    assert payload_type(1, 3) == PayloadType.INIT
    assert payload_type(2, 3) == PayloadType.ADD
    assert payload_type(3, 3) == PayloadType.LAST


def test_payload_type_single_chunk_is_last():
    assert payload_type(1, 1) == PayloadType.LAST


def test_payload_type_out_of_range():
    with pytest.raises(ValueError):
        payload_type(0, 2)
    with pytest.raises(ValueError):
        payload_type(3, 2)


def test_payload_type_values():
    assert PayloadType.INIT == 0x00
    assert PayloadType.ADD == 0x01
    assert PayloadType.LAST == 0x02


def test_chunk_status_list():
    assert set(CHUNK_STATUS_LIST) == {
        LedgerError.NoErrors,
        LedgerError.DataIsInvalid,
        LedgerError.BadKeyHandle,
    }
