"""Tests for the status word table and structured errors."""

import pytest

from ledger_apdu_mcp.protocol.errors import (
    ERROR_DESCRIPTIONS,
    LedgerError,
    ResponseError,
    error_code_to_string,
)


def test_known_codes():
    assert LedgerError.NoErrors == 0x9000
    assert LedgerError.BadKeyHandle == 0x6A80
    assert LedgerError.ClaNotSupported == 0x6E00
    assert LedgerError.UnknownTransportError == 0xFFFF
    assert LedgerError.GenericError == 0xFFFFFFFF


def test_aliases_share_values():
    assert LedgerError.IncorrectData is LedgerError.BadKeyHandle
    assert LedgerError.TechnicalProblem is LedgerError.UnknownError


def test_describe_from_table():
    assert error_code_to_string(0x9000) == "No errors"
    assert error_code_to_string(LedgerError.BadKeyHandle) == "Bad key handle"
    assert error_code_to_string(0xFFFF) == "Unknown transport error"
    assert error_code_to_string(1) == "U2F: Unknown"


def test_describe_unknown_code():
    assert error_code_to_string(0x1234) == "Unknown Return Code: 0x1234"
    assert error_code_to_string(0xABCD) == "Unknown Return Code: 0xABCD"


def test_overrides_take_precedence():
    overrides = {0x6A80: "Invalid address", 0x6999: "App specific"}
    assert error_code_to_string(0x6A80, overrides) == "Invalid address"
    assert error_code_to_string(0x6999, overrides) == "App specific"
    assert error_code_to_string(0x6985, overrides) == "Conditions of Use Not Satisfied"


def test_overrides_do_not_leak():
    """Per-call overrides never change the shared table."""
    error_code_to_string(0x6A80, {0x6A80: "Overridden"})
    assert error_code_to_string(0x6A80) == "Bad key handle"
    assert ERROR_DESCRIPTIONS[0x6A80] == "Bad key handle"


def test_table_is_read_only():
    with pytest.raises(TypeError):
        ERROR_DESCRIPTIONS[0x6A80] = "Changed"


def test_every_description_is_a_string():
    for code in LedgerError:
        assert isinstance(error_code_to_string(code), str)


def test_response_error_from_return_code():
    error = ResponseError.from_return_code(0x6986)
    assert error.return_code == 0x6986
    assert error.error_message == "Transaction rejected"
    assert str(error) == "Transaction rejected"
    assert error.to_dict() == {
        "return_code": 0x6986,
        "error_message": "Transaction rejected",
    }
    assert "0x6986" in repr(error)
