"""Tests for the MCP tools that do not need a device."""

import json

import pytest

from ledger_apdu_mcp import server


def test_serialize_path_tool():
    result = server.serialize_path("m/44'/461'/0/0/5")
    assert result["hex"] == "2c000080cd010080000000000000000005000000"


def test_serialize_path_tool_error():
    result = server.serialize_path("m/44'/0'", required_lengths=[3, 5])
    assert result["return_code"] == 0xFFFFFFFF
    assert "Invalid path length" in result["error"]


def test_deserialize_path_tool():
    result = server.deserialize_path("2c000080cd010080")
    assert result["path"] == "m/44'/461'"


def test_deserialize_path_tool_bad_hex():
    assert "error" in server.deserialize_path("zz")


def test_plan_chunks_tool():
    result = server.plan_chunks("m/44'/0'/0'", "0102030405", chunk_size=4)
    assert [c["payload_type"] for c in result["chunks"]] == ["INIT", "ADD", "LAST"]
    assert result["chunks"][2]["hex"] == "05"


def test_describe_error_tool():
    result = server.describe_error(0x6A80)
    assert result == {
        "return_code": 0x6A80,
        "hex": "0x6A80",
        "error_message": "Bad key handle",
    }


def test_error_table_resource():
    table = json.loads(server.resource_error_table())
    assert table["0x9000"] == "No errors"


def test_queries_require_connection(monkeypatch):
    monkeypatch.setattr(server, "_transport", None)
    with pytest.raises(RuntimeError, match="Not connected"):
        server.get_version()


def test_app_params_from_environment(monkeypatch):
    monkeypatch.setenv("LEDGER_APP_CLA", "0x06")
    monkeypatch.setenv("LEDGER_CHUNK_SIZE", "128")
    params = server._app_params()
    assert params.cla == 0x06
    assert params.chunk_size == 128


def test_app_params_reject_oversized_chunk(monkeypatch):
    monkeypatch.setenv("LEDGER_CHUNK_SIZE", "300")
    with pytest.raises(ValueError, match="Chunk size"):
        server._app_params()
