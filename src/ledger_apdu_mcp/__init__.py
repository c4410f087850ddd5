"""APDU codec and device queries for Ledger hardware devices."""

from .app import AppParams, BaseApp
from .protocol.byte_stream import ByteStream, ResponsePayload
from .protocol.chunks import PayloadType, plan_chunks
from .protocol.errors import (
    ERROR_DESCRIPTIONS,
    LedgerError,
    ResponseError,
    error_code_to_string,
)
from .protocol.paths import deserialize_path, numbers_to_path, serialize_path
from .protocol.response import unwrap_response
