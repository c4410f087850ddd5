"""Protocol layer: byte streams, paths, status words, chunking, framing and parsing."""

from .byte_stream import ByteStream, ResponsePayload
from .chunks import PayloadType, payload_type, plan_chunks
from .commands import ApduHeader
from .errors import LedgerError, ResponseError, error_code_to_string
from .paths import deserialize_path, serialize_path
from .response import unwrap_response
