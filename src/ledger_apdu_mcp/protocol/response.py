"""Status-word handling for raw device replies.

Reply layout::

    +------------------+-------------+
    |     Payload      | Status word |
    | variable length  | 2 bytes, BE |
    +------------------+-------------+

Every reply goes through :func:`unwrap_response`; nothing else looks at the
status word directly.
"""

from __future__ import annotations

from collections.abc import Mapping

from .byte_stream import ResponsePayload
from .errors import LedgerError, ResponseError, error_code_to_string

STATUS_WORD_SIZE = 2


def read_status_word(raw: bytes) -> int:
    """Return the trailing big-endian status word of ``raw``.

    Raises:
        ResponseError: ``EmptyBuffer`` if ``raw`` is shorter than 2 bytes.
    """
    if len(raw) < STATUS_WORD_SIZE:
        raise ResponseError(
            LedgerError.EmptyBuffer,
            "Response buffer is too short to contain a status word",
        )
    return int.from_bytes(raw[-STATUS_WORD_SIZE:], "big")


def unwrap_response(
    raw: bytes,
    overrides: Mapping[int, str] | None = None,
) -> ResponsePayload:
    """Validate a device reply and return its payload.

    Args:
        raw: Complete reply bytes, status word included.
        overrides: Optional per-call error descriptions.

    Returns:
        A :class:`ResponsePayload` positioned at the start of the payload.

    Raises:
        ResponseError: If the reply is too short or the status word is
            anything other than ``NoErrors``. Any payload accompanying an
            error is appended to the message as ASCII text.
    """
    return_code = read_status_word(raw)
    payload = bytes(raw[:-STATUS_WORD_SIZE])

    if return_code == LedgerError.NoErrors:
        return ResponsePayload(payload)

    message = error_code_to_string(return_code, overrides)
    if payload:
        message = f"{message} : {payload.decode('ascii', errors='replace')}"
    raise ResponseError(return_code, message)


def process_error_response(
    error: BaseException,
    overrides: Mapping[int, str] | None = None,
) -> ResponseError:
    """Normalize a transport-side failure into a :class:`ResponseError`.

    Structured errors pass through unchanged. Exceptions carrying a numeric
    ``status_code`` are described through ``overrides`` first, then the
    description table; anything else becomes ``UnknownTransportError``.
    """
    if isinstance(error, ResponseError):
        return error

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return ResponseError.from_return_code(status_code, overrides)

    return ResponseError.from_return_code(LedgerError.UnknownTransportError)
