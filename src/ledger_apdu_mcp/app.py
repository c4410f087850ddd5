"""Device queries and chunked command exchange for a Ledger app.

:class:`BaseApp` issues one exchange per query through the transport,
validates every reply with :func:`~.protocol.response.unwrap_response`, and
decodes the payload into a result model. Failures surface as
:class:`~.protocol.errors.ResponseError`; anything the transport raises that
is not already structured is normalized to ``UnknownTransportError``.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .models.device import (
    DashboardOnly,
    ResponseAppInfo,
    ResponseDeviceInfo,
    ResponseVersion,
)
from .protocol.byte_stream import ResponsePayload
from .protocol.chunks import (
    CHUNK_STATUS_LIST,
    DEFAULT_CHUNK_SIZE,
    payload_type,
    plan_chunks,
)
from .protocol.commands import (
    MAX_APDU_DATA,
    ApduHeader,
    Ins,
    P1,
    build_app_info,
    build_device_info,
    build_get_version,
)
from .protocol.errors import LedgerError, ResponseError
from .protocol.parser import parse_app_info, parse_device_info, parse_version
from .protocol.paths import serialize_path
from .protocol.response import process_error_response, read_status_word, unwrap_response
from .transport.base import DEFAULT_STATUS_LIST, Transport

logger = logging.getLogger(__name__)


def _frozen(mapping: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class AppParams:
    """Per-app protocol parameters.

    Attributes:
        cla: Class byte of the app.
        ins: Instruction table; must contain ``GET_VERSION``.
        p1_values: Named P1 values used by the app.
        chunk_size: Maximum message bytes per chunk.
        accepted_path_lengths: Allowed path segment counts, or empty for any.
        error_overrides: App-specific status word descriptions.
    """

    cla: int
    ins: Mapping[str, int] = field(
        default_factory=lambda: _frozen({"GET_VERSION": Ins.GET_VERSION})
    )
    p1_values: Mapping[str, int] = field(
        default_factory=lambda: _frozen({
            "ONLY_RETRIEVE": P1.ONLY_RETRIEVE,
            "SHOW_ADDRESS_IN_DEVICE": P1.SHOW_ADDRESS_IN_DEVICE,
        })
    )
    chunk_size: int = DEFAULT_CHUNK_SIZE
    accepted_path_lengths: tuple[int, ...] = ()
    error_overrides: Mapping[int, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not 0 <= self.cla <= 0xFF:
            raise ValueError(f"CLA must be 0-255, got {self.cla}")
        if "GET_VERSION" not in self.ins:
            raise ValueError("Instruction table must define GET_VERSION")
        if not 1 <= self.chunk_size <= MAX_APDU_DATA:
            raise ValueError(
                f"Chunk size must be 1-{MAX_APDU_DATA}, got {self.chunk_size}"
            )


class BaseApp:
    """Common queries shared by every Ledger app.

    Usage::

        app = BaseApp(transport, AppParams(cla=0x06))
        version = app.get_version()
        info = app.device_info()
    """

    def __init__(self, transport: Transport, params: AppParams) -> None:
        self.transport = transport
        self.params = params

    @property
    def cla(self) -> int:
        return self.params.cla

    @property
    def chunk_size(self) -> int:
        return self.params.chunk_size

    def _exchange(
        self,
        header: ApduHeader,
        data: bytes = b"",
        status_list: Collection[int] = DEFAULT_STATUS_LIST,
    ) -> bytes:
        # Malformed commands fail here, before anything reaches the device
        header.serialize(data)
        logger.debug("Sending %r with %d data byte(s)", header, len(data))
        try:
            return self.transport.exchange(header, data, status_list)
        except ResponseError:
            raise
        except Exception as e:
            error = process_error_response(e, self.params.error_overrides)
            logger.debug("Exchange failed: %r (%s)", error, e)
            raise error from e

    def _unwrap(self, raw: bytes) -> ResponsePayload:
        return unwrap_response(raw, self.params.error_overrides)

    # ─── PATHS & CHUNKS ───────────────────────────────────────────────

    def serialize_path(self, path: str) -> bytes:
        """Serialize ``path`` under this app's path length policy."""
        return serialize_path(path, self.params.accepted_path_lengths)

    def prepare_chunks(self, path: str, message: bytes) -> list[bytes]:
        """Plan the chunks of a multi-round command for this app."""
        return plan_chunks(
            path,
            message,
            self.params.chunk_size,
            self.params.accepted_path_lengths,
        )

    def send_generic_chunk(
        self,
        ins: int,
        p2: int,
        chunk_idx: int,
        chunk_num: int,
        chunk: bytes,
    ) -> ResponsePayload:
        """Send the ``chunk_idx``-th of ``chunk_num`` chunks (1-based).

        P1 carries the INIT/ADD/LAST position tag. Known rejection codes are
        allowed through the transport so they surface here as structured
        errors.

        Raises:
            ResponseError: If the device rejects the chunk.
        """
        header = ApduHeader(self.cla, ins, payload_type(chunk_idx, chunk_num), p2)
        raw = self._exchange(header, chunk, CHUNK_STATUS_LIST)
        return self._unwrap(raw)

    def sign_send_chunk(
        self,
        ins: int,
        chunk_idx: int,
        chunk_num: int,
        chunk: bytes,
    ) -> ResponsePayload:
        return self.send_generic_chunk(ins, 0, chunk_idx, chunk_num, chunk)

    def send_chunks(
        self,
        ins: int,
        path: str,
        message: bytes,
        p2: int = 0,
    ) -> ResponsePayload:
        """Plan and send a complete chunked command, strictly in order.

        Each chunk is sent only after the previous reply has been
        validated; the first failure stops the sequence.

        Returns:
            The payload of the final (LAST) reply.
        """
        chunks = self.prepare_chunks(path, message)
        total = len(chunks)
        response: ResponsePayload | None = None
        for idx, chunk in enumerate(chunks, start=1):
            response = self.send_generic_chunk(ins, p2, idx, total, chunk)
        logger.debug("Sent %d chunk(s) for INS 0x%02X", total, ins)
        return response

    # ─── DEVICE QUERIES ───────────────────────────────────────────────

    def get_version(self) -> ResponseVersion:
        """Query the running app's version.

        Raises:
            ResponseError: On device error, transport failure, or an
                unrecognized payload length.
        """
        header = build_get_version(self.cla, self.params.ins["GET_VERSION"])
        payload = self._unwrap(self._exchange(header))
        return parse_version(payload)

    def app_info(self) -> ResponseAppInfo:
        """Query the running app's name, version and flags."""
        payload = self._unwrap(self._exchange(build_app_info()))
        return parse_app_info(payload)

    def device_info(self) -> ResponseDeviceInfo | DashboardOnly:
        """Query secure element and MCU details.

        Returns:
            :class:`ResponseDeviceInfo`, or :class:`DashboardOnly` when an app
            is open and the device refuses the command.
        """
        raw = self._exchange(
            build_device_info(),
            status_list=(LedgerError.NoErrors, LedgerError.ClaNotSupported),
        )
        if read_status_word(raw) == LedgerError.ClaNotSupported:
            logger.info("Device info is only available from the dashboard")
            return DashboardOnly()
        return parse_device_info(self._unwrap(raw))
