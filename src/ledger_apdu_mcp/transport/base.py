"""The exchange contract every transport implements."""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from ..protocol.commands import ApduHeader
from ..protocol.errors import LedgerError, error_code_to_string

DEFAULT_STATUS_LIST = (LedgerError.NoErrors,)


class TransportStatusError(Exception):
    """The device answered with a status word outside the allow-list."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        description = error_code_to_string(status_code)
        super().__init__(f"{description} (0x{status_code:04X})")


class Transport(Protocol):
    """Anything that can carry one APDU to the device and return its reply."""

    def exchange(
        self,
        header: ApduHeader,
        data: bytes = b"",
        status_list: Collection[int] = DEFAULT_STATUS_LIST,
    ) -> bytes:
        """Send one command and return the raw reply, status word included.

        Implementations raise :class:`TransportStatusError` when the status
        word is not in ``status_list``, and may raise anything else on I/O
        failure.
        """
        ...
