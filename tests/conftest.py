"""Shared fixtures: a scripted in-memory transport."""

from __future__ import annotations

import pytest

from ledger_apdu_mcp.app import AppParams, BaseApp
from ledger_apdu_mcp.transport.base import TransportStatusError


class FakeTransport:
    """Replays queued replies and records every exchange.

    Queue ``bytes`` to return them as raw replies, or an exception instance
    to raise it from ``exchange``. Like a real transport, replies whose
    status word is not in the allow-list raise ``TransportStatusError``.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.sent: list[tuple] = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    def exchange(self, header, data=b"", status_list=(0x9000,)):
        self.sent.append((header, bytes(data), tuple(status_list)))
        if not self.replies:
            raise RuntimeError("No reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if len(reply) >= 2:
            status = int.from_bytes(reply[-2:], "big")
            if status not in status_list:
                raise TransportStatusError(status)
        return reply


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def app(transport) -> BaseApp:
    params = AppParams(cla=0x90, chunk_size=255, accepted_path_lengths=(3, 5))
    return BaseApp(transport, params)
