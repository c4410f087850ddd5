"""Transports carrying APDUs to the device."""

from .base import Transport, TransportStatusError
