"""USB HID transport to a Ledger device.

Supports both ``hidapi`` (preferred) and ``pyusb`` backends. APDUs are
framed into 64-byte reports by :mod:`..protocol.framing`; this module only
moves reports on and off the wire.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass

from ..protocol.commands import ApduHeader
from ..protocol.framing import (
    DEFAULT_CHANNEL,
    HID_PACKET_SIZE,
    unwrap_response_reports,
    wrap_apdu,
)
from ..protocol.response import read_status_word
from .base import DEFAULT_STATUS_LIST, TransportStatusError

logger = logging.getLogger(__name__)

VENDOR_ID = 0x2C97
HID_INTERFACE = 0
HID_USAGE_PAGE = 0xFFA0
EP_IN = 0x82
EP_OUT = 0x02
READ_TIMEOUT_MS = 30000


@dataclass
class DeviceDescriptor:
    """Basic device identification from USB descriptors."""

    vendor_id: int = VENDOR_ID
    product_id: int = 0
    manufacturer: str = ""
    product: str = ""
    path: str = ""


class HIDTransport:
    """Exchanges APDUs with a Ledger device over USB HID.

    Usage::

        transport = HIDTransport()
        transport.open()
        reply = transport.exchange(ApduHeader(0xB0, 0x01))
        transport.close()
    """

    def __init__(
        self,
        vendor_id: int = VENDOR_ID,
        product_id: int | None = None,
        channel: int = DEFAULT_CHANNEL,
        timeout_ms: int = READ_TIMEOUT_MS,
    ) -> None:
        self._vendor_id = vendor_id
        self._product_id = product_id
        self._channel = channel
        self._timeout_ms = timeout_ms
        self._device = None
        self._backend: str = ""
        self._connected = False
        self._descriptor = DeviceDescriptor(vendor_id=vendor_id)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def descriptor(self) -> DeviceDescriptor:
        return self._descriptor

    def __enter__(self) -> HIDTransport:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> DeviceDescriptor:
        """Open the device, trying hidapi first, then pyusb.

        Raises:
            ConnectionError: If no device can be found or opened.
        """
        try:
            return self._open_hidapi()
        except Exception as e:
            logger.debug("hidapi backend failed: %s, trying pyusb", e)

        try:
            return self._open_pyusb()
        except Exception as e:
            raise ConnectionError(
                f"Could not connect to Ledger device (vendor {self._vendor_id:#06x}). "
                f"Ensure the device is connected, unlocked, and you have permissions. "
                f"Last error: {e}"
            ) from e

    def _open_hidapi(self) -> DeviceDescriptor:
        """Open using the hidapi library."""
        import hid

        candidates = [
            info for info in hid.enumerate(self._vendor_id, self._product_id or 0)
            if info.get("interface_number") == HID_INTERFACE
            or info.get("usage_page") == HID_USAGE_PAGE
        ]
        if not candidates:
            raise ConnectionError("Device not found via hidapi")
        info = candidates[0]

        device = hid.device()
        device.open_path(info["path"])
        device.set_nonblocking(False)

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        path = info["path"]
        self._descriptor = DeviceDescriptor(
            vendor_id=self._vendor_id,
            product_id=info.get("product_id", 0),
            manufacturer=info.get("manufacturer_string") or "",
            product=info.get("product_string") or "",
            path=path.decode() if isinstance(path, bytes) else str(path),
        )

        logger.info(
            "Connected via hidapi: %s %s",
            self._descriptor.manufacturer,
            self._descriptor.product,
        )
        return self._descriptor

    def _open_pyusb(self) -> DeviceDescriptor:
        """Open using pyusb + libusb."""
        import usb.core
        import usb.util

        if self._product_id is None:
            dev = usb.core.find(idVendor=self._vendor_id)
        else:
            dev = usb.core.find(idVendor=self._vendor_id, idProduct=self._product_id)
        if dev is None:
            raise ConnectionError("Device not found via pyusb")

        if dev.is_kernel_driver_active(HID_INTERFACE):
            dev.detach_kernel_driver(HID_INTERFACE)

        usb.util.claim_interface(dev, HID_INTERFACE)

        self._device = dev
        self._backend = "pyusb"
        self._connected = True
        self._descriptor = DeviceDescriptor(
            vendor_id=self._vendor_id,
            product_id=dev.idProduct,
            manufacturer=usb.util.get_string(dev, dev.iManufacturer) or "",
            product=usb.util.get_string(dev, dev.iProduct) or "",
        )

        logger.info(
            "Connected via pyusb: %s %s",
            self._descriptor.manufacturer,
            self._descriptor.product,
        )
        return self._descriptor

    def close(self) -> None:
        """Close the USB connection."""
        if not self._connected:
            return

        try:
            if self._backend == "hidapi":
                self._device.close()
            elif self._backend == "pyusb":
                import usb.util
                usb.util.release_interface(self._device, HID_INTERFACE)
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            logger.info("Disconnected")

    def write(self, report: bytes) -> int:
        """Write one 64-byte HID report.

        Raises:
            ConnectionError: If not connected.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        if len(report) != HID_PACKET_SIZE:
            raise ValueError(
                f"HID report must be {HID_PACKET_SIZE} bytes, got {len(report)}"
            )

        if self._backend == "hidapi":
            # Leading zero is the HID report id
            return self._device.write(b"\x00" + report)
        elif self._backend == "pyusb":
            return self._device.write(EP_OUT, report, timeout=self._timeout_ms)
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")

    def read(self) -> bytes:
        """Read one 64-byte HID report.

        Raises:
            ConnectionError: If not connected.
            TimeoutError: If nothing arrives within the timeout.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        if self._backend == "hidapi":
            data = self._device.read(HID_PACKET_SIZE, self._timeout_ms)
        elif self._backend == "pyusb":
            data = self._device.read(EP_IN, HID_PACKET_SIZE, timeout=self._timeout_ms)
        else:
            raise RuntimeError(f"Unknown backend: {self._backend}")

        if not data:
            raise TimeoutError(f"No HID report within {self._timeout_ms} ms")
        return bytes(data)

    def exchange(
        self,
        header: ApduHeader,
        data: bytes = b"",
        status_list: Collection[int] = DEFAULT_STATUS_LIST,
    ) -> bytes:
        """Send one APDU and return the raw reply, status word included.

        Raises:
            TransportStatusError: If the status word is not in ``status_list``.
        """
        apdu = header.serialize(data)
        logger.debug("=> %s", apdu.hex())

        for report in wrap_apdu(apdu, self._channel, HID_PACKET_SIZE):
            self.write(report)

        reports: list[bytes] = []
        response = None
        while response is None:
            reports.append(self.read())
            response = unwrap_response_reports(reports, self._channel)

        logger.debug("<= %s", response.hex())

        status = read_status_word(response)
        if status not in status_list:
            raise TransportStatusError(status)
        return response
