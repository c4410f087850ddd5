"""Result models for version, app and device queries."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from ..protocol.errors import LedgerError


@dataclass(frozen=True)
class ResponseVersion:
    """Version of the running app, as reported by GET_VERSION."""

    test_mode: bool
    major: int
    minor: int
    patch: int
    device_locked: bool
    target_id: str = ""

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ResponseAppInfo:
    """Name, version and status flags of the running app."""

    app_name: str
    app_version: str
    flag_len: int
    flags_value: int

    @property
    def flag_recovery(self) -> bool:
        return bool(self.flags_value & 0x01)

    @property
    def flag_signed_mcu_code(self) -> bool:
        return bool(self.flags_value & 0x02)

    @property
    def flag_onboarded(self) -> bool:
        return bool(self.flags_value & 0x04)

    @property
    def flag_pin_validated(self) -> bool:
        return bool(self.flags_value & 0x80)

    def to_dict(self) -> dict:
        return {
            **asdict(self),
            "flag_recovery": self.flag_recovery,
            "flag_signed_mcu_code": self.flag_signed_mcu_code,
            "flag_onboarded": self.flag_onboarded,
            "flag_pin_validated": self.flag_pin_validated,
        }


@dataclass(frozen=True)
class ResponseDeviceInfo:
    """Secure element and MCU details, available from the dashboard."""

    target_id: str
    se_version: str
    flag: str
    mcu_version: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DashboardOnly:
    """The command was refused because an app, not the dashboard, is open.

    This is an expected mode of the device rather than a failure, so it is
    returned instead of raised.
    """

    return_code: int = LedgerError.ClaNotSupported
    error_message: str = "This command is only available in the Dashboard"

    def to_dict(self) -> dict:
        return {
            "return_code": int(self.return_code),
            "error_message": self.error_message,
        }
