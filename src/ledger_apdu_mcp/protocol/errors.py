"""Status words, their descriptions, and the structured error raised on failure.

Every reply from the device ends in a 2-byte status word. ``0x9000`` means
success; every other value maps to a :class:`ResponseError` carrying the
numeric code and a human-readable message.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum
from types import MappingProxyType


class LedgerError(IntEnum):
    """Known return codes (status words, U2F codes and sentinels)."""

    U2FUnknown = 1
    U2FBadRequest = 2
    U2FConfigurationUnsupported = 3
    U2FDeviceIneligible = 4
    U2FTimeout = 5
    Timeout = 14
    GpAuthFailed = 0x6300
    PinRemainingAttempts = 0x63C0
    ExecutionError = 0x6400
    WrongLength = 0x6700
    IncorrectLength = 0x6700
    MissingCriticalParameter = 0x6800
    ErrorDerivingKeys = 0x6802
    EmptyBuffer = 0x6982
    SecurityStatusNotSatisfied = 0x6982
    OutputBufferTooSmall = 0x6983
    DataIsInvalid = 0x6984
    ConditionsOfUseNotSatisfied = 0x6985
    CommandIncompatibleFileStructure = 0x6981
    TransactionRejected = 0x6986
    BadKeyHandle = 0x6A80
    IncorrectData = 0x6A80
    ReferencedDataNotFound = 0x6A88
    NotEnoughMemorySpace = 0x6A84
    FileAlreadyExists = 0x6A89
    InvalidP1P2 = 0x6B00
    IncorrectP1P2 = 0x6B00
    InstructionNotSupported = 0x6D00
    InsNotSupported = 0x6D00
    UnknownApdu = 0x6D02
    DeviceNotOnboarded = 0x6D07
    DeviceNotOnboarded2 = 0x6611
    CustomImageBootloader = 0x662F
    CustomImageEmpty = 0x662E
    AppDoesNotSeemToBeOpen = 0x6E01
    ClaNotSupported = 0x6E00
    Licensing = 0x6F42
    UnknownError = 0x6F00
    TechnicalProblem = 0x6F00
    SignVerifyError = 0x6F01
    Halted = 0x6FAA
    NoErrors = 0x9000
    DeviceIsBusy = 0x9001
    UnknownTransportError = 0xFFFF
    AccessConditionNotFulfilled = 0x9804
    AlgorithmNotSupported = 0x9484
    CodeBlocked = 0x9840
    CodeNotInitialized = 0x9802
    ContradictionInvalidation = 0x9810
    ContradictionSecretCodeStatus = 0x9808
    InvalidKcv = 0x9485
    InvalidOffset = 0x9402
    LockedDevice = 0x5515
    MaxValueReached = 0x9850
    MemoryProblem = 0x9240
    NoEfSelected = 0x9400
    InconsistentFile = 0x9408
    FileNotFound = 0x9404
    UserRefusedOnDevice = 0x5501
    NotEnoughSpace = 0x5102

    GenericError = 0xFFFFFFFF


# Several names above are aliases sharing one value (e.g. BadKeyHandle and
# IncorrectData); the table is keyed by value so each code has one message.
ERROR_DESCRIPTIONS: Mapping[int, str] = MappingProxyType({
    LedgerError.U2FUnknown: "U2F: Unknown",
    LedgerError.U2FBadRequest: "U2F: Bad request",
    LedgerError.U2FConfigurationUnsupported: "U2F: Configuration unsupported",
    LedgerError.U2FDeviceIneligible: "U2F: Device Ineligible",
    LedgerError.U2FTimeout: "U2F: Timeout",
    LedgerError.Timeout: "Timeout",
    LedgerError.NoErrors: "No errors",
    LedgerError.DeviceIsBusy: "Device is busy",
    LedgerError.ErrorDerivingKeys: "Error deriving keys",
    LedgerError.ExecutionError: "Execution Error",
    LedgerError.WrongLength: "Wrong Length",
    LedgerError.EmptyBuffer: "Empty Buffer",
    LedgerError.OutputBufferTooSmall: "Output buffer too small",
    LedgerError.DataIsInvalid: "Data is invalid",
    LedgerError.TransactionRejected: "Transaction rejected",
    LedgerError.BadKeyHandle: "Bad key handle",
    LedgerError.InvalidP1P2: "Invalid P1/P2",
    LedgerError.InstructionNotSupported: "Instruction not supported",
    LedgerError.AppDoesNotSeemToBeOpen: "App does not seem to be open",
    LedgerError.UnknownError: "Unknown error",
    LedgerError.SignVerifyError: "Sign/verify error",
    LedgerError.UnknownTransportError: "Unknown transport error",
    LedgerError.GpAuthFailed: "GP Authentication Failed",
    LedgerError.PinRemainingAttempts: "PIN Remaining Attempts",
    LedgerError.MissingCriticalParameter: "Missing Critical Parameter",
    LedgerError.ConditionsOfUseNotSatisfied: "Conditions of Use Not Satisfied",
    LedgerError.CommandIncompatibleFileStructure: "Command Incompatible with File Structure",
    LedgerError.ReferencedDataNotFound: "Referenced Data Not Found",
    LedgerError.NotEnoughMemorySpace: "Not Enough Memory Space",
    LedgerError.FileAlreadyExists: "File Already Exists",
    LedgerError.UnknownApdu: "Unknown APDU",
    LedgerError.DeviceNotOnboarded: "Device Not Onboarded",
    LedgerError.DeviceNotOnboarded2: "Device Not Onboarded (Secondary)",
    LedgerError.CustomImageBootloader: "Custom Image Bootloader Error",
    LedgerError.CustomImageEmpty: "Custom Image Empty",
    LedgerError.ClaNotSupported: "CLA Not Supported",
    LedgerError.Licensing: "Licensing Error",
    LedgerError.Halted: "Device Halted",
    LedgerError.AccessConditionNotFulfilled: "Access Condition Not Fulfilled",
    LedgerError.AlgorithmNotSupported: "Algorithm Not Supported",
    LedgerError.CodeBlocked: "Code Blocked",
    LedgerError.CodeNotInitialized: "Code Not Initialized",
    LedgerError.ContradictionInvalidation: "Contradiction Invalidation",
    LedgerError.ContradictionSecretCodeStatus: "Contradiction with Secret Code Status",
    LedgerError.InvalidKcv: "Invalid KCV",
    LedgerError.InvalidOffset: "Invalid Offset",
    LedgerError.LockedDevice: "Device Locked",
    LedgerError.MaxValueReached: "Maximum Value Reached",
    LedgerError.MemoryProblem: "Memory Problem",
    LedgerError.NoEfSelected: "No EF Selected",
    LedgerError.InconsistentFile: "Inconsistent File",
    LedgerError.FileNotFound: "File Not Found",
    LedgerError.UserRefusedOnDevice: "User Refused on Device",
    LedgerError.NotEnoughSpace: "Not Enough Space",
    LedgerError.GenericError: "Generic Error",
})


def error_code_to_string(
    return_code: int,
    overrides: Mapping[int, str] | None = None,
) -> str:
    """Resolve a return code to a human-readable description.

    Caller-supplied ``overrides`` take precedence over the built-in table.
    Unknown codes produce ``"Unknown Return Code: 0x..."``; this function
    never raises.

    Args:
        return_code: Numeric status word or sentinel.
        overrides: Optional per-call descriptions (e.g. app-specific codes).
    """
    if overrides and return_code in overrides:
        return overrides[return_code]
    if return_code in ERROR_DESCRIPTIONS:
        return ERROR_DESCRIPTIONS[return_code]
    return f"Unknown Return Code: 0x{int(return_code):X}"


class ResponseError(Exception):
    """A failure carrying the device (or sentinel) return code."""

    def __init__(self, return_code: int, error_message: str) -> None:
        super().__init__(error_message)
        self.return_code = int(return_code)
        self.error_message = error_message

    @classmethod
    def from_return_code(
        cls,
        return_code: int,
        overrides: Mapping[int, str] | None = None,
    ) -> ResponseError:
        return cls(return_code, error_code_to_string(return_code, overrides))

    def to_dict(self) -> dict:
        return {
            "return_code": self.return_code,
            "error_message": self.error_message,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(return_code=0x{self.return_code:04X}, "
            f"error_message={self.error_message!r})"
        )


class PathError(ResponseError, ValueError):
    """A derivation path (string or binary) failed validation."""

    def __init__(self, error_message: str) -> None:
        super().__init__(LedgerError.GenericError, error_message)


class InvalidPathPrefix(PathError):
    pass


class InvalidPathLength(PathError):
    pass


class InvalidPathSegment(PathError):
    pass


class SegmentOutOfRange(PathError):
    pass


class InvalidBufferLength(PathError):
    pass


class EmptyPath(PathError):
    pass


class BufferUnderrun(ResponseError):
    """A read or skip would run past the end of the buffer."""

    def __init__(self, error_message: str = "Attempt to read beyond buffer length") -> None:
        super().__init__(LedgerError.UnknownError, error_message)


class InvalidOffset(ResponseError):
    """An explicit offset or length lies outside the buffer."""

    def __init__(self, error_message: str = "Invalid offset") -> None:
        super().__init__(LedgerError.InvalidOffset, error_message)
