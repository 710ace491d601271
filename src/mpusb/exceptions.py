"""Exception hierarchy mapping firmware status codes to Python exceptions."""

from __future__ import annotations

from mpusb.constants import I2cStatus


class MpusbError(Exception):
    """Base exception for all mpusb errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TransportError(MpusbError):
    """Error in the USB transport layer."""


class BusFaultError(TransportError):
    """A bus transaction failed (no ACK, timeout, disconnect)."""


class DeviceNotFoundError(MpusbError):
    """No matching board was found."""


class VerificationError(MpusbError):
    """A written value did not read back as expected."""

    def __init__(
        self,
        message: str,
        expected: bytes | None = None,
        actual: bytes | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class InvalidParameterError(MpusbError):
    """An invalid parameter was passed to an operation."""


class ReadOnlyRegisterError(InvalidParameterError):
    """Attempted write to a read-only register."""


class ReservedCellError(InvalidParameterError):
    """Attempted plain write to a reserved EEPROM cell."""


class UnsupportedError(MpusbError):
    """The requested operation is not supported on this device."""


# Map firmware I2C status codes to exception classes
_I2C_STATUS_MAP: dict[int, type[MpusbError] | None] = {
    I2cStatus.SUCCESS: None,
    I2cStatus.INVALID_DEVICE: InvalidParameterError,
    I2cStatus.MISSING_ACK: BusFaultError,
    I2cStatus.TIMEOUT: BusFaultError,
    I2cStatus.OTHER: BusFaultError,
}

_I2C_STATUS_NAMES: dict[int, str] = {
    I2cStatus.SUCCESS: "Success",
    I2cStatus.INVALID_DEVICE: "Invalid device",
    I2cStatus.MISSING_ACK: "Protocol error. Missing ACK",
    I2cStatus.TIMEOUT: "Timeout",
    I2cStatus.OTHER: "Unknown",
}


def i2c_status_name(status: int) -> str:
    return _I2C_STATUS_NAMES.get(status, f"I2C_ERROR(0x{status:02X})")


def check_i2c_status(status: int, operation: str = "") -> None:
    """Check a firmware I2C status byte and raise if it is not a success.

    Intended for transport implementations that receive the raw status
    byte from the controller.

    Args:
        status: Status byte returned by the controller.
        operation: Description of the operation for error messages.

    Raises:
        MpusbError: If status is not ``I2cStatus.SUCCESS``.
    """
    if status == I2cStatus.SUCCESS:
        return

    exc_class = _I2C_STATUS_MAP.get(status, BusFaultError)
    if exc_class is None:
        return

    status_name = i2c_status_name(status)
    msg = f"{operation}: {status_name}" if operation else status_name
    raise exc_class(msg, status_code=status)
