"""Register channel: addressed byte reads/writes on one board's I2C bus.

A RegisterChannel binds a Transport to a single board handle. Device
wrappers take a channel rather than the raw transport, which keeps the
register protocol testable against a mock transport.
"""

from __future__ import annotations

import threading

from mpusb.constants import I2C_ADDRESS_MAX, I2C_ADDRESS_MIN
from mpusb.exceptions import InvalidParameterError
from mpusb.transport.base import BoardHandle, Transport
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)


def _check_address(device_address: int) -> None:
    if not I2C_ADDRESS_MIN <= device_address <= I2C_ADDRESS_MAX:
        raise InvalidParameterError(
            f"Invalid I2C address 0x{device_address:02X} (must be 0x00-0x7F)"
        )


def _check_register(register: int) -> None:
    if not 0 <= register <= 0xFF:
        raise InvalidParameterError(f"Invalid register {register} (must be 0-255)")


class RegisterChannel:
    """I2C register access bound to one board.

    All transactions run under ``lock``. The lock is re-entrant so that
    multi-step sequences (EEPROM select-then-transfer) can hold it
    across several channel calls.
    """

    def __init__(
        self,
        transport: Transport,
        handle: BoardHandle,
        lock: threading.RLock | None = None,
    ) -> None:
        self._transport = transport
        self._handle = handle
        self._lock = lock if lock is not None else threading.RLock()

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def handle(self) -> BoardHandle:
        return self._handle

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def read(self, device_address: int, register: int, length: int) -> bytes:
        """Read *length* bytes from *register* of the device at *device_address*.

        Raises:
            InvalidParameterError: If an argument is out of range.
            BusFaultError: If the transaction fails.
        """
        _check_address(device_address)
        _check_register(register)
        if length < 1:
            raise InvalidParameterError(f"Invalid read length {length}")

        with self._lock:
            data = bytes(
                self._transport.raw_read(self._handle, device_address, register, length)
            )
        logger.debug(
            "i2c_read",
            dev=f"0x{device_address:02X}",
            reg=f"0x{register:02X}",
            data=data.hex(" "),
        )
        return data

    def write(self, device_address: int, register: int, data: bytes | list[int]) -> None:
        """Write *data* to *register* of the device at *device_address*.

        Raises:
            InvalidParameterError: If an argument is out of range.
            BusFaultError: If the transaction fails.
        """
        _check_address(device_address)
        _check_register(register)
        for i, val in enumerate(data):
            if not 0 <= val <= 0xFF:
                raise InvalidParameterError(f"data[{i}] = {val} is not a valid byte (0-255)")
        payload = bytes(data)

        with self._lock:
            self._transport.raw_write(self._handle, device_address, register, payload)
        logger.debug(
            "i2c_write",
            dev=f"0x{device_address:02X}",
            reg=f"0x{register:02X}",
            data=payload.hex(" "),
        )
