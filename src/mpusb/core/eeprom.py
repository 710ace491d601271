"""EEPROM cell access for boards and I2C peripherals."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from mpusb.bus.channel import RegisterChannel
from mpusb.bus.registers import RESERVED_CELLS, CommonRegs
from mpusb.exceptions import (
    InvalidParameterError,
    MpusbError,
    ReservedCellError,
    UnsupportedError,
    VerificationError,
)
from mpusb.transport.base import BoardHandle, Transport
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)


def _check_cell(index: int, length: int = 1) -> None:
    if not 0 <= index <= 0xFF:
        raise InvalidParameterError(f"Invalid EEPROM cell {index} (must be 0-255)")
    if length < 1 or index + length - 1 > 0xFF:
        raise InvalidParameterError(f"Invalid EEPROM length {length} at cell {index}")


def _to_bytes(data: bytes | list[int] | int) -> bytes:
    if isinstance(data, int):
        data = [data]
    for i, val in enumerate(data):
        if not 0 <= val <= 0xFF:
            raise InvalidParameterError(f"data[{i}] = {val} is not a valid byte (0-255)")
    return bytes(data)


class EepromAccessor(ABC):
    """Uniform read/write of persistent configuration cells.

    Cells 0 (boot mode) and 1 (address / serial) are reserved. Plain
    writes to them are refused; use :meth:`write_cell_verified`.
    """

    @property
    @abstractmethod
    def lock(self) -> threading.RLock:
        """Lock held across multi-step cell sequences."""

    @abstractmethod
    def _read(self, index: int, length: int) -> bytes:
        """Read *length* consecutive cells starting at *index*."""

    @abstractmethod
    def _write(self, index: int, data: bytes) -> None:
        """Write *data* to consecutive cells starting at *index*."""

    def read_cell(self, index: int, length: int = 1) -> bytes:
        """Read one or more consecutive EEPROM cells."""
        _check_cell(index, length)
        return self._read(index, length)

    def write_cell(self, index: int, data: bytes | list[int] | int) -> None:
        """Write one or more consecutive EEPROM cells.

        Raises:
            ReservedCellError: If the write touches cell 0 or 1.
        """
        payload = _to_bytes(data)
        _check_cell(index, len(payload))
        touched = set(range(index, index + len(payload)))
        if touched & RESERVED_CELLS:
            raise ReservedCellError(
                f"EEPROM cell {index}: cells {sorted(RESERVED_CELLS)} are reserved"
            )
        self._write(index, payload)

    def write_cell_verified(self, index: int, data: bytes | list[int] | int) -> None:
        """Write cells, read them back, and restore the old value on mismatch.

        This is the only path allowed to modify reserved cells.

        Raises:
            VerificationError: If the read-back differs from *data*.
        """
        payload = _to_bytes(data)
        _check_cell(index, len(payload))

        with self.lock:
            previous = self._read(index, len(payload))
            self._write(index, payload)
            readback = self._read(index, len(payload))
            if readback == payload:
                logger.info("eeprom_write_verified", cell=index, value=payload.hex())
                return

            logger.error(
                "eeprom_verify_failed",
                cell=index,
                expected=payload.hex(),
                actual=readback.hex(),
            )
            if readback != previous:
                try:
                    self._write(index, previous)
                except MpusbError:
                    logger.warning("eeprom_restore_failed", cell=index, value=previous.hex())
        raise VerificationError(
            f"EEPROM cell {index}: wrote {payload.hex()}, read back {readback.hex()}",
            expected=payload,
            actual=readback,
        )


class RegisterEeprom(EepromAccessor):
    """EEPROM of an I2C peripheral, reached through the index/data registers.

    Selecting the cell and transferring its data is one critical
    section on the channel lock; an interleaved select from another
    caller would otherwise redirect the transfer to the wrong cell.
    """

    def __init__(self, channel: RegisterChannel, device_address: int) -> None:
        self._channel = channel
        self._device_address = device_address

    @property
    def lock(self) -> threading.RLock:
        return self._channel.lock

    def _read(self, index: int, length: int) -> bytes:
        with self._channel.lock:
            self._channel.write(self._device_address, CommonRegs.EEPROM_INDEX, [index])
            return self._channel.read(self._device_address, CommonRegs.EEPROM_DATA, length)

    def _write(self, index: int, data: bytes) -> None:
        with self._channel.lock:
            self._channel.write(self._device_address, CommonRegs.EEPROM_INDEX, [index])
            self._channel.write(self._device_address, CommonRegs.EEPROM_DATA, data)


class BoardEeprom(EepromAccessor):
    """EEPROM of the board controller itself, one transport request per cell."""

    def __init__(
        self,
        transport: Transport,
        handle: BoardHandle,
        lock: threading.RLock,
        present: bool = True,
    ) -> None:
        self._transport = transport
        self._handle = handle
        self._lock = lock
        self._present = present

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def present(self) -> bool:
        return self._present

    def _require_eeprom(self) -> None:
        if not self._present:
            raise UnsupportedError("Board has no on-board EEPROM")

    def _read(self, index: int, length: int) -> bytes:
        self._require_eeprom()
        with self._lock:
            values = [
                self._transport.read_eeprom(self._handle, cell)
                for cell in range(index, index + length)
            ]
        logger.debug("eeprom_read", cell=index, values=values)
        return bytes(values)

    def _write(self, index: int, data: bytes) -> None:
        self._require_eeprom()
        with self._lock:
            for offset, value in enumerate(data):
                self._transport.write_eeprom(self._handle, index + offset, value)
        logger.debug("eeprom_write", cell=index, values=list(data))
