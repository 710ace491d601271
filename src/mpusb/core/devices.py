"""Typed wrappers for USB controller boards."""

from __future__ import annotations

import threading
from collections.abc import Callable

from mpusb.bus.channel import RegisterChannel
from mpusb.bus.registers import EepromCells
from mpusb.constants import BOARD_SERIAL_ANY, BoardKind
from mpusb.core.discovery import scan_peripherals
from mpusb.core.eeprom import BoardEeprom
from mpusb.core.peripherals import I2CPeripheral
from mpusb.exceptions import InvalidParameterError
from mpusb.models.config import SessionConfig
from mpusb.models.device_info import BoardInfo, I2cScanResult
from mpusb.transport.base import BoardHandle, Transport
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)


class GenericDevice:
    """A board with no type-specific capabilities.

    Unknown or unsupported board types land here and stay usable for
    EEPROM access and serial changes.

    Usage:
        with session.open_or_none(serial=12) as board:
            board.set_serial(13)
    """

    kind = BoardKind.GENERIC

    def __init__(
        self,
        transport: Transport,
        handle: BoardHandle,
        info: BoardInfo,
        lock: threading.RLock | None = None,
    ) -> None:
        self._transport = transport
        self._handle = handle
        self._info = info
        self._lock = lock if lock is not None else threading.RLock()
        self._eeprom = BoardEeprom(transport, handle, self._lock, present=info.has_eeprom)
        self._closed = False

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(serial={self._info.serial}, "
            f"board_type={self._info.board_type!r})"
        )

    def __enter__(self) -> GenericDevice:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def handle(self) -> BoardHandle:
        return self._handle

    @property
    def info(self) -> BoardInfo:
        return self._info

    @property
    def board_id(self) -> int:
        return self._info.board_id

    @property
    def board_type(self) -> str:
        return self._info.board_type

    @property
    def serial(self) -> int:
        return self._info.serial

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def eeprom(self) -> BoardEeprom:
        return self._eeprom

    def read_cell(self, index: int, length: int = 1) -> bytes:
        return self._eeprom.read_cell(index, length)

    def write_cell(self, index: int, data: bytes | list[int] | int) -> None:
        self._eeprom.write_cell(index, data)

    def set_serial(self, new_serial: int) -> None:
        """Write a new serial number to EEPROM cell 1 and verify it.

        Raises:
            InvalidParameterError: If the serial is outside 1-255.
            VerificationError: If the cell does not read back as written;
                the previous serial is left in place.
        """
        if new_serial == BOARD_SERIAL_ANY or not 0 <= new_serial <= 0xFF:
            raise InvalidParameterError(f"Invalid serial {new_serial} (must be 1-255)")

        old_serial = self._info.serial
        self._eeprom.write_cell_verified(EepromCells.ADDRESS, new_serial)
        self._info.serial = new_serial
        logger.info("board_serial_changed", old=old_serial, new=new_serial)

    def close(self) -> None:
        """Release the transport handle."""
        if self._closed:
            return
        self._closed = True
        self._transport.close(self._handle)
        logger.debug("board_closed", serial=self._info.serial)


class PowerDevice(GenericDevice):
    """Power controller board with one or more switched outlets."""

    kind = BoardKind.POWER

    @property
    def power_outlets(self) -> int | None:
        return self._info.power_devices

    @property
    def power_current(self) -> int | None:
        return self._info.power_current

    def set_power(self, item_id: int, on: bool) -> None:
        """Switch outlet *item_id* (1-based) on or off."""
        outlets = self._info.power_devices
        if item_id < 1 or (outlets and item_id > outlets):
            raise InvalidParameterError(
                f"Invalid outlet {item_id} (board has {outlets or 'unknown'} outlet(s))"
            )
        with self._lock:
            self._transport.set_power(self._handle, item_id, bool(on))
        logger.info("power_set", serial=self._info.serial, outlet=item_id, on=bool(on))


class I2CBusDevice(GenericDevice):
    """Board exposing an I2C bus with mpusb peripherals behind it.

    The peripheral list is scanned on first access and cached. Hardware
    added or removed afterwards is not seen until :meth:`rescan` (or a
    session refresh) runs.
    """

    kind = BoardKind.I2C_BUS

    def __init__(
        self,
        transport: Transport,
        handle: BoardHandle,
        info: BoardInfo,
        lock: threading.RLock | None = None,
        probe_range: Callable[[], range] | None = None,
        scan_lock: threading.RLock | None = None,
    ) -> None:
        super().__init__(transport, handle, info, lock)
        self._channel = RegisterChannel(transport, handle, self._lock)
        self._probe_range = probe_range
        self._scan_lock = scan_lock if scan_lock is not None else threading.RLock()
        self._peripherals: list[I2CPeripheral] | None = None
        self._last_range: range | None = None

    @property
    def channel(self) -> RegisterChannel:
        return self._channel

    def _current_range(self) -> range:
        if self._probe_range is not None:
            return self._probe_range()
        return SessionConfig().probe_range

    def list_peripherals(self) -> list[I2CPeripheral]:
        """Return the cached peripheral list, scanning the bus on first use."""
        with self._scan_lock:
            if self._peripherals is None:
                self._scan()
            return list(self._peripherals)

    def rescan(self) -> list[I2CPeripheral]:
        """Drop the cache and scan the bus again."""
        with self._scan_lock:
            self._scan()
            return list(self._peripherals)

    def invalidate(self) -> None:
        """Drop the cached peripheral list; the next access scans again."""
        with self._scan_lock:
            self._peripherals = None

    def peripheral_by_address(self, address: int) -> I2CPeripheral | None:
        for peripheral in self.list_peripherals():
            if peripheral.address == address:
                return peripheral
        return None

    def scan_result(self) -> I2cScanResult:
        """Summary of the cached scan."""
        peripherals = self.list_peripherals()
        probed = self._last_range
        return I2cScanResult(
            probe_min=probed.start if probed else 0,
            probe_max=probed.stop - 1 if probed else 0,
            devices=[p.address for p in peripherals],
        )

    def _scan(self) -> None:
        probe = self._current_range()
        logger.info(
            "i2c_scan_start",
            serial=self._info.serial,
            probe_min=probe.start,
            probe_max=probe.stop - 1,
        )
        self._peripherals = scan_peripherals(self._channel, probe)
        self._last_range = probe


Board = GenericDevice | PowerDevice | I2CBusDevice
