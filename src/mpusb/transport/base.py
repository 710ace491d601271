"""Abstract transport contract for the USB controller link.

The transport owns enumeration of USB boards and performs single raw
requests against them. Everything above it (register protocol, EEPROM
cells, classification) lives in :mod:`mpusb.bus` and :mod:`mpusb.core`.

Implementations must serialize access to the physical link themselves
and report every failed request by raising
:class:`~mpusb.exceptions.BusFaultError` (or another
:class:`~mpusb.exceptions.TransportError`).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from mpusb.constants import BOARD_SERIAL_ANY, BOARD_TYPE_ANY

# Opaque per-board handle produced by the transport
BoardHandle = Any

# Attribute names every transport must answer in get_attribute()
BOARD_ATTRIBUTES = (
    "board_id",
    "serial",
    "processor_id",
    "processor_speed",
    "has_eeprom",
    "fw_major",
    "fw_minor",
    "power_devices",
    "power_current",
)


class Transport(ABC):
    """Abstract base for USB controller transports."""

    def __init__(self) -> None:
        self._debug = False

    @property
    def debug(self) -> bool:
        return self._debug

    def set_debug(self, enabled: bool) -> None:
        """Enable verbose tracing inside the transport."""
        self._debug = bool(enabled)

    @abstractmethod
    def enumerate(self) -> list[BoardHandle]:
        """Return a handle for every visible board."""

    @abstractmethod
    def open(
        self,
        board_type: int = BOARD_TYPE_ANY,
        serial: int = BOARD_SERIAL_ANY,
    ) -> BoardHandle:
        """Open the first board matching the filters.

        Raises:
            DeviceNotFoundError: If no board matches.
            TransportError: If the link fails while searching.
        """

    @abstractmethod
    def close(self, handle: BoardHandle) -> None:
        """Release a board handle."""

    @abstractmethod
    def get_attribute(self, handle: BoardHandle, name: str) -> Any:
        """Return board metadata, one of :data:`BOARD_ATTRIBUTES`."""

    @abstractmethod
    def raw_read(
        self,
        handle: BoardHandle,
        device_address: int,
        register: int,
        length: int,
    ) -> bytes:
        """Read *length* bytes from *register* of an I2C device."""

    @abstractmethod
    def raw_write(
        self,
        handle: BoardHandle,
        device_address: int,
        register: int,
        data: bytes,
    ) -> None:
        """Write *data* to *register* of an I2C device."""

    @abstractmethod
    def read_eeprom(self, handle: BoardHandle, cell: int) -> int:
        """Read one byte of the controller's own EEPROM."""

    @abstractmethod
    def write_eeprom(self, handle: BoardHandle, cell: int, value: int) -> None:
        """Write one byte of the controller's own EEPROM."""

    @abstractmethod
    def set_power(self, handle: BoardHandle, item_id: int, on: bool) -> None:
        """Switch an outlet of a power board."""
