"""I2C peripherals living behind an I2C bus board."""

from __future__ import annotations

from mpusb.bus.channel import RegisterChannel
from mpusb.bus.registers import (
    COMMON_REGISTER_MAP,
    HD44780_CMD_CLEAR,
    HD44780_REGISTER_MAP,
    EepromCells,
    RegisterMap,
)
from mpusb.constants import I2C_ADDRESS_MAX, I2C_ADDRESS_MIN, peripheral_type_name
from mpusb.core.eeprom import RegisterEeprom
from mpusb.exceptions import InvalidParameterError, ReadOnlyRegisterError
from mpusb.models.device_info import PeripheralInfo
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)


class I2CPeripheral:
    """A device on a board's I2C bus, addressed by its 7-bit bus address.

    Native peripherals (those answering register 0 with the magic byte)
    also implement the shared EEPROM index/data protocol. Non-native
    devices only support raw register access.
    """

    register_map: RegisterMap = COMMON_REGISTER_MAP

    def __init__(
        self,
        channel: RegisterChannel,
        address: int,
        peripheral_id: int | None = None,
        is_native: bool = True,
    ) -> None:
        self._channel = channel
        self._address = address
        self._peripheral_id = peripheral_id
        self._is_native = is_native
        self._eeprom = RegisterEeprom(channel, address)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address=0x{self._address:02X}, type={self.type_name!r})"

    @property
    def address(self) -> int:
        return self._address

    @property
    def peripheral_id(self) -> int | None:
        return self._peripheral_id

    @property
    def is_native(self) -> bool:
        return self._is_native

    @property
    def type_name(self) -> str:
        return peripheral_type_name(self._peripheral_id if self._is_native else None)

    @property
    def eeprom(self) -> RegisterEeprom:
        return self._eeprom

    def info(self) -> PeripheralInfo:
        return PeripheralInfo(
            address=self._address,
            is_native=self._is_native,
            peripheral_id=self._peripheral_id,
            type_name=self.type_name,
        )

    # --- Raw register access ---

    def read(self, register: int, length: int) -> bytes:
        """Read *length* raw bytes from *register*."""
        return self._channel.read(self._address, register, length)

    def write(self, register: int, data: bytes | list[int]) -> None:
        """Write raw bytes to *register*.

        Raises:
            ReadOnlyRegisterError: If the register map declares it read-only.
        """
        if self.register_map.is_read_only(register):
            reg = self.register_map.by_address(register)
            raise ReadOnlyRegisterError(f"Register {reg.name} (0x{register:02X}) is read-only")
        self._channel.write(self._address, register, data)

    # --- Typed register access ---

    def read_register(self, name: str) -> int | bytes | str:
        """Read a fixed-width register by name and decode it."""
        reg = self.register_map.register(name)
        if not reg.readable:
            raise InvalidParameterError(f"Register {name} is write-only")
        if reg.width is None:
            raise InvalidParameterError(f"Register {name} has no fixed width; use read()")
        return reg.decode(self.read(reg.address, reg.width))

    def write_register(self, name: str, value: int | bytes | str) -> None:
        """Encode *value* and write it to a register by name."""
        reg = self.register_map.register(name)
        if not reg.writable:
            raise ReadOnlyRegisterError(f"Register {name} is read-only")
        self._channel.write(self._address, reg.address, reg.encode(value))

    # --- EEPROM ---

    def read_cell(self, index: int, length: int = 1) -> bytes:
        return self._eeprom.read_cell(index, length)

    def write_cell(self, index: int, data: bytes | list[int] | int) -> None:
        self._eeprom.write_cell(index, data)

    def read_named_cell(self, name: str) -> int:
        """Read a single-byte EEPROM cell declared in the register map."""
        cell = self.register_map.cell(name)
        return self._eeprom.read_cell(cell.index, cell.width)[0]

    def write_named_cell(self, name: str, value: int) -> None:
        """Write a single-byte EEPROM cell declared in the register map."""
        cell = self.register_map.cell(name)
        self._eeprom.write_cell(cell.index, value)

    def magic(self) -> int:
        return self.read_register("magic")

    def boot_mode(self) -> int:
        """Boot mode cell: 0x00 flash (bootloader) mode, 0xFF normal mode."""
        return self.read_cell(EepromCells.BOOT_MODE)[0]

    def stored_address(self) -> int:
        """Bus address stored in EEPROM cell 1 (kept pre-shifted on the device)."""
        return self.read_cell(EepromCells.ADDRESS)[0] >> 1

    def set_stored_address(self, new_address: int) -> None:
        """Persist a new bus address.

        The peripheral keeps answering on its current address until the
        board is re-enumerated.

        Raises:
            VerificationError: If the cell does not read back as written.
        """
        if not I2C_ADDRESS_MIN <= new_address <= I2C_ADDRESS_MAX:
            raise InvalidParameterError(
                f"Invalid I2C address 0x{new_address:02X} (must be 0x00-0x7F)"
            )
        self._eeprom.write_cell_verified(EepromCells.ADDRESS, new_address << 1)
        logger.info(
            "peripheral_address_stored",
            address=f"0x{self._address:02X}",
            new_address=f"0x{new_address:02X}",
        )


class CharacterDisplayPeripheral(I2CPeripheral):
    """HD44780-class character LCD controller.

    Width and height live in EEPROM cells and go through the index/data
    registers. Brightness, clear and text output are direct registers
    and never touch the EEPROM index.
    """

    register_map = HD44780_REGISTER_MAP

    def get_width(self) -> int:
        return self.read_named_cell("width")

    def set_width(self, columns: int) -> None:
        self.write_named_cell("width", columns)

    def get_height(self) -> int:
        return self.read_named_cell("height")

    def set_height(self, rows: int) -> None:
        self.write_named_cell("height", rows)

    def get_brightness(self) -> int:
        return self.read_register("brightness")

    def set_brightness(self, level: int) -> None:
        self.write_register("brightness", level)

    def clear(self) -> None:
        self.write_register("command", HD44780_CMD_CLEAR)

    def write_text(self, text: str | bytes) -> None:
        """Write characters at the current cursor position."""
        if not text:
            return
        self.write_register("text", text)
