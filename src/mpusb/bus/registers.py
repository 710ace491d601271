"""Register map definitions for native mpusb I2C peripherals.

Every native peripheral shares the same four low registers:

    0x00  magic        (read-only, always 0xAE)
    0x01  type         (read-only, PeripheralType)
    0x02  EEPROM index (selects a logical EEPROM cell)
    0x03  EEPROM data  (transfers the selected cell)

Device kinds add direct registers above these and name extra EEPROM
cells. Direct registers transfer in a single transaction; EEPROM cells
always go through the index/data pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

from mpusb.exceptions import InvalidParameterError


# ---------------------------------------------------------------------------
# Register / cell addresses
# ---------------------------------------------------------------------------

class CommonRegs(IntEnum):
    """Registers present on every native peripheral."""

    MAGIC = 0x00
    TYPE = 0x01
    EEPROM_INDEX = 0x02
    EEPROM_DATA = 0x03


class Hd44780Regs(IntEnum):
    """Direct registers of the HD44780 LCD controller firmware."""

    TEXT = 0x40         # Character output
    COMMAND = 0x41      # HD44780 instruction byte
    BRIGHTNESS = 0x42   # Backlight PWM duty


class EepromCells(IntEnum):
    """EEPROM cells shared by boards and peripherals."""

    BOOT_MODE = 0   # 0x00 flash mode, 0xFF normal mode
    ADDRESS = 1     # Peripheral bus address (pre-shifted) / board serial


class Hd44780Cells(IntEnum):
    """EEPROM cells of the HD44780 LCD controller firmware."""

    WIDTH = 10
    HEIGHT = 11


RESERVED_CELLS = frozenset({EepromCells.BOOT_MODE, EepromCells.ADDRESS})

HD44780_CMD_CLEAR = 0x01


# ---------------------------------------------------------------------------
# Register descriptors
# ---------------------------------------------------------------------------

class Access(StrEnum):
    """Register access rights."""

    READ = "r"
    WRITE = "w"
    READ_WRITE = "rw"

    @property
    def readable(self) -> bool:
        return "r" in self.value

    @property
    def writable(self) -> bool:
        return "w" in self.value


class Codec(StrEnum):
    """Semantic type of a register's contents."""

    UINT8 = "uint8"
    BYTES = "bytes"
    TEXT = "text"


@dataclass(frozen=True)
class Register:
    """A directly addressed register.

    ``width`` of ``None`` marks a variable-length register (text output).
    """

    name: str
    address: int
    access: Access
    width: int | None = 1
    codec: Codec = Codec.UINT8

    @property
    def readable(self) -> bool:
        return self.access.readable

    @property
    def writable(self) -> bool:
        return self.access.writable

    def encode(self, value: int | bytes | str) -> bytes:
        """Encode a semantic value into register bytes."""
        if isinstance(value, bool):
            raise InvalidParameterError(f"{self.name}: expected int or bytes, got {value!r}")
        if isinstance(value, int):
            # A lone int is a single byte for every codec
            if not 0 <= value <= 0xFF:
                raise InvalidParameterError(
                    f"{self.name}: value {value} is not a valid byte (0-255)"
                )
            data = bytes([value])
        elif self.codec is Codec.UINT8:
            raise InvalidParameterError(f"{self.name}: expected int, got {value!r}")
        elif isinstance(value, str):
            if self.codec is not Codec.TEXT:
                raise InvalidParameterError(f"{self.name}: expected bytes, got {value!r}")
            try:
                data = value.encode("ascii")
            except UnicodeEncodeError as exc:
                raise InvalidParameterError(
                    f"{self.name}: text must be ASCII"
                ) from exc
        else:
            try:
                data = bytes(value)
            except (TypeError, ValueError) as exc:
                raise InvalidParameterError(
                    f"{self.name}: {value!r} is not a byte sequence"
                ) from exc

        if self.width is not None and len(data) != self.width:
            raise InvalidParameterError(
                f"{self.name}: expected {self.width} byte(s), got {len(data)}"
            )
        return data

    def decode(self, raw: bytes) -> int | bytes | str:
        """Decode register bytes into a semantic value."""
        if self.width is not None and len(raw) != self.width:
            raise InvalidParameterError(
                f"{self.name}: expected {self.width} byte(s), got {len(raw)}"
            )
        if self.codec is Codec.UINT8:
            return raw[0]
        if self.codec is Codec.TEXT:
            return raw.decode("ascii", errors="replace")
        return bytes(raw)


@dataclass(frozen=True)
class EepromCell:
    """A logical EEPROM cell reached through the index/data registers."""

    name: str
    index: int
    width: int = 1
    reserved: bool = False


@dataclass(frozen=True)
class RegisterMap:
    """Register and EEPROM cell contract of one device kind."""

    name: str
    registers: tuple[Register, ...] = ()
    cells: tuple[EepromCell, ...] = ()
    _by_name: dict[str, Register] = field(init=False, repr=False, compare=False)
    _by_address: dict[int, Register] = field(init=False, repr=False, compare=False)
    _cells: dict[str, EepromCell] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {r.name: r for r in self.registers})
        object.__setattr__(self, "_by_address", {r.address: r for r in self.registers})
        object.__setattr__(self, "_cells", {c.name: c for c in self.cells})

    def register(self, name: str) -> Register:
        try:
            return self._by_name[name]
        except KeyError:
            raise InvalidParameterError(
                f"Register {name!r} is not defined for {self.name}"
            ) from None

    def cell(self, name: str) -> EepromCell:
        try:
            return self._cells[name]
        except KeyError:
            raise InvalidParameterError(
                f"EEPROM cell {name!r} is not defined for {self.name}"
            ) from None

    def by_address(self, address: int) -> Register | None:
        return self._by_address.get(address)

    def is_read_only(self, address: int) -> bool:
        reg = self._by_address.get(address)
        return reg is not None and not reg.writable

    def extend(
        self,
        name: str,
        registers: tuple[Register, ...] = (),
        cells: tuple[EepromCell, ...] = (),
    ) -> RegisterMap:
        """Return a new map with additional registers and cells."""
        return RegisterMap(
            name=name,
            registers=self.registers + registers,
            cells=self.cells + cells,
        )


COMMON_REGISTER_MAP = RegisterMap(
    name="common",
    registers=(
        Register("magic", CommonRegs.MAGIC, Access.READ),
        Register("type", CommonRegs.TYPE, Access.READ),
        Register("eeprom_index", CommonRegs.EEPROM_INDEX, Access.READ_WRITE),
        Register("eeprom_data", CommonRegs.EEPROM_DATA, Access.READ_WRITE, width=None, codec=Codec.BYTES),
    ),
    cells=(
        EepromCell("boot_mode", EepromCells.BOOT_MODE, reserved=True),
        EepromCell("address", EepromCells.ADDRESS, reserved=True),
    ),
)

HD44780_REGISTER_MAP = COMMON_REGISTER_MAP.extend(
    name="hd44780",
    registers=(
        Register("text", Hd44780Regs.TEXT, Access.WRITE, width=None, codec=Codec.TEXT),
        Register("command", Hd44780Regs.COMMAND, Access.WRITE),
        Register("brightness", Hd44780Regs.BRIGHTNESS, Access.READ_WRITE),
    ),
    cells=(
        EepromCell("width", Hd44780Cells.WIDTH),
        EepromCell("height", Hd44780Cells.HEIGHT),
    ),
)
