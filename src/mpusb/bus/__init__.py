"""I2C register access and register maps."""

from mpusb.bus.channel import RegisterChannel
from mpusb.bus.registers import (
    COMMON_REGISTER_MAP,
    HD44780_REGISTER_MAP,
    Access,
    Codec,
    CommonRegs,
    EepromCell,
    EepromCells,
    Hd44780Cells,
    Hd44780Regs,
    Register,
    RegisterMap,
)

__all__ = [
    "Access",
    "COMMON_REGISTER_MAP",
    "Codec",
    "CommonRegs",
    "EepromCell",
    "EepromCells",
    "HD44780_REGISTER_MAP",
    "Hd44780Cells",
    "Hd44780Regs",
    "Register",
    "RegisterChannel",
    "RegisterMap",
]
