"""Core domain layer: board wrappers, peripherals and sessions."""

from mpusb.core.classifier import classify_board, read_board_info
from mpusb.core.devices import Board, GenericDevice, I2CBusDevice, PowerDevice
from mpusb.core.discovery import classify_peripheral, scan_peripherals
from mpusb.core.eeprom import BoardEeprom, EepromAccessor, RegisterEeprom
from mpusb.core.peripherals import CharacterDisplayPeripheral, I2CPeripheral
from mpusb.core.session import OpenResult, OpenStatus, Session

__all__ = [
    "Board",
    "BoardEeprom",
    "CharacterDisplayPeripheral",
    "EepromAccessor",
    "GenericDevice",
    "I2CBusDevice",
    "I2CPeripheral",
    "OpenResult",
    "OpenStatus",
    "PowerDevice",
    "RegisterEeprom",
    "Session",
    "classify_board",
    "classify_peripheral",
    "read_board_info",
    "scan_peripherals",
]
