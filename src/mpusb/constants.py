"""Board and peripheral constants mirrored from the mpusb firmware."""

from __future__ import annotations

from enum import IntEnum, StrEnum


# Wildcards accepted by open()
BOARD_TYPE_ANY = 0x00
BOARD_SERIAL_ANY = 0x00

# Every native peripheral answers register 0 with this byte
PERIPHERAL_MAGIC = 0xAE

# Default peripheral probe window (inclusive)
PROBE_MIN_DEFAULT = 0x08
PROBE_MAX_DEFAULT = 0x10

# 7-bit I2C address space
I2C_ADDRESS_MIN = 0x00
I2C_ADDRESS_MAX = 0x7F

# Boot mode cell values
BOOT_MODE_FLASH = 0x00
BOOT_MODE_NORMAL = 0xFF


class BoardType(IntEnum):
    """Board type codes reported by the controller firmware."""

    ANY = 0x00
    POWER = 0x01
    I2C = 0x02
    NEOGEO = 0x03
    UNKNOWN = 0x04


class BoardKind(StrEnum):
    """Classified board variant."""

    GENERIC = "generic"
    POWER = "power"
    I2C_BUS = "i2c_bus"


class ProcessorType(IntEnum):
    """Controller processor codes."""

    PIC_18F2450 = 0x00
    PIC_18F2550 = 0x01
    ATMEGA168 = 0x02
    ATMEGA88 = 0x03
    UNKNOWN = 0x04


class PeripheralType(IntEnum):
    """Type register values of native I2C peripherals."""

    BOOTLOADER = 0x00
    HD44780 = 0x01
    SERVO = 0x02
    GENERIC_IO = 0x03
    UNKNOWN = 0x04


class I2cStatus(IntEnum):
    """Firmware status codes for I2C transactions."""

    SUCCESS = 0x00
    INVALID_DEVICE = 0x01
    MISSING_ACK = 0x02
    TIMEOUT = 0x03
    OTHER = 0x04


BOARD_TYPE_NAMES: dict[int, str] = {
    BoardType.ANY: "ANY",
    BoardType.POWER: "Power Controller",
    BoardType.I2C: "Generic I2C",
    BoardType.NEOGEO: "NeoGeo",
}

PROCESSOR_NAMES: dict[int, str] = {
    ProcessorType.PIC_18F2450: "18F2450",
    ProcessorType.PIC_18F2550: "18F2550",
    ProcessorType.ATMEGA168: "ATmega168",
    ProcessorType.ATMEGA88: "ATmega88",
}

PERIPHERAL_TYPE_NAMES: dict[int, str] = {
    PeripheralType.BOOTLOADER: "18F690 Boot Loader",
    PeripheralType.HD44780: "HD44780 LCD Panel",
    PeripheralType.SERVO: "Servo Controller",
    PeripheralType.GENERIC_IO: "Generic 8-bit IO",
}

NON_NATIVE_PERIPHERAL_NAME = "Non-mpusb Device"
UNKNOWN_NAME = "Unknown"


def board_type_name(board_id: int) -> str:
    return BOARD_TYPE_NAMES.get(board_id, UNKNOWN_NAME)


def processor_name(processor_id: int) -> str:
    return PROCESSOR_NAMES.get(processor_id, UNKNOWN_NAME)


def peripheral_type_name(peripheral_id: int | None) -> str:
    """Human-readable name for a peripheral type register value.

    ``None`` means the device did not answer with the magic byte.
    """
    if peripheral_id is None:
        return NON_NATIVE_PERIPHERAL_NAME
    return PERIPHERAL_TYPE_NAMES.get(peripheral_id, UNKNOWN_NAME)
