"""mpusb: Python driver layer for mpusb USB controller boards and their I2C peripherals."""

__version__ = "0.1.0"

from mpusb.constants import BOARD_SERIAL_ANY, BOARD_TYPE_ANY, BoardKind, BoardType, PeripheralType
from mpusb.core import (
    Board,
    CharacterDisplayPeripheral,
    GenericDevice,
    I2CBusDevice,
    I2CPeripheral,
    OpenResult,
    OpenStatus,
    PowerDevice,
    Session,
)
from mpusb.exceptions import (
    BusFaultError,
    DeviceNotFoundError,
    InvalidParameterError,
    MpusbError,
    TransportError,
    VerificationError,
)
from mpusb.models import SessionConfig
from mpusb.transport import Transport

__all__ = [
    "BOARD_SERIAL_ANY",
    "BOARD_TYPE_ANY",
    "Board",
    "BoardKind",
    "BoardType",
    "BusFaultError",
    "CharacterDisplayPeripheral",
    "DeviceNotFoundError",
    "GenericDevice",
    "I2CBusDevice",
    "I2CPeripheral",
    "InvalidParameterError",
    "MpusbError",
    "OpenResult",
    "OpenStatus",
    "PeripheralType",
    "PowerDevice",
    "Session",
    "SessionConfig",
    "Transport",
    "TransportError",
    "VerificationError",
    "__version__",
]
