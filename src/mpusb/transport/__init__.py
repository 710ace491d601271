"""Transport layer for hardware communication."""

from mpusb.transport.base import BOARD_ATTRIBUTES, BoardHandle, Transport

__all__ = [
    "BOARD_ATTRIBUTES",
    "BoardHandle",
    "Transport",
]
