"""Board classification: raw transport handle -> typed board wrapper."""

from __future__ import annotations

import threading
from collections.abc import Callable

from mpusb.constants import BoardKind, BoardType, board_type_name, processor_name
from mpusb.core.devices import Board, GenericDevice, I2CBusDevice, PowerDevice
from mpusb.models.device_info import BoardInfo
from mpusb.transport.base import BoardHandle, Transport
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)

BOARD_KINDS: dict[int, BoardKind] = {
    BoardType.POWER: BoardKind.POWER,
    BoardType.I2C: BoardKind.I2C_BUS,
}


def board_kind(board_id: int) -> BoardKind:
    """Map a raw board type code to its wrapper kind (unknown -> generic)."""
    return BOARD_KINDS.get(board_id, BoardKind.GENERIC)


def read_board_info(transport: Transport, handle: BoardHandle) -> BoardInfo:
    """Query the transport for a board's metadata."""
    board_id = int(transport.get_attribute(handle, "board_id"))
    processor_id = int(transport.get_attribute(handle, "processor_id") or 0)
    kind = board_kind(board_id)

    power_devices = power_current = None
    if kind == BoardKind.POWER:
        power_devices = transport.get_attribute(handle, "power_devices")
        power_current = transport.get_attribute(handle, "power_current")

    return BoardInfo(
        board_id=board_id,
        board_type=board_type_name(board_id),
        kind=kind,
        serial=int(transport.get_attribute(handle, "serial") or 0),
        processor_id=processor_id,
        processor_type=processor_name(processor_id),
        processor_speed=int(transport.get_attribute(handle, "processor_speed") or 0),
        has_eeprom=bool(transport.get_attribute(handle, "has_eeprom")),
        fw_major=int(transport.get_attribute(handle, "fw_major") or 0),
        fw_minor=int(transport.get_attribute(handle, "fw_minor") or 0),
        power_devices=power_devices,
        power_current=power_current,
    )


def classify_board(
    transport: Transport,
    handle: BoardHandle,
    probe_range: Callable[[], range] | None = None,
    scan_lock: threading.RLock | None = None,
) -> Board:
    """Build the typed wrapper for an open board handle.

    Unrecognized board type codes never fail classification; they yield a
    :class:`GenericDevice` limited to EEPROM access.

    Args:
        transport: Transport the handle belongs to.
        handle: Open board handle.
        probe_range: Callable returning the current peripheral probe range,
            consulted when an I2C bus board first scans.
        scan_lock: Lock serializing peripheral scans with configuration
            changes.
    """
    info = read_board_info(transport, handle)
    lock = threading.RLock()

    match info.kind:
        case BoardKind.POWER:
            board: Board = PowerDevice(transport, handle, info, lock)
        case BoardKind.I2C_BUS:
            board = I2CBusDevice(
                transport,
                handle,
                info,
                lock,
                probe_range=probe_range,
                scan_lock=scan_lock,
            )
        case _:
            if info.board_id not in BoardType.__members__.values():
                logger.warning("board_type_unknown", board_id=info.board_id, serial=info.serial)
            board = GenericDevice(transport, handle, info, lock)

    logger.debug(
        "board_classified",
        kind=str(info.kind),
        board_type=info.board_type,
        serial=info.serial,
        firmware=info.firmware_version,
    )
    return board
